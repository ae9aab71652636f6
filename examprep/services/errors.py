"""Error kinds raised by the quiz engine and its collaborators."""
from __future__ import annotations

from typing import Any


class QuizDataError(ValueError):
    """Malformed quiz data: a programmer/data error, never a runtime condition."""

    kind = "malformed_input"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "context": self.context}


class MalformedQuestionError(QuizDataError):
    """Question whose correct index does not point into its options."""

    kind = "malformed_question"


class AnswerVectorError(QuizDataError):
    """Answer vector that does not line up with the session questions."""

    kind = "answer_vector"


class ProfileStoreError(RuntimeError):
    """The profile store could not read or write a student profile."""

    kind = "persistence"

    def __init__(self, message: str, student_id: str) -> None:
        super().__init__(message)
        self.student_id = student_id
