"""Pydantic schemas for quiz sessions and their results."""
from pydantic import BaseModel, Field, field_serializer

from examprep.schemas.question import SessionQuestion
from examprep.schemas.student import StudentProfile


class PerformanceTier(BaseModel):
    key: str
    label: str
    emblem: str
    color: str


class WrongAnswer(BaseModel):
    display_order: int
    question_number: int
    question: str
    user_answer: str
    correct_answer: str
    explanation: str = ""


class SessionResult(BaseModel):
    """Outcome of one completed session. Created once, never mutated."""

    correct: int
    wrong: int
    skipped: int
    total: int
    net: float
    score: float
    percentage: int
    performance: PerformanceTier
    time_spent: int = 0
    exam_types: str = ""
    wrong_answers: list[WrongAnswer] = []

    class Config:
        frozen = True

    @field_serializer("net", "score")
    def _two_decimals(self, value: float) -> str:
        return f"{value:.2f}"


class SessionState(BaseModel):
    """Snapshot of a session in progress. Transitions return new snapshots."""

    questions: list[SessionQuestion]
    answers: list[int | None]
    position: int = 0

    class Config:
        frozen = True


class CompleteSessionIn(BaseModel):
    course_name: str | None = None
    exam_types: list[str] = []
    time_spent: int = Field(default=0, ge=0)
    questions: list[SessionQuestion]
    answers: list[int | None]


class CompleteSessionOut(BaseModel):
    result: SessionResult
    profile: StudentProfile
