"""Question randomizer: shuffles question order and each question's options."""
from __future__ import annotations

import random
import re
import string

from examprep.schemas.question import Question, SessionQuestion
from examprep.services.errors import MalformedQuestionError
from examprep.services.shuffle import shuffle

_OPTION_PREFIX_RE = re.compile(r"^([A-E])\)")


def option_letter(index: int) -> str:
    """Display letter for an option position: 0 -> 'A', 1 -> 'B', ..."""
    return string.ascii_uppercase[index]


def extract_option_letter(option_text: str) -> str | None:
    """Letter of an option written as "C) text"; None when there is no prefix."""
    match = _OPTION_PREFIX_RE.match(option_text)
    return match.group(1) if match else None


def _check_question(question: Question, position: int) -> None:
    if not 0 <= question.correct_index < len(question.options):
        raise MalformedQuestionError(
            "correct index does not point into the options",
            position=position,
            number=question.number,
            correct_index=question.correct_index,
            option_count=len(question.options),
        )


def shuffle_options(question: Question, display_order: int, rng: random.Random | None = None) -> SessionQuestion:
    """Shuffle one question's options and remap its correct index."""
    order = shuffle(range(len(question.options)), rng)
    data = question.model_dump()
    data.update(
        options=[question.options[i] for i in order],
        correct_index=order.index(question.correct_index),
        original_correct_index=question.correct_index,
        display_order=display_order,
    )
    return SessionQuestion.model_validate(data)


def randomize_session(questions: list[Question], rng: random.Random | None = None) -> list[SessionQuestion]:
    """Shuffle question order, then each question's options; number them 1..n."""
    for position, question in enumerate(questions):
        _check_question(question, position)
    rng = rng or random.Random()
    return [
        shuffle_options(question, display_order, rng)
        for display_order, question in enumerate(shuffle(questions, rng), start=1)
    ]
