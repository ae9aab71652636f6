"""Quiz session flow as pure transitions over SessionState snapshots.

The host (HTTP client or UI) owns the current snapshot and the timer; every
function here returns a new snapshot. Skipping never completes a session;
finishing is always a separate, explicit call.
"""
from __future__ import annotations

import random
from typing import Iterable

from examprep.schemas.question import Question
from examprep.schemas.session import SessionResult, SessionState
from examprep.services.errors import AnswerVectorError
from examprep.services.randomizer import randomize_session
from examprep.services.scoring import calculate_results

MIXED_EXAM_TYPES = "Mixed"


def start_session(questions: list[Question], rng: random.Random | None = None) -> SessionState:
    session_questions = randomize_session(questions, rng)
    return SessionState(questions=session_questions, answers=[None] * len(session_questions))


def _last_position(state: SessionState) -> int:
    return max(0, len(state.questions) - 1)


def _with_answer(state: SessionState, answer: int | None) -> list[int | None]:
    answers = list(state.answers)
    answers[state.position] = answer
    return answers


def select_answer(state: SessionState, option_index: int) -> SessionState:
    """Record an option for the current question and move on (stays on the last one)."""
    if not state.questions:
        raise AnswerVectorError("session has no questions")
    question = state.questions[state.position]
    if not 0 <= option_index < len(question.options):
        raise AnswerVectorError(
            "selected option does not exist",
            position=state.position,
            answer=option_index,
            option_count=len(question.options),
        )
    return state.model_copy(
        update={
            "answers": _with_answer(state, option_index),
            "position": min(state.position + 1, _last_position(state)),
        }
    )


def skip_question(state: SessionState) -> SessionState:
    """Leave the current question blank and move on."""
    if not state.questions:
        return state
    return state.model_copy(
        update={
            "answers": _with_answer(state, None),
            "position": min(state.position + 1, _last_position(state)),
        }
    )


def previous_question(state: SessionState) -> SessionState:
    return state.model_copy(update={"position": max(0, state.position - 1)})


def go_to(state: SessionState, position: int) -> SessionState:
    if not 0 <= position <= _last_position(state):
        raise AnswerVectorError("position out of range", position=position, questions=len(state.questions))
    return state.model_copy(update={"position": position})


def answered_count(state: SessionState) -> int:
    return sum(1 for answer in state.answers if answer is not None)


def progress_percent(state: SessionState) -> float:
    if not state.questions:
        return 0.0
    return (state.position + 1) / len(state.questions) * 100


def exam_types_label(exam_types: Iterable[str]) -> str:
    """Unique exam types joined in first-seen order, or "Mixed" when none."""
    unique = list(dict.fromkeys(t for t in exam_types if t))
    return ", ".join(unique) if unique else MIXED_EXAM_TYPES


def finish_session(state: SessionState, time_spent: int = 0, exam_types: Iterable[str] = ()) -> SessionResult:
    """Read the answer vector once and score it."""
    return calculate_results(
        state.answers,
        state.questions,
        time_spent=time_spent,
        exam_types=exam_types_label(exam_types),
    )
