"""Session scoring: negative marking, scaled score, percentage and tiers."""
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from examprep.schemas.question import SessionQuestion
from examprep.schemas.session import PerformanceTier, SessionResult, WrongAnswer
from examprep.schemas.student import DEFAULT_STATUS
from examprep.services.errors import AnswerVectorError, MalformedQuestionError

# Net: every 3 wrong answers cancel 1 correct; scaled: 2 points per net, floored at 0
WRONG_ANSWERS_PER_PENALTY = 3
POINTS_PER_NET = 2

# (minimum percentage, key, label, emblem, color), highest first
PERFORMANCE_BANDS = [
    (90, "excellent", "Excellent", "🎉", "#22c55e"),
    (80, "very_good", "Very Good", "⭐", "#3b82f6"),
    (70, "good", "Good", "👍", "#8b5cf6"),
    (60, "average", "Average", "📚", "#f59e0b"),
    (50, "passing", "Passing", "😐", "#f97316"),
    (0, "insufficient", "Insufficient", "😔", "#ef4444"),
]

# Profile status by running average score (same points scale as scaled score)
STATUS_BANDS = [
    (85, "excellent performance! 🎉"),
    (75, "doing great ⭐"),
    (60, "on the right track 👍"),
    (40, "needs more practice 📚"),
]
LOWEST_STATUS = "needs a lot more practice 😔"


def calculate_net(correct: int, wrong: int) -> float:
    """Correct minus a third of wrong. Not floored."""
    return correct - wrong / WRONG_ANSWERS_PER_PENALTY


def calculate_score(correct: int, wrong: int) -> float:
    """Scaled score: net doubled, never below zero."""
    return max(0.0, calculate_net(correct, wrong) * POINTS_PER_NET)


def calculate_percentage(correct: int, total: int) -> int:
    """Correct share of total, rounded half up; 0 for an empty session."""
    if total == 0:
        return 0
    return math.floor(correct / total * 100 + 0.5)


def round_score(value: float) -> float:
    """Round to two decimals, half up (not banker's rounding)."""
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_score(value: float) -> str:
    return f"{round_score(value):.2f}"


def format_time(seconds: int) -> str:
    """Seconds as m:ss."""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


def performance_tier(percentage: int) -> PerformanceTier:
    """Band for a 0-100 percentage; the last band starts at 0 so every percentage matches."""
    for minimum, key, label, emblem, color in PERFORMANCE_BANDS:
        if percentage >= minimum:
            return PerformanceTier(key=key, label=label, emblem=emblem, color=color)


def student_status(average_score: float) -> str:
    """Motivational status line shown on the profile."""
    if average_score == 0:
        return DEFAULT_STATUS
    for minimum, status in STATUS_BANDS:
        if average_score >= minimum:
            return status
    return LOWEST_STATUS


def _check_answer(answer: int | None, question: SessionQuestion, position: int) -> None:
    if answer is None:
        return
    if not 0 <= answer < len(question.options):
        raise AnswerVectorError(
            "selected option does not exist",
            position=position,
            answer=answer,
            option_count=len(question.options),
        )


def calculate_results(
    answers: Sequence[int | None],
    questions: Sequence[SessionQuestion],
    time_spent: int = 0,
    exam_types: str = "",
) -> SessionResult:
    """Score an answer vector against the session questions it was collected for."""
    if len(answers) != len(questions):
        raise AnswerVectorError(
            "answer vector length does not match question count",
            answers=len(answers),
            questions=len(questions),
        )

    correct = wrong = skipped = 0
    wrong_answers: list[WrongAnswer] = []
    for position, (answer, question) in enumerate(zip(answers, questions)):
        if not 0 <= question.correct_index < len(question.options):
            raise MalformedQuestionError(
                "correct index does not point into the options",
                position=position,
                correct_index=question.correct_index,
            )
        _check_answer(answer, question, position)

        if answer is None:
            skipped += 1
        elif answer == question.correct_index:
            correct += 1
        else:
            wrong += 1
            wrong_answers.append(
                WrongAnswer(
                    display_order=question.display_order,
                    question_number=question.number or position + 1,
                    question=question.text,
                    user_answer=question.options[answer],
                    correct_answer=question.options[question.correct_index],
                    explanation=question.explanation or "",
                )
            )

    total = len(questions)
    percentage = calculate_percentage(correct, total)
    return SessionResult(
        correct=correct,
        wrong=wrong,
        skipped=skipped,
        total=total,
        net=round_score(calculate_net(correct, wrong)),
        score=round_score(calculate_score(correct, wrong)),
        percentage=percentage,
        performance=performance_tier(percentage),
        time_spent=time_spent,
        exam_types=exam_types,
        wrong_answers=wrong_answers,
    )
