"""Aggregate statistics: folds a completed session into a student's running totals."""
from __future__ import annotations

from datetime import datetime

from examprep.schemas.session import SessionResult
from examprep.schemas.student import (
    CourseStats,
    CourseSummaryOut,
    LastExam,
    StudentStatistics,
    WrongQuestionEntry,
)
from examprep.services.scoring import format_score
from examprep.services.session import MIXED_EXAM_TYPES


def running_average(old_average: float, old_count: int, value: float) -> float:
    """Incremental mean: weight by the old count, divide by the new one."""
    return (old_average * old_count + value) / (old_count + 1)


def apply_session(
    stats: StudentStatistics,
    result: SessionResult,
    course_name: str,
    now: datetime,
) -> StudentStatistics:
    """Return new statistics with `result` folded in; `stats` is not modified."""
    new = stats.model_copy(deep=True)
    score = result.score

    new.average_score = running_average(new.average_score, new.sessions_taken, score)
    new.sessions_taken += 1
    new.total_time += result.time_spent
    new.total_correct += result.correct
    new.total_wrong += result.wrong
    new.total_skipped += result.skipped

    course = new.courses.setdefault(course_name, CourseStats())
    if course.session_count == 0:
        course.highest_score = score
        course.lowest_score = score
    else:
        course.highest_score = max(course.highest_score, score)
        course.lowest_score = min(course.lowest_score, score)
    course.average_score = running_average(course.average_score, course.session_count, score)
    course.session_count += 1
    course.total_correct += result.correct
    course.total_wrong += result.wrong

    for wrong in result.wrong_answers:
        entry = WrongQuestionEntry(
            question=wrong.question,
            user_answer=wrong.user_answer,
            correct_answer=wrong.correct_answer,
            explanation=wrong.explanation,
            course_name=course_name,
            recorded_at=now,
        )
        course.wrong_questions.append(entry)
        new.wrong_questions.append(entry)

    new.last_exam = LastExam(
        taken_at=now,
        course_name=course_name,
        exam_type=result.exam_types or MIXED_EXAM_TYPES,
        score=score,
        correct=result.correct,
        wrong=result.wrong,
        skipped=result.skipped,
        time_spent=result.time_spent,
    )
    return new


def course_summary(stats: StudentStatistics, course_name: str) -> CourseSummaryOut | None:
    course = stats.courses.get(course_name)
    if course is None:
        return None
    return CourseSummaryOut(
        course_name=course_name,
        session_count=course.session_count,
        average_score=format_score(course.average_score),
        highest_score=format_score(course.highest_score),
        lowest_score=format_score(course.lowest_score),
        total_correct=course.total_correct,
        total_wrong=course.total_wrong,
        wrong_question_count=len(course.wrong_questions),
    )
