"""Folds a completed session into a whole student profile."""
from __future__ import annotations

from datetime import datetime

from examprep.schemas.session import SessionResult
from examprep.schemas.student import StudentProfile
from examprep.services.scoring import student_status
from examprep.services.statistics import apply_session
from examprep.services.streak import HISTORY_LIMIT, record_activity


def apply_completed_session(
    profile: StudentProfile,
    result: SessionResult,
    course_name: str,
    now: datetime,
    history_limit: int = HISTORY_LIMIT,
) -> StudentProfile:
    """Streak, statistics and status after one session; `now` is read once by the caller."""
    statistics = apply_session(profile.statistics, result, course_name, now)
    return profile.model_copy(
        update={
            "streak": record_activity(profile.streak, now.date(), history_limit),
            "statistics": statistics,
            "status": student_status(statistics.average_score),
        }
    )
