"""Student profile API: read, replace, rename, reset and session completion."""
import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path

from examprep.core.config import Settings
from examprep.routers.deps import get_app_settings, get_now, get_profile_store
from examprep.schemas.session import CompleteSessionIn, CompleteSessionOut
from examprep.schemas.student import (
    STUDENT_ID_PATTERN,
    CourseSummaryOut,
    NameUpdateIn,
    StreakOut,
    StudentProfile,
)
from examprep.services.profile_store import ProfileStore
from examprep.services.progress import apply_completed_session
from examprep.services.scoring import calculate_results
from examprep.services.session import exam_types_label
from examprep.services.statistics import course_summary
from examprep.services.streak import has_activity_today, is_at_risk, streak_message, validate_streak

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/students", tags=["students"])

StudentId = Annotated[str, Path(pattern=STUDENT_ID_PATTERN)]


@router.get("/{student_id}", response_model=StudentProfile)
async def get_student(
    student_id: StudentId,
    store: Annotated[ProfileStore, Depends(get_profile_store)],
    now: Annotated[datetime, Depends(get_now)],
):
    """Profile with the streak as it reads today (lapsed streaks show 0)."""
    profile = await store.get(student_id)
    return profile.model_copy(update={"streak": validate_streak(profile.streak, now.date())})


@router.put("/{student_id}", response_model=StudentProfile)
async def put_student(
    student_id: StudentId,
    body: StudentProfile,
    store: Annotated[ProfileStore, Depends(get_profile_store)],
):
    return await store.put(student_id, body)


@router.patch("/{student_id}/name", response_model=StudentProfile)
async def rename_student(
    student_id: StudentId,
    body: NameUpdateIn,
    store: Annotated[ProfileStore, Depends(get_profile_store)],
):
    name = body.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Valid name is required")
    return await store.update(student_id, lambda p: p.model_copy(update={"display_name": name}))


@router.post("/{student_id}/reset", response_model=StudentProfile)
async def reset_student(
    student_id: StudentId,
    store: Annotated[ProfileStore, Depends(get_profile_store)],
):
    """Clear streak and statistics, keep the display name."""
    logger.info("Resetting profile for %s", student_id)
    return await store.reset(student_id)


@router.post("/{student_id}/sessions", response_model=CompleteSessionOut)
async def complete_session(
    student_id: StudentId,
    body: CompleteSessionIn,
    store: Annotated[ProfileStore, Depends(get_profile_store)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    now: Annotated[datetime, Depends(get_now)],
):
    """Score a finished session and fold it into the stored profile."""
    result = calculate_results(
        body.answers,
        body.questions,
        time_spent=body.time_spent,
        exam_types=exam_types_label(body.exam_types),
    )
    course_name = body.course_name or settings.default_course_name

    profile = await store.update(
        student_id,
        lambda current: apply_completed_session(
            current, result, course_name, now, settings.streak_history_limit
        ),
    )
    logger.info(
        "Session completed for %s: course=%s score=%.2f (%d/%d/%d)",
        student_id, course_name, result.score, result.correct, result.wrong, result.skipped,
    )
    return CompleteSessionOut(result=result, profile=profile)


@router.get("/{student_id}/streak", response_model=StreakOut)
async def get_streak(
    student_id: StudentId,
    store: Annotated[ProfileStore, Depends(get_profile_store)],
    now: Annotated[datetime, Depends(get_now)],
):
    today = now.date()
    profile = await store.get(student_id)
    streak = validate_streak(profile.streak, today)
    emblem, message = streak_message(streak.current_streak)
    return StreakOut(
        streak=streak,
        emblem=emblem,
        message=message,
        active_today=has_activity_today(streak, today),
        at_risk=is_at_risk(streak, today),
    )


@router.get("/{student_id}/courses/{course_name}", response_model=CourseSummaryOut)
async def get_course_summary(
    student_id: StudentId,
    course_name: str,
    store: Annotated[ProfileStore, Depends(get_profile_store)],
):
    profile = await store.get(student_id)
    summary = course_summary(profile.statistics, course_name)
    if summary is None:
        raise HTTPException(status_code=404, detail="No sessions for this course")
    return summary
