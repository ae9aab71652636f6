"""Daily streak tracking at calendar-day resolution.

All functions take ``today`` explicitly so one update reads the clock once.
A negative gap (clock moved backwards) is treated as the same day.
"""
from __future__ import annotations

from datetime import date

from examprep.schemas.student import StreakState

HISTORY_LIMIT = 30

# (upper bound exclusive, emblem, message); 0 and 1 are matched exactly
STREAK_MESSAGES = [
    (3, "🔥", "Keep it going!"),
    (7, "🔥🔥", "You're on fire!"),
    (14, "🔥🔥🔥", "Over a week!"),
    (30, "⚡🔥⚡", "Blazing!"),
    (60, "👑🔥👑", "Legendary!"),
]


def day_gap(last_activity: date, today: date) -> int:
    """Whole days from the last activity to today, never negative."""
    return max(0, (today - last_activity).days)


def validate_streak(streak: StreakState | None, today: date) -> StreakState:
    """Streak as it should be displayed today: lapsed streaks read as 0."""
    if streak is None or streak.last_activity_date is None:
        return StreakState(longest_streak=streak.longest_streak if streak else 0)

    if day_gap(streak.last_activity_date, today) >= 2:
        return StreakState(
            current_streak=0,
            longest_streak=streak.longest_streak,
            last_activity_date=streak.last_activity_date,
            streak_dates=[],
        )
    return streak


def record_activity(streak: StreakState | None, today: date, history_limit: int = HISTORY_LIMIT) -> StreakState:
    """Fold one completed session into the streak. Idempotent within a day."""
    streak = streak or StreakState()
    if streak.last_activity_date is None:
        return StreakState(
            current_streak=1,
            longest_streak=max(streak.longest_streak, 1),
            last_activity_date=today,
            streak_dates=[today],
        )

    gap = day_gap(streak.last_activity_date, today)
    if gap == 0:
        return streak
    if gap == 1:
        current = streak.current_streak + 1
        return StreakState(
            current_streak=current,
            longest_streak=max(streak.longest_streak, current),
            last_activity_date=today,
            streak_dates=[*streak.streak_dates, today][-history_limit:],
        )
    return StreakState(
        current_streak=1,
        longest_streak=streak.longest_streak,
        last_activity_date=today,
        streak_dates=[today],
    )


def has_activity_today(streak: StreakState | None, today: date) -> bool:
    return bool(streak and streak.last_activity_date == today)


def is_at_risk(streak: StreakState | None, today: date) -> bool:
    """True when the streak lapses unless a session is completed today."""
    if not streak or streak.last_activity_date is None or streak.current_streak <= 0:
        return False
    gap = day_gap(streak.last_activity_date, today)
    return gap == 1 or (gap == 0 and not has_activity_today(streak, today))


def streak_message(current_streak: int) -> tuple[str, str]:
    """(emblem, message) for the streak badge."""
    if current_streak <= 0:
        return "🔥", "Start your streak!"
    if current_streak == 1:
        return "🔥", "Great start!"
    for upper, emblem, message in STREAK_MESSAGES:
        if current_streak < upper:
            return emblem, message
    return "🏆🔥🏆", "Unstoppable!"
