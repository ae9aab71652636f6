from examprep.services.progress import apply_completed_session
from examprep.services.randomizer import option_letter, randomize_session
from examprep.services.scoring import calculate_results, performance_tier
from examprep.services.shuffle import shuffle
from examprep.services.statistics import apply_session, course_summary
from examprep.services.streak import has_activity_today, is_at_risk, record_activity, validate_streak

__all__ = [
    "apply_completed_session",
    "apply_session",
    "calculate_results",
    "course_summary",
    "has_activity_today",
    "is_at_risk",
    "option_letter",
    "performance_tier",
    "randomize_session",
    "record_activity",
    "shuffle",
    "validate_streak",
]
