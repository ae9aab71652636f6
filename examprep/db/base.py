"""SQLAlchemy declarative base and model imports for Alembic."""
from examprep.db.session import Base

# Import all models so Alembic can see them
from examprep.models.report import QuestionReport  # noqa: F401
from examprep.models.student_profile import StudentProfileRow  # noqa: F401
from examprep.models.user import User, AccountWarning  # noqa: F401

__all__ = ["Base", "User", "AccountWarning", "QuestionReport", "StudentProfileRow"]
