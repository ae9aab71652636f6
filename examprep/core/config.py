"""Application configuration from environment."""
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from env / .env (prefix EXAMPREP_)."""

    app_name: str = "Exam Prep"
    debug: bool = False
    log_level: str = "INFO"

    # Database (users, reports, sql profile backend)
    database_url: str = "sqlite+aiosqlite:///./exam_prep.db"

    # Student profiles: "json" (one file per student) or "sql"
    profile_backend: str = "json"
    data_dir: Path = Path("./data")

    # Question sets: <exams_dir>/<course>/<exam file>.json
    exams_dir: Path = Path("./exams")
    default_course_name: str = "General"

    streak_history_limit: int = 30

    # Accounts registered with these emails get the admin role
    admin_emails: list[str] = []

    # Access tokens
    secret_key: str = "change-me-in-production-use-env"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    class Config:
        env_prefix = "EXAMPREP_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


# Repository root (parent of examprep/)
BASE_DIR = Path(__file__).resolve().parent.parent.parent
