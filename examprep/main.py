"""Exam Prep - FastAPI app entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from examprep.core.config import Settings, get_settings
from examprep.core.logging import configure_logging
from examprep.db.base import Base
from examprep.db.session import create_session_factory
from examprep.routers import admin, auth, exams, reports, students
from examprep.services.errors import ProfileStoreError, QuizDataError
from examprep.services.exam_loader import ExamCatalog
from examprep.services.profile_store import create_profile_store

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app; collaborators are created in the lifespan and kept on app.state."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        engine, sessionmaker = create_session_factory(settings.database_url, echo=settings.debug)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        app.state.settings = settings
        app.state.sessionmaker = sessionmaker
        app.state.catalog = ExamCatalog.load(settings.exams_dir, settings.default_course_name)
        app.state.profile_store = create_profile_store(settings.profile_backend, settings.data_dir, sessionmaker)
        logger.info(
            "%s started: %d exams, profile backend=%s",
            settings.app_name, len(app.state.catalog), settings.profile_backend,
        )

        yield
        await engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        description="Randomized past-exam practice with scores, streaks and statistics",
        lifespan=lifespan,
    )

    @app.exception_handler(QuizDataError)
    async def quiz_data_error(request: Request, exc: QuizDataError):
        return JSONResponse(status_code=422, content=exc.to_dict())

    @app.exception_handler(ProfileStoreError)
    async def profile_store_error(request: Request, exc: ProfileStoreError):
        logger.error("Profile store failure for %s: %s", exc.student_id, exc)
        return JSONResponse(status_code=503, content={"kind": exc.kind, "message": "Profile storage unavailable"})

    app.include_router(exams.router)
    app.include_router(students.router)
    app.include_router(reports.router)
    app.include_router(auth.router)
    app.include_router(admin.router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
