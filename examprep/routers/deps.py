"""Shared dependencies: collaborators live on app.state, set up by the lifespan."""
from datetime import datetime
from typing import Annotated

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from examprep.core.config import Settings
from examprep.core.security import decode_access_token
from examprep.db.session import get_db
from examprep.models.user import STATUS_BANNED, User
from examprep.services.exam_loader import ExamCatalog
from examprep.services.profile_store import ProfileStore

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_catalog(request: Request) -> ExamCatalog:
    return request.app.state.catalog


def get_profile_store(request: Request) -> ProfileStore:
    return request.app.state.profile_store


def get_now() -> datetime:
    """Local wall-clock time, read once per request."""
    return datetime.now()


async def get_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> User:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    claims = decode_access_token(credentials.credentials, settings)
    if claims is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    result = await db.execute(select(User).where(User.id == int(claims["sub"])))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=401, detail="User no longer exists")
    if user.status == STATUS_BANNED:
        raise HTTPException(status_code=403, detail="Account is banned")
    return user


async def require_admin(current_user: Annotated[User, Depends(get_current_user)]) -> User:
    if not current_user.is_admin:
        raise HTTPException(status_code=403, detail="Admin only")
    return current_user
