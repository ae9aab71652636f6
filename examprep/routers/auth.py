"""Account routes: register, login (bearer token), own profile and warnings."""
from __future__ import annotations

import logging
import re
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from examprep.core.config import Settings
from examprep.core.security import MAX_PASSWORD_BYTES, create_access_token, hash_password, verify_password
from examprep.db.session import get_db
from examprep.models.user import ROLE_ADMIN, ROLE_STUDENT, STATUS_BANNED, AccountWarning, User
from examprep.routers.deps import get_app_settings, get_current_user, get_profile_store
from examprep.schemas.user import LoginIn, RegisterIn, TokenOut, UserOut, WarningOut
from examprep.services.profile_store import ProfileStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

# Simple, practical email check
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 8


def _normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


async def _own_warning(db: AsyncSession, user: User, warning_id: int) -> AccountWarning:
    result = await db.execute(
        select(AccountWarning).where(AccountWarning.id == warning_id, AccountWarning.user_id == user.id)
    )
    warning = result.scalar_one_or_none()
    if warning is None:
        raise HTTPException(status_code=404, detail="Warning not found")
    return warning


@router.post("/register", response_model=TokenOut, status_code=201)
async def register(
    body: RegisterIn,
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    store: Annotated[ProfileStore, Depends(get_profile_store)],
):
    """Create a student account (admin if the email is configured as one) and its profile."""
    email = _normalize_email(body.email)
    password = body.password or ""

    if not email or not EMAIL_RE.match(email):
        raise HTTPException(status_code=400, detail="Invalid email")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail="Password too short")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise HTTPException(status_code=400, detail="Password too long")

    existing = await db.execute(select(User).where(User.email == email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=409, detail="Email already registered")

    display_name = (body.display_name or "").strip() or email.split("@")[0]
    is_admin = email in {e.lower() for e in settings.admin_emails}
    user = User(
        email=email,
        hashed_password=hash_password(password),
        display_name=display_name,
        role=ROLE_ADMIN if is_admin else ROLE_STUDENT,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    await store.update(str(user.id), lambda p: p.model_copy(update={"display_name": display_name}))
    logger.info("Registered user %s (role=%s)", user.id, user.role)
    return TokenOut(access_token=create_access_token(user.id, settings))


@router.post("/login", response_model=TokenOut)
async def login(
    body: LoginIn,
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
):
    result = await db.execute(select(User).where(User.email == _normalize_email(body.email)))
    user = result.scalar_one_or_none()
    if not user or not verify_password(body.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if user.status == STATUS_BANNED:
        raise HTTPException(status_code=403, detail="Account is banned")
    return TokenOut(access_token=create_access_token(user.id, settings))


@router.get("/me", response_model=UserOut)
async def me(current_user: Annotated[User, Depends(get_current_user)]):
    return current_user


@router.get("/me/warnings", response_model=list[WarningOut])
async def my_warnings(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    result = await db.execute(
        select(AccountWarning).where(AccountWarning.user_id == current_user.id).order_by(AccountWarning.id)
    )
    return result.scalars().all()


@router.post("/me/warnings/{warning_id}/read", response_model=WarningOut)
async def mark_warning_read(
    warning_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    warning = await _own_warning(db, current_user, warning_id)
    warning.read = True
    await db.commit()
    await db.refresh(warning)
    return warning


@router.delete("/me/warnings/{warning_id}", status_code=204)
async def dismiss_warning(
    warning_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    warning = await _own_warning(db, current_user, warning_id)
    await db.delete(warning)
    await db.commit()
    return Response(status_code=204)
