"""Admin routes: users, warnings, question reports and question editing."""
import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from examprep.db.session import get_db
from examprep.models.report import QuestionReport
from examprep.models.user import ROLE_ADMIN, STATUS_ACTIVE, STATUS_BANNED, AccountWarning, User
from examprep.routers.deps import get_catalog, get_profile_store, require_admin
from examprep.schemas.question import Question
from examprep.schemas.report import QuestionEditIn, ReportOut
from examprep.schemas.user import RoleUpdateIn, UserOut, WarningIn, WarningOut
from examprep.services.exam_loader import ExamCatalog, ExamFileError, ExamNotFoundError
from examprep.services.profile_store import ProfileStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])

Admin = Annotated[User, Depends(require_admin)]
Db = Annotated[AsyncSession, Depends(get_db)]


async def _get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _not_self(admin: User, user_id: int, action: str) -> None:
    if admin.id == user_id:
        raise HTTPException(status_code=400, detail=f"You cannot {action} your own account")


# ---------- users ----------

@router.get("/users", response_model=list[UserOut])
async def list_users(admin: Admin, db: Db, role: str | None = None, q: str | None = None):
    """All users, optionally filtered by role and a name/email search."""
    query = select(User).order_by(User.created_at.desc(), User.id.desc())
    if role:
        query = query.where(User.role == role)
    if q:
        pattern = f"%{q.strip().lower()}%"
        query = query.where(or_(User.email.ilike(pattern), User.display_name.ilike(pattern)))
    result = await db.execute(query)
    return result.scalars().all()


@router.patch("/users/{user_id}/role", response_model=UserOut)
async def change_role(user_id: int, body: RoleUpdateIn, admin: Admin, db: Db):
    if user_id == admin.id and body.role != ROLE_ADMIN:
        raise HTTPException(status_code=400, detail="You cannot remove your own admin role")
    user = await _get_user(db, user_id)
    user.role = body.role
    await db.commit()
    await db.refresh(user)
    logger.info("Admin %s set role of user %s to %s", admin.id, user_id, body.role)
    return user


@router.post("/users/{user_id}/ban", response_model=UserOut)
async def toggle_ban(user_id: int, admin: Admin, db: Db):
    """Ban an active user, or lift the ban of a banned one."""
    _not_self(admin, user_id, "ban")
    user = await _get_user(db, user_id)
    user.status = STATUS_ACTIVE if user.status == STATUS_BANNED else STATUS_BANNED
    await db.commit()
    await db.refresh(user)
    logger.info("Admin %s set status of user %s to %s", admin.id, user_id, user.status)
    return user


@router.post("/users/{user_id}/warnings", response_model=WarningOut, status_code=201)
async def send_warning(user_id: int, body: WarningIn, admin: Admin, db: Db):
    await _get_user(db, user_id)
    warning = AccountWarning(
        user_id=user_id,
        message=body.message.strip(),
        issued_by_id=admin.id,
        issued_by_name=admin.display_name or admin.email,
    )
    db.add(warning)
    await db.commit()
    await db.refresh(warning)
    logger.info("Admin %s warned user %s", admin.id, user_id)
    return warning


@router.delete("/users/{user_id}", status_code=204)
async def delete_user(
    user_id: int,
    admin: Admin,
    db: Db,
    store: Annotated[ProfileStore, Depends(get_profile_store)],
):
    """Delete the account together with its warnings and stored profile.

    The profile goes first: if the store fails the account is left intact.
    """
    _not_self(admin, user_id, "delete")
    user = await _get_user(db, user_id)
    await store.delete(str(user_id))
    await db.execute(delete(AccountWarning).where(AccountWarning.user_id == user_id))
    await db.delete(user)
    await db.commit()
    logger.info("Admin %s deleted user %s", admin.id, user_id)
    return Response(status_code=204)


# ---------- reports ----------

@router.get("/reports", response_model=list[ReportOut])
async def list_reports(admin: Admin, db: Db):
    result = await db.execute(select(QuestionReport).order_by(QuestionReport.id))
    return result.scalars().all()


async def _delete_report(db: AsyncSession, report_id: int) -> None:
    report = await db.get(QuestionReport, report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    await db.delete(report)
    await db.commit()


@router.delete("/reports/{report_id}", status_code=204)
async def delete_report(report_id: int, admin: Admin, db: Db):
    await _delete_report(db, report_id)
    return Response(status_code=204)


# ---------- questions ----------

@router.get("/questions/{exam_id}/{number}", response_model=Question)
def get_question(
    exam_id: str,
    number: int,
    admin: Admin,
    catalog: Annotated[ExamCatalog, Depends(get_catalog)],
):
    try:
        return catalog.get_question(exam_id, number)
    except ExamNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.put("/questions/{exam_id}/{number}", response_model=Question)
async def replace_question(
    exam_id: str,
    number: int,
    body: QuestionEditIn,
    admin: Admin,
    db: Db,
    catalog: Annotated[ExamCatalog, Depends(get_catalog)],
):
    """Rewrite a question in its exam file; optionally close the report that flagged it."""
    try:
        updated = await asyncio.to_thread(catalog.replace_question, exam_id, number, body.question)
    except ExamNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ExamFileError as exc:
        logger.error("Question edit failed for %s #%s: %s", exam_id, number, exc)
        raise HTTPException(status_code=503, detail="Exam file unavailable")
    if body.resolve_report is not None:
        await _delete_report(db, body.resolve_report)
    return updated
