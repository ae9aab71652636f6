"""Question-error reports submitted by students."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from examprep.db.session import get_db
from examprep.models.report import QuestionReport
from examprep.schemas.report import ReportIn, ReportOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["reports"])


@router.post("/reports", response_model=ReportOut, status_code=201)
async def report_question(
    body: ReportIn,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Store the report as submitted; reviewing and deduplicating is left to admins."""
    report = QuestionReport(**body.model_dump())
    db.add(report)
    await db.commit()
    await db.refresh(report)
    logger.info("Question reported: exam=%s number=%s", report.exam_id, report.question_number)
    return report
