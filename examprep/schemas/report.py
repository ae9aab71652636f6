"""Pydantic schemas for question-error reports."""
from datetime import datetime

from pydantic import BaseModel

from examprep.schemas.question import Question


class ReportIn(BaseModel):
    question_text: str
    exam_id: str | None = None
    course_name: str | None = None
    question_number: int | None = None
    reporter_id: str | None = None
    note: str | None = None


class ReportOut(ReportIn):
    id: int
    reported_at: datetime

    class Config:
        from_attributes = True


class QuestionEditIn(BaseModel):
    question: Question
    resolve_report: int | None = None
