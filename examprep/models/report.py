"""QuestionReport: a student flagging a question as wrong. Stored as submitted."""
from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from examprep.db.session import Base


class QuestionReport(Base):
    __tablename__ = "question_reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question_text = Column(Text, nullable=False)
    exam_id = Column(String(512), nullable=True, index=True)
    course_name = Column(String(255), nullable=True)
    question_number = Column(Integer, nullable=True)
    reporter_id = Column(String(128), nullable=True)
    note = Column(Text, nullable=True)
    reported_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
