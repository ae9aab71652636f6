"""StudentProfileRow: one JSON profile document per student (sql profile backend)."""
from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from examprep.db.session import Base


class StudentProfileRow(Base):
    __tablename__ = "student_profiles"

    student_id = Column(String(128), primary_key=True)
    # StudentProfile serialized as JSON text (SQLite has no native JSON)
    document = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
