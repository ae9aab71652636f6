"""User accounts (students and admins) and the warnings admins send them."""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from examprep.db.session import Base

ROLE_STUDENT = "student"
ROLE_ADMIN = "admin"
ROLES = (ROLE_STUDENT, ROLE_ADMIN)

STATUS_ACTIVE = "active"
STATUS_BANNED = "banned"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    display_name = Column(String(255), nullable=False)
    role = Column(String(16), nullable=False, default=ROLE_STUDENT)  # student | admin
    status = Column(String(16), nullable=False, default=STATUS_ACTIVE)  # active | banned
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)

    warnings = relationship(
        "AccountWarning",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        foreign_keys="AccountWarning.user_id",
        order_by="AccountWarning.id",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class AccountWarning(Base):
    __tablename__ = "user_warnings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(Text, nullable=False)
    issued_by_id = Column(Integer, nullable=True)  # admin may be deleted later
    issued_by_name = Column(String(255), nullable=False)
    issued_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    read = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="warnings", foreign_keys=[user_id])
