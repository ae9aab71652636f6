"""Pydantic schemas for accounts, tokens and admin actions."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class RegisterIn(BaseModel):
    email: str
    password: str
    display_name: str | None = None


class LoginIn(BaseModel):
    email: str
    password: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserOut(BaseModel):
    id: int
    email: str
    display_name: str
    role: str
    status: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class RoleUpdateIn(BaseModel):
    role: Literal["student", "admin"]


class WarningIn(BaseModel):
    message: str = Field(min_length=1)


class WarningOut(BaseModel):
    id: int
    message: str
    issued_by_name: str
    issued_at: datetime
    read: bool

    class Config:
        from_attributes = True
