"""Pydantic schemas for users and authentication."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from leave_portal.schemas.base import CamelModel


class Role(str, Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"


# ── Auth Schemas ──────────────────────────────────────────────────────────────


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class User(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str = ""
    role: Role
    department: Optional[str] = None
    join_date: Optional[date] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class LoginResponse(CamelModel):
    token: str
    user: Optional[User] = None


# ── Admin Schemas ─────────────────────────────────────────────────────────────


class UserCreate(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    role: Role = Role.EMPLOYEE
    department: Optional[str] = None
    join_date: Optional[date] = None


class UserUpdate(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[Role] = None
    department: Optional[str] = None
    is_active: Optional[bool] = None
