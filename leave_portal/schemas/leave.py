from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from leave_portal.schemas.base import CamelModel


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not LeaveStatus.PENDING


class LeaveType(CamelModel):
    id: str
    name: str
    days_allowed: float
    description: str = ""
    is_active: bool = True


class LeaveTypeCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    days_allowed: float = Field(..., ge=0)
    description: str = ""
    is_active: bool = True


class LeaveTypeUpdate(CamelModel):
    name: Optional[str] = None
    days_allowed: Optional[float] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class LeaveRequest(CamelModel):
    id: str
    employee_id: str
    employee_name: str = ""
    leave_type_id: str
    leave_type_name: str = ""
    start_date: date
    end_date: date
    total_days: float
    reason: str = ""
    status: LeaveStatus = LeaveStatus.PENDING
    applied_date: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    reviewed_date: Optional[datetime] = None
    review_comments: Optional[str] = None


class LeaveRequestCreate(CamelModel):
    leave_type_id: str
    start_date: date
    end_date: date
    reason: str
    total_days: int


class LeaveRequestUpdate(CamelModel):
    leave_type_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = None
    total_days: Optional[int] = None


class ReviewDecision(CamelModel):
    comments: Optional[str] = None


class LeaveBalance(CamelModel):
    leave_type_id: str
    leave_type_name: str
    total_days: float
    used_days: float
    remaining_days: float


class ApplyLeaveForm(CamelModel):
    """Fields collected by the apply-leave page."""

    leave_type_id: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    reason: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def _end_not_before_start(self) -> "ApplyLeaveForm":
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self
