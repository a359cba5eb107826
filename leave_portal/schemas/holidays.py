from datetime import date
from typing import Optional

from pydantic import Field

from leave_portal.schemas.base import CamelModel


class Holiday(CamelModel):
    id: str
    name: str
    holiday_date: date = Field(..., alias="date")
    description: str = ""
    is_active: bool = True


class HolidayCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    holiday_date: date = Field(..., alias="date")
    description: str = ""
    is_active: bool = True


class HolidayUpdate(CamelModel):
    name: Optional[str] = None
    holiday_date: Optional[date] = Field(None, alias="date")
    description: Optional[str] = None
    is_active: Optional[bool] = None
