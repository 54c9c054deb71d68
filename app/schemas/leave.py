# app/schemas/leave.py
from datetime import date, datetime
from typing import Optional

from dateutil.parser import isoparse
from pydantic import BaseModel, Field, field_validator, model_validator

from app.database.models import LeaveStatus


def _to_date(value):
    """Accept both `2024-01-01` and full timestamps coming back from PostgREST."""
    if isinstance(value, str) and value:
        return isoparse(value).date()
    if isinstance(value, datetime):
        return value.date()
    return value


class LeaveCreate(BaseModel):
    """Request leave dialog."""
    staff_id: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    reason: str = ""

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return _to_date(value)

    @field_validator("reason", mode="before")
    @classmethod
    def none_reason(cls, value):
        return (value or "").strip()

    @model_validator(mode="after")
    def check_range(self):
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self

    def to_row(self, restaurant_id: str) -> dict:
        return {
            "staff_id": self.staff_id,
            "restaurant_id": restaurant_id,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "reason": self.reason,
            "status": LeaveStatus.PENDING.value,
        }


class LeaveStaff(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    position: Optional[str] = None


class LeaveRequest(BaseModel):
    id: str
    staff_id: str
    restaurant_id: str
    start_date: date
    end_date: date
    status: LeaveStatus = LeaveStatus.PENDING
    reason: Optional[str] = None
    created_at: Optional[datetime] = None
    staff: Optional[LeaveStaff] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, value):
        return _to_date(value)

    @property
    def day_count(self) -> int:
        """Inclusive number of days, a same-day leave counts as 1."""
        return (self.end_date - self.start_date).days + 1

    @property
    def is_pending(self) -> bool:
        return self.status == LeaveStatus.PENDING

    @property
    def staff_name(self) -> str:
        if not self.staff:
            return ""
        return f"{self.staff.first_name or ''} {self.staff.last_name or ''}".strip()
