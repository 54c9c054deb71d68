# app/schemas/staff.py
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.database.models import StaffPosition, StaffShift


class StaffForm(BaseModel):
    """Add/edit staff dialog. Every submit replaces all mutable fields."""
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    position: StaffPosition = StaffPosition.WAITER
    shift: StaffShift = StaffShift.MORNING
    phone: Optional[str] = None
    email: Optional[str] = None

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("position", "shift", mode="before")
    @classmethod
    def blank_means_default(cls, value, info):
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("phone", "email", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
        return value or None

    def to_row(self) -> dict:
        # the staff table spells the shift column with a capital S
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "position": self.position.value,
            "Shift": self.shift.value,
            "phone": self.phone,
            "email": self.email,
        }


class StaffMember(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    first_name: str
    last_name: str
    position: str
    shift: Optional[str] = Field(None, alias="Shift")
    phone: Optional[str] = None
    email: Optional[str] = None
    restaurant_id: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class StaffOption(BaseModel):
    """Slim row for the leave request staff picker."""
    id: str
    first_name: str
    last_name: str
    position: str

    @property
    def label(self) -> str:
        return f"{self.first_name} {self.last_name} - {self.position}"
