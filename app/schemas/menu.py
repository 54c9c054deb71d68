# app/schemas/menu.py
import math
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from app.database.models import MenuCategory


class MenuItemCreate(BaseModel):
    """Add menu item form. Price arrives as text and is stored as a number."""
    name: str = Field(..., min_length=1)
    description: str = ""
    price: float
    category: MenuCategory
    image_url: str = ""

    @field_validator("name", "description", "image_url", mode="before")
    @classmethod
    def strip_text(cls, value):
        return (value or "").strip()

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, value):
        if isinstance(value, str):
            try:
                value = float(value.strip())
            except ValueError:
                raise ValueError("Price must be a number")
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError("Price must be a number")
        return value

    def to_row(self, restaurant_id: str) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "category": self.category.value,
            "image_url": self.image_url,
            "restaurant_id": restaurant_id,
            "is_available": True,
        }


class MenuItem(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_available: bool = True
    restaurant_id: str
