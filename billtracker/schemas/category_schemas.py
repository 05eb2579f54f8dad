"""
Pydantic schemas for category operations.
"""
from typing import Optional

from pydantic import Field, field_validator

from .base import RequestSchema, clean_text


class CategorySchema(RequestSchema):
    """Schema used for both create and update; name is always required."""

    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    icon: Optional[str] = Field(None, max_length=50)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return clean_text(v)

    @field_validator("color", "icon", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        return v or None
