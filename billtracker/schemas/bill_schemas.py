"""
Pydantic schemas for bill operations.
"""
from datetime import date
from typing import Annotated, Any, Dict, Optional

from pydantic import AfterValidator, Field, field_validator

from ..models import BILL_STATUSES, RECURRENCES
from .base import RequestSchema, clean_text


def _check_status(v):
    if v is not None and v not in BILL_STATUSES:
        raise ValueError(f"Status must be one of: {list(BILL_STATUSES)}")
    return v


def _check_recurrence(v):
    if v is not None and v not in RECURRENCES:
        raise ValueError(f"Recurrence must be one of: {list(RECURRENCES)}")
    return v


BillStatus = Annotated[str, AfterValidator(_check_status)]
Recurrence = Annotated[str, AfterValidator(_check_recurrence)]


class BillCreateSchema(RequestSchema):
    """Schema for creating a bill."""

    name: str = Field(..., min_length=1, max_length=200)
    amount: float = Field(..., gt=0)
    due_date: date
    status: BillStatus = "unpaid"
    category_id: Optional[str] = None
    payment_method_id: Optional[str] = None
    recurrence: Optional[Recurrence] = None
    recurrence_details: Optional[Dict[str, Any]] = None
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return clean_text(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v):
        if v is None or not v.strip():
            return None
        return clean_text(v)

    @field_validator("category_id", "payment_method_id", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        return v or None


class BillUpdateSchema(RequestSchema):
    """Schema for updating a bill; only the supplied fields change."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    amount: Optional[float] = Field(None, gt=0)
    due_date: Optional[date] = None
    status: Optional[BillStatus] = None
    category_id: Optional[str] = None
    payment_method_id: Optional[str] = None
    recurrence: Optional[Recurrence] = None
    recurrence_details: Optional[Dict[str, Any]] = None
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return clean_text(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v):
        if v is None or not v.strip():
            return None
        return clean_text(v)

    @field_validator("category_id", "payment_method_id", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        return v or None


class BillPaySchema(RequestSchema):
    payment_method_id: Optional[str] = None
