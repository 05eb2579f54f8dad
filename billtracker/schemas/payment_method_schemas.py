"""
Pydantic schemas for payment method operations.
"""
from typing import Any, Dict

from pydantic import Field, field_validator

from ..models import PAYMENT_METHOD_TYPES
from .base import RequestSchema, clean_text


class PaymentMethodSchema(RequestSchema):
    name: str = Field(..., min_length=1, max_length=100)
    type: str
    details: Dict[str, Any]
    is_default: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return clean_text(v)

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        if v not in PAYMENT_METHOD_TYPES:
            raise ValueError(f"Type must be one of: {list(PAYMENT_METHOD_TYPES)}")
        return v

    @field_validator("details")
    @classmethod
    def validate_details(cls, v):
        if not v:
            raise ValueError("details must not be empty")
        return sanitize_details(v)


def sanitize_details(details: Dict[str, Any]) -> Dict[str, Any]:
    # keep only the last four digits of anything that looks like a card number
    cleaned = dict(details)
    numbers = [cleaned.pop("card_number", None), cleaned.pop("number", None)]
    number = next((n for n in numbers if n), None)
    if number:
        digits = "".join(ch for ch in str(number) if ch.isdigit())
        cleaned.setdefault("last_four", digits[-4:])
    return cleaned
