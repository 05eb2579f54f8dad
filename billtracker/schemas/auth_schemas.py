"""
Pydantic schemas for registration, login and profile operations.
"""
from typing import Any, Dict, Optional

from pydantic import AliasChoices, Field, field_validator

from .base import RequestSchema, clean_text

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# bcrypt only looks at the first 72 bytes and rejects longer input
MAX_PASSWORD_BYTES = 72


def check_password_bytes(v: str) -> str:
    if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return v


class RegisterSchema(RequestSchema):
    email: str = Field(..., max_length=254, pattern=EMAIL_PATTERN)
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return check_password_bytes(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return clean_text(v)


class LoginSchema(RequestSchema):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class ProfileUpdateSchema(RequestSchema):
    name: Optional[str] = Field(None, max_length=100)
    settings: Optional[Dict[str, Any]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return clean_text(v)


class PasswordChangeSchema(RequestSchema):
    current_password: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("current_password", "currentPassword")
    )
    new_password: str = Field(
        ..., min_length=8, max_length=128, validation_alias=AliasChoices("new_password", "newPassword")
    )

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v):
        return check_password_bytes(v)
