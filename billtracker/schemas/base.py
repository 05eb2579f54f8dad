"""Shared pydantic base and field helpers."""
from __future__ import annotations

from typing import Any, Optional, Type, TypeVar

from flask import request
from pydantic import BaseModel, ConfigDict

from ..utils.security import sanitize_input

S = TypeVar("S", bound="RequestSchema")


class RequestSchema(BaseModel):
    """Base for request bodies; unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @classmethod
    def from_request(cls: Type[S]) -> S:
        data: Any = request.get_json(silent=True)
        return cls.model_validate(data if isinstance(data, dict) else {})


def clean_text(value: Optional[str]) -> Optional[str]:
    """Strip and HTML-escape free text; blank strings are rejected."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return sanitize_input(value)
