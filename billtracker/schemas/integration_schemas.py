"""
Pydantic schemas for external integrations.
"""
from typing import Annotated, Any, Dict, Literal, Optional

from pydantic import AfterValidator, Field, field_validator

from ..models import INTEGRATION_STATUSES
from .base import RequestSchema


def _check_status(v):
    if v is not None and v not in INTEGRATION_STATUSES:
        raise ValueError(f"Status must be one of: {list(INTEGRATION_STATUSES)}")
    return v


IntegrationStatus = Annotated[str, AfterValidator(_check_status)]


class IntegrationCreateSchema(RequestSchema):
    type: str = Field(..., min_length=1, max_length=50)
    details: Dict[str, Any]
    status: IntegrationStatus = "pending"

    @field_validator("details")
    @classmethod
    def validate_details(cls, v):
        if not v:
            raise ValueError("details must not be empty")
        return v


class IntegrationUpdateSchema(RequestSchema):
    details: Optional[Dict[str, Any]] = None
    status: Optional[IntegrationStatus] = None


class IntegrationSyncSchema(RequestSchema):
    import_bills: bool = False


class SmartAssistantSchema(RequestSchema):
    assistant_type: Literal["google_assistant", "alexa"]
    device_name: Optional[str] = Field(None, max_length=100)
