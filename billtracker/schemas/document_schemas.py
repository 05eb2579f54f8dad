"""
Pydantic schemas for document metadata.
"""
from typing import Any, Dict, Optional

from pydantic import Field, field_validator

from .base import RequestSchema, clean_text


class DocumentCreateSchema(RequestSchema):
    file_name: str = Field(..., min_length=1, max_length=255)
    file_type: str = Field(..., min_length=1, max_length=100)
    file_size: int = Field(..., gt=0)
    file_path: str = Field(..., min_length=1, max_length=1024)
    bill_id: Optional[str] = None
    thumbnail_path: Optional[str] = Field(None, max_length=1024)

    @field_validator("file_name")
    @classmethod
    def validate_file_name(cls, v):
        return clean_text(v)

    @field_validator("bill_id", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        return v or None


class DocumentUpdateSchema(RequestSchema):
    bill_id: Optional[str] = None
    file_name: Optional[str] = Field(None, min_length=1, max_length=255)
    ocr_processed: Optional[bool] = None
    ocr_data: Optional[Dict[str, Any]] = None

    @field_validator("file_name")
    @classmethod
    def validate_file_name(cls, v):
        return clean_text(v)
