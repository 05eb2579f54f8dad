"""SQLAlchemy models (SQLite compatible).
Tables: users, categories, payment_methods, bills, documents,
user_integrations, audit_logs.

Primary keys are UUID4 strings; every row belonging to a user carries a
user_id and all queries are scoped by it.
"""
from __future__ import annotations
import uuid
from datetime import date, datetime
from typing import Optional, Dict, Any
from sqlalchemy import Index, UniqueConstraint, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON
from .extensions import db


BILL_STATUSES = ("unpaid", "paid", "overdue")
OUTSTANDING_STATUSES = ("unpaid", "overdue")
RECURRENCES = ("none", "daily", "weekly", "monthly", "quarterly", "annually")
PAYMENT_METHOD_TYPES = ("credit", "debit", "bank", "digital", "cash", "other")
INTEGRATION_STATUSES = ("pending", "active", "error", "disabled")

DEFAULT_CATEGORY_COLOR = "#6B7280"
DEFAULT_CATEGORY_ICON = "folder"
FALLBACK_CATEGORY_NAME = "Other"

DEFAULT_CATEGORIES = (
    ("Utilities", "#3B82F6", "lightning-bolt"),
    ("Housing", "#10B981", "home"),
    ("Subscriptions", "#8B5CF6", "credit-card"),
    ("Insurance", "#F59E0B", "shield"),
    (FALLBACK_CATEGORY_NAME, DEFAULT_CATEGORY_COLOR, DEFAULT_CATEGORY_ICON),
)


def new_id() -> str:
    return str(uuid.uuid4())


def _iso(value: Optional[datetime | date]) -> Optional[str]:
    return value.isoformat() if value else None


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class User(db.Model, TimestampMixin):
    __tablename__ = "users"
    id: Mapped[str] = mapped_column(primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(nullable=False)
    password_hash: Mapped[str] = mapped_column(nullable=False)
    settings: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    categories = relationship("Category", back_populates="user", cascade="all, delete-orphan")
    payment_methods = relationship("PaymentMethod", back_populates="user", cascade="all, delete-orphan")

    def to_public(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email, "name": self.name}

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.to_public(),
            "settings": self.settings,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class Category(db.Model, TimestampMixin):
    __tablename__ = "categories"
    id: Mapped[str] = mapped_column(primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(nullable=False)
    color: Mapped[str] = mapped_column(nullable=False, default=DEFAULT_CATEGORY_COLOR)
    icon: Mapped[str] = mapped_column(nullable=False, default=DEFAULT_CATEGORY_ICON)

    user = relationship("User", back_populates="categories")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "color": self.color,
            "icon": self.icon,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class PaymentMethod(db.Model, TimestampMixin):
    __tablename__ = "payment_methods"
    id: Mapped[str] = mapped_column(primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(nullable=False)
    type: Mapped[str] = mapped_column(nullable=False)  # credit/debit/bank/digital/cash/other
    details: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    is_default: Mapped[bool] = mapped_column(nullable=False, default=False)

    user = relationship("User", back_populates="payment_methods")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "type": self.type,
            "details": self.details,
            "is_default": bool(self.is_default),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class Bill(db.Model, TimestampMixin):
    __tablename__ = "bills"
    id: Mapped[str] = mapped_column(primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(nullable=False)
    amount: Mapped[float] = mapped_column(nullable=False)
    due_date: Mapped[date] = mapped_column(nullable=False, index=True)
    category_id: Mapped[Optional[str]] = mapped_column(ForeignKey("categories.id"), nullable=True, index=True)
    payment_method_id: Mapped[Optional[str]] = mapped_column(ForeignKey("payment_methods.id"), nullable=True, index=True)
    status: Mapped[str] = mapped_column(nullable=False, default="unpaid", index=True)  # unpaid/paid/overdue
    recurrence: Mapped[Optional[str]] = mapped_column(nullable=True)
    recurrence_details: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(nullable=True)
    paid_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    category = relationship("Category")
    payment_method = relationship("PaymentMethod")

    def to_dict(self) -> Dict[str, Any]:
        category = self.category
        method = self.payment_method
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "amount": float(self.amount),
            "due_date": _iso(self.due_date),
            "category_id": self.category_id,
            "payment_method_id": self.payment_method_id,
            "status": self.status,
            "recurrence": self.recurrence,
            "recurrence_details": self.recurrence_details,
            "notes": self.notes,
            "paid_at": _iso(self.paid_at),
            "category_name": category.name if category else None,
            "category_color": category.color if category else None,
            "category_icon": category.icon if category else None,
            "payment_method_name": method.name if method else None,
            "payment_method_type": method.type if method else None,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class Document(db.Model, TimestampMixin):
    __tablename__ = "documents"
    id: Mapped[str] = mapped_column(primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    bill_id: Mapped[Optional[str]] = mapped_column(ForeignKey("bills.id"), nullable=True, index=True)
    file_name: Mapped[str] = mapped_column(nullable=False)
    file_type: Mapped[str] = mapped_column(nullable=False)
    file_size: Mapped[int] = mapped_column(nullable=False)
    file_path: Mapped[str] = mapped_column(nullable=False)
    thumbnail_path: Mapped[Optional[str]] = mapped_column(nullable=True)
    ocr_processed: Mapped[bool] = mapped_column(nullable=False, default=False)
    ocr_data: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    bill = relationship("Bill")

    def to_dict(self, include_ocr: bool = True) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "bill_id": self.bill_id,
            "bill_name": self.bill.name if self.bill else None,
            "file_name": self.file_name,
            "file_type": self.file_type,
            "file_size": self.file_size,
            "file_path": self.file_path,
            "thumbnail_path": self.thumbnail_path,
            "ocr_processed": bool(self.ocr_processed),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        if include_ocr:
            data["ocr_data"] = self.ocr_data
        return data


class UserIntegration(db.Model, TimestampMixin):
    __tablename__ = "user_integrations"
    id: Mapped[str] = mapped_column(primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    type: Mapped[str] = mapped_column(nullable=False)  # email/dropbox/google_assistant/alexa
    details: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    status: Mapped[str] = mapped_column(nullable=False, default="pending")
    last_sync: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "type", name="uq_user_integration_type"),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type,
            "details": self.details,
            "status": self.status,
            "last_sync": _iso(self.last_sync),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class AuditLog(db.Model, TimestampMixin):
    __tablename__ = "audit_logs"
    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[Optional[str]] = mapped_column(nullable=True, index=True)
    action: Mapped[str] = mapped_column(nullable=False)
    target_type: Mapped[str] = mapped_column(nullable=False)
    target_id: Mapped[Optional[str]] = mapped_column(nullable=True)
    ip: Mapped[Optional[str]] = mapped_column(nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(nullable=True)
    payload: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)


Index("ix_bills_user_due", Bill.user_id, Bill.due_date)
Index("ix_documents_user_created", Document.user_id, Document.created_at)
