"""
Bill service: creation and updates with ownership checks, payment with
recurrence roll-over, and spending statistics.
"""
from __future__ import annotations
from datetime import date, datetime
from typing import Any, Dict, Optional

from dateutil.relativedelta import relativedelta

from ..errors import NotFoundError
from ..models import Bill, Document
from ..repositories import BillRepository, CategoryRepository, PaymentMethodRepository
from ..utils.helpers import range_start
from ..utils.logging_utils import get_logger
from .base_service import BaseService

logger = get_logger("bills")

# columns that an update may not clear
REQUIRED_FIELDS = ("name", "amount", "due_date", "status")

RECURRENCE_STEPS = {
    "daily": relativedelta(days=1),
    "weekly": relativedelta(weeks=1),
    "monthly": relativedelta(months=1),
    "quarterly": relativedelta(months=3),
    "annually": relativedelta(years=1),
}


def next_due_date(due: date, recurrence: Optional[str]) -> Optional[date]:
    """Due date of the following occurrence; None for one-time bills."""
    step = RECURRENCE_STEPS.get(recurrence or "none")
    if step is None:
        return None
    return due + step


class BillService(BaseService):
    """Operations on one user's bills."""

    def __init__(self, user_id: str, session=None):
        super().__init__(session)
        self.user_id = user_id
        self.bills = BillRepository(user_id)
        self.categories = CategoryRepository(user_id)
        self.payment_methods = PaymentMethodRepository(user_id)

    def get(self, bill_id: str) -> Bill:
        bill = self.bills.get_by_id(bill_id)
        if bill is None:
            raise NotFoundError("Bill")
        return bill

    def _check_references(self, data: Dict[str, Any]) -> None:
        if data.get("category_id") and self.categories.get_by_id(data["category_id"]) is None:
            raise NotFoundError("Category")
        if data.get("payment_method_id") and self.payment_methods.get_by_id(data["payment_method_id"]) is None:
            raise NotFoundError("Payment method")

    def _add(self, data: Dict[str, Any]) -> Bill:
        self._check_references(data)
        if data.get("status") == "paid":
            data.setdefault("paid_at", datetime.utcnow())
        return self.bills.create(**data)

    def create(self, data: Dict[str, Any]) -> Bill:
        bill = self._add(data)
        self.commit()
        logger.info("Bill %s created for user %s", bill.id, self.user_id)
        return bill

    def create_from_document(self, document: Document, fields: Dict[str, Any]) -> Bill:
        """Unpaid bill from extracted fields, filed under the fallback category.

        The bill and the document link are committed together.
        """
        fields["status"] = "unpaid"
        fallback = self.categories.find_fallback()
        if fallback is not None:
            fields["category_id"] = fallback.id
        bill = self._add(fields)
        self.session.flush()
        document.bill_id = bill.id
        self.commit()
        logger.info("Bill %s created from document %s", bill.id, document.id)
        return bill

    def update(self, bill_id: str, data: Dict[str, Any]) -> Bill:
        bill = self.get(bill_id)
        for key in REQUIRED_FIELDS:
            if key in data and data[key] is None:
                del data[key]
        self._check_references(data)
        if "status" in data:
            if data["status"] == "paid" and bill.status != "paid":
                data["paid_at"] = datetime.utcnow()
            elif data["status"] != "paid":
                data["paid_at"] = None
        self.bills.update(bill, **data)
        self.commit()
        return bill

    def delete(self, bill_id: str) -> None:
        bill = self.get(bill_id)
        self.bills.delete_detaching_documents(bill)
        self.commit()

    def pay(self, bill_id: str, payment_method_id: Optional[str] = None) -> tuple[Bill, Optional[Bill]]:
        """Mark a bill paid; a recurring bill spawns its next unpaid occurrence.

        Paying an already-paid bill does not spawn a second occurrence.
        """
        bill = self.get(bill_id)
        if payment_method_id:
            self._check_references({"payment_method_id": payment_method_id})
            bill.payment_method_id = payment_method_id

        next_bill = None
        if bill.status != "paid":
            bill.status = "paid"
            bill.paid_at = datetime.utcnow()
            due = next_due_date(bill.due_date, bill.recurrence)
            if due is not None:
                next_bill = self.bills.create(
                    name=bill.name,
                    amount=bill.amount,
                    due_date=due,
                    category_id=bill.category_id,
                    payment_method_id=bill.payment_method_id,
                    status="unpaid",
                    recurrence=bill.recurrence,
                    recurrence_details=bill.recurrence_details,
                    notes=bill.notes,
                )
        self.commit()
        return bill, next_bill

    def statistics(self, time_range: Optional[str]) -> Dict[str, Any]:
        start = range_start(time_range)
        totals = self.bills.totals_since(start)
        return {
            **totals,
            "categories": self.bills.totals_by_category(start),
            "monthly": self.bills.monthly_totals(start),
        }


def with_percentages(rows: list[Dict[str, Any]]) -> tuple[list[Dict[str, Any]], float]:
    """Attach an integer share of the overall total to each row."""
    total = sum(r["total"] for r in rows)
    for r in rows:
        r["percentage"] = int(r["total"] / total * 100 + 0.5) if total > 0 else 0
    return rows, total
