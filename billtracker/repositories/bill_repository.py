"""
Bill Repository implementation with filtering, sorting and aggregates.
"""
from datetime import date
from typing import Any, Dict, List, Optional
from sqlalchemy import case, func
from .base_repository import UserScopedRepository
from ..models import Bill, Category, Document, OUTSTANDING_STATUSES

# columns a client may sort by; anything else falls back to due_date
SORTABLE_COLUMNS = {
    "due_date": Bill.due_date,
    "amount": Bill.amount,
    "name": Bill.name,
    "created_at": Bill.created_at,
    "status": Bill.status,
}


class BillRepository(UserScopedRepository[Bill]):
    """Repository for a single user's bills."""

    def __init__(self, user_id: str):
        super().__init__(Bill, user_id)

    def search(
        self,
        status: Optional[str] = None,
        category_id: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> List[Bill]:
        query = self.query()
        if status:
            query = query.filter(Bill.status == status)
        if category_id:
            query = query.filter(Bill.category_id == category_id)
        if date_from:
            query = query.filter(Bill.due_date >= date_from)
        if date_to:
            query = query.filter(Bill.due_date <= date_to)

        column = SORTABLE_COLUMNS.get(sort_by or "", Bill.due_date)
        ordering = column.desc() if (sort_order or "").lower() == "desc" else column.asc()
        return query.order_by(ordering, Bill.id).all()

    def upcoming(self, until: date) -> List[Bill]:
        """Outstanding bills due on or before ``until``, overdue ones included."""
        return (
            self.query()
            .filter(Bill.status.in_(OUTSTANDING_STATUSES), Bill.due_date <= until)
            .order_by(Bill.due_date.asc())
            .all()
        )

    def find_duplicate(self, name: str, amount: float, due_date: date) -> Optional[Bill]:
        return (
            self.query()
            .filter(Bill.name == name, Bill.amount == amount, Bill.due_date == due_date)
            .first()
        )

    def documents_for(self, bill: Bill) -> List[Document]:
        return (
            self.session.query(Document)
            .filter(Document.bill_id == bill.id, Document.user_id == self.user_id)
            .order_by(Document.created_at.desc())
            .all()
        )

    def delete_detaching_documents(self, bill: Bill) -> None:
        self.session.query(Document).filter(Document.bill_id == bill.id).update(
            {Document.bill_id: None}, synchronize_session="fetch"
        )
        self.delete(bill)

    def totals_since(self, start_date: date) -> Dict[str, float]:
        row = (
            self.session.query(
                func.coalesce(func.sum(Bill.amount), 0).label("total"),
                func.coalesce(func.sum(case((Bill.status == "paid", Bill.amount), else_=0)), 0).label("paid"),
                func.coalesce(
                    func.sum(case((Bill.status.in_(OUTSTANDING_STATUSES), Bill.amount), else_=0)), 0
                ).label("unpaid"),
            )
            .filter(Bill.user_id == self.user_id, Bill.due_date >= start_date)
            .one()
        )
        return {"total": float(row.total), "paid": float(row.paid), "unpaid": float(row.unpaid)}

    def totals_by_category(self, start_date: date) -> List[Dict[str, Any]]:
        rows = (
            self.session.query(
                Category.id, Category.name, Category.color, Category.icon,
                func.sum(Bill.amount).label("total"),
            )
            .join(Category, Bill.category_id == Category.id)
            .filter(Bill.user_id == self.user_id, Bill.due_date >= start_date)
            .group_by(Category.id, Category.name, Category.color, Category.icon)
            .order_by(func.sum(Bill.amount).desc())
            .all()
        )
        return [
            {"id": r.id, "name": r.name, "color": r.color, "icon": r.icon, "total": float(r.total or 0)}
            for r in rows
        ]

    def monthly_totals(self, start_date: date) -> List[Dict[str, Any]]:
        """Totals per ``YYYY-MM`` of the due date, oldest month first."""
        rows = (
            self.session.query(Bill.due_date, Bill.amount, Bill.status)
            .filter(Bill.user_id == self.user_id, Bill.due_date >= start_date)
            .all()
        )
        months: Dict[str, Dict[str, Any]] = {}
        for due_date, amount, status in rows:
            key = due_date.strftime("%Y-%m")
            bucket = months.setdefault(key, {"month": key, "total": 0.0, "paid": 0.0, "unpaid": 0.0})
            bucket["total"] += float(amount)
            if status == "paid":
                bucket["paid"] += float(amount)
            elif status in OUTSTANDING_STATUSES:
                bucket["unpaid"] += float(amount)
        return [months[k] for k in sorted(months)]


def mark_overdue(today: date, session=None) -> int:
    """Flag every unpaid bill due before ``today`` as overdue, across all users."""
    from ..extensions import db

    session = session or db.session
    return (
        session.query(Bill)
        .filter(Bill.status == "unpaid", Bill.due_date < today)
        .update({Bill.status: "overdue"}, synchronize_session="fetch")
    )
