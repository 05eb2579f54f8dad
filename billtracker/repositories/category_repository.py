"""
Category Repository implementation.
"""
from typing import List, Optional
from sqlalchemy import case, func
from .base_repository import UserScopedRepository
from ..models import Bill, Category, FALLBACK_CATEGORY_NAME, OUTSTANDING_STATUSES


class CategoryRepository(UserScopedRepository[Category]):

    def __init__(self, user_id: str):
        super().__init__(Category, user_id)

    def list_ordered(self) -> List[Category]:
        return self.query().order_by(Category.name.asc()).all()

    def find_fallback(self) -> Optional[Category]:
        return self.query().filter(Category.name == FALLBACK_CATEGORY_NAME).first()

    def delete_reassigning_bills(self, category: Category) -> int:
        """Delete ``category``; its bills move to the fallback category, or to none.

        Returns the number of bills that were reassigned.
        """
        fallback = self.find_fallback()
        target_id = fallback.id if fallback and fallback.id != category.id else None
        moved = (
            self.session.query(Bill)
            .filter(Bill.user_id == self.user_id, Bill.category_id == category.id)
            .update({Bill.category_id: target_id}, synchronize_session="fetch")
        )
        self.delete(category)
        return moved

    def statistics(self, start_date) -> List[dict]:
        """Per-category totals for bills due on or after ``start_date``."""
        paid = func.sum(case((Bill.status == "paid", Bill.amount), else_=0))
        unpaid = func.sum(case((Bill.status.in_(OUTSTANDING_STATUSES), Bill.amount), else_=0))
        rows = (
            self.session.query(
                Category.id,
                Category.name,
                Category.color,
                Category.icon,
                func.coalesce(func.sum(Bill.amount), 0).label("total"),
                func.count(Bill.id).label("bill_count"),
                func.coalesce(paid, 0).label("paid"),
                func.coalesce(unpaid, 0).label("unpaid"),
            )
            .outerjoin(Bill, (Bill.category_id == Category.id) & (Bill.due_date >= start_date))
            .filter(Category.user_id == self.user_id)
            .group_by(Category.id, Category.name, Category.color, Category.icon)
            .order_by(func.coalesce(func.sum(Bill.amount), 0).desc())
            .all()
        )
        return [
            {
                "id": r.id,
                "name": r.name,
                "color": r.color,
                "icon": r.icon,
                "total": float(r.total or 0),
                "bill_count": int(r.bill_count or 0),
                "paid": float(r.paid or 0),
                "unpaid": float(r.unpaid or 0),
            }
            for r in rows
        ]
