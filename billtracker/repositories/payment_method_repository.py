"""
Payment method Repository implementation.
Keeps the one-default-per-user rule with update-then-write sequences.
"""
from typing import List, Optional
from sqlalchemy import case, func
from .base_repository import UserScopedRepository
from ..models import Bill, OUTSTANDING_STATUSES, PaymentMethod


class PaymentMethodRepository(UserScopedRepository[PaymentMethod]):

    def __init__(self, user_id: str):
        super().__init__(PaymentMethod, user_id)

    def list_ordered(self) -> List[PaymentMethod]:
        return self.query().order_by(PaymentMethod.is_default.desc(), PaymentMethod.name.asc()).all()

    def find_default(self) -> Optional[PaymentMethod]:
        return self.query().filter(PaymentMethod.is_default.is_(True)).first()

    def clear_default(self) -> None:
        self.query().update({PaymentMethod.is_default: False}, synchronize_session="fetch")

    def delete_detaching_bills(self, method: PaymentMethod) -> Optional[PaymentMethod]:
        """Delete ``method``; returns the method promoted to default, if any."""
        was_default = bool(method.is_default)
        self.session.query(Bill).filter(
            Bill.user_id == self.user_id, Bill.payment_method_id == method.id
        ).update({Bill.payment_method_id: None}, synchronize_session="fetch")
        self.delete(method)
        self.flush()

        if not was_default:
            return None
        replacement = self.query().order_by(PaymentMethod.created_at.asc()).first()
        if replacement:
            replacement.is_default = True
        return replacement

    def statistics(self, start_date) -> List[dict]:
        rows = (
            self.session.query(
                PaymentMethod.id,
                PaymentMethod.name,
                PaymentMethod.type,
                func.coalesce(func.sum(Bill.amount), 0).label("total"),
                func.count(Bill.id).label("bill_count"),
                func.coalesce(func.sum(case((Bill.status == "paid", Bill.amount), else_=0)), 0).label("paid"),
                func.coalesce(
                    func.sum(case((Bill.status.in_(OUTSTANDING_STATUSES), Bill.amount), else_=0)), 0
                ).label("unpaid"),
            )
            .outerjoin(Bill, (Bill.payment_method_id == PaymentMethod.id) & (Bill.due_date >= start_date))
            .filter(PaymentMethod.user_id == self.user_id)
            .group_by(PaymentMethod.id, PaymentMethod.name, PaymentMethod.type)
            .order_by(func.coalesce(func.sum(Bill.amount), 0).desc())
            .all()
        )
        return [
            {
                "id": r.id,
                "name": r.name,
                "type": r.type,
                "total": float(r.total or 0),
                "bill_count": int(r.bill_count or 0),
                "paid": float(r.paid or 0),
                "unpaid": float(r.unpaid or 0),
            }
            for r in rows
        ]
