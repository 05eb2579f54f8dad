"""Bills API:
- GET    /api/bills             list (filters, sorting, CSV export)
- GET    /api/bills/upcoming    outstanding bills due within N days
- GET    /api/bills/statistics  totals, by-category and monthly aggregates
- GET    /api/bills/<id>        detail with attached documents
- POST   /api/bills             create
- PUT    /api/bills/<id>        partial update
- DELETE /api/bills/<id>        delete (documents are detached)
- POST   /api/bills/<id>/pay    mark paid, rolling recurring bills forward
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from ..schemas import BillCreateSchema, BillPaySchema, BillUpdateSchema
from ..services import BillService
from ..utils.helpers import api_error, csv_response, days_window, parse_date
from ..utils.logging_utils import audit_logger
from ..utils.security import current_user_id

bp = Blueprint("bills", __name__)

CSV_HEADERS = [
    "name", "amount", "due_date", "status", "category", "payment_method",
    "recurrence", "paid_at", "notes",
]


def _csv_rows(bills):
    for b in bills:
        yield [
            b.name,
            f"{b.amount:.2f}",
            b.due_date.isoformat(),
            b.status,
            b.category.name if b.category else "",
            b.payment_method.name if b.payment_method else "",
            b.recurrence or "",
            b.paid_at.isoformat() if b.paid_at else "",
            b.notes or "",
        ]


@bp.route("/api/bills")
@jwt_required()
@api_error("fetching bills")
def list_bills():
    service = BillService(current_user_id())
    args = request.args
    bills = service.bills.search(
        status=args.get("status") or None,
        category_id=args.get("category") or None,
        date_from=parse_date(args.get("from")),
        date_to=parse_date(args.get("to")),
        sort_by=args.get("sort_by"),
        sort_order=args.get("sort_order"),
    )
    if args.get("format") == "csv":
        audit_logger.log_user_action(
            service.user_id, "export", "bills", "success",
            details={"rows": len(bills)}, ip_address=request.remote_addr,
        )
        return csv_response(CSV_HEADERS, _csv_rows(bills), filename="bills.csv")
    return jsonify({"bills": [b.to_dict() for b in bills]})


@bp.route("/api/bills/upcoming")
@jwt_required()
@api_error("fetching upcoming bills")
def upcoming_bills():
    days = request.args.get("days", 7, type=int)
    _, until = days_window(max(days, 0))
    bills = BillService(current_user_id()).bills.upcoming(until)
    return jsonify({"bills": [b.to_dict() for b in bills]})


@bp.route("/api/bills/statistics")
@jwt_required()
@api_error("fetching bill statistics")
def bill_statistics():
    stats = BillService(current_user_id()).statistics(request.args.get("timeRange"))
    return jsonify(stats)


@bp.route("/api/bills/<bill_id>")
@jwt_required()
@api_error("fetching the bill")
def get_bill(bill_id: str):
    service = BillService(current_user_id())
    bill = service.get(bill_id)
    documents = service.bills.documents_for(bill)
    return jsonify({"bill": bill.to_dict(), "documents": [d.to_dict(include_ocr=False) for d in documents]})


@bp.route("/api/bills", methods=["POST"])
@jwt_required()
@api_error("creating the bill")
def create_bill():
    data = BillCreateSchema.from_request()
    bill = BillService(current_user_id()).create(data.model_dump())
    return jsonify({"message": "Bill created successfully", "bill": bill.to_dict()})


@bp.route("/api/bills/<bill_id>", methods=["PUT"])
@jwt_required()
@api_error("updating the bill")
def update_bill(bill_id: str):
    data = BillUpdateSchema.from_request()
    bill = BillService(current_user_id()).update(bill_id, data.model_dump(exclude_unset=True))
    return jsonify({"message": "Bill updated successfully", "bill": bill.to_dict()})


@bp.route("/api/bills/<bill_id>", methods=["DELETE"])
@jwt_required()
@api_error("deleting the bill")
def delete_bill(bill_id: str):
    BillService(current_user_id()).delete(bill_id)
    return jsonify({"message": "Bill deleted successfully"})


@bp.route("/api/bills/<bill_id>/pay", methods=["POST"])
@jwt_required()
@api_error("paying the bill")
def pay_bill(bill_id: str):
    data = BillPaySchema.from_request()
    bill, next_bill = BillService(current_user_id()).pay(bill_id, data.payment_method_id)
    return jsonify({
        "message": "Bill marked as paid",
        "bill": bill.to_dict(),
        "next_bill": next_bill.to_dict() if next_bill else None,
    })
