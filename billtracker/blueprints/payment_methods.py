"""Payment methods API:
- GET    /api/payment-methods            default first, then by name
- POST   /api/payment-methods
- PUT    /api/payment-methods/<id>
- DELETE /api/payment-methods/<id>       bills are detached, default is handed over
- GET    /api/payment-methods/statistics
"""
from __future__ import annotations
from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from ..errors import NotFoundError
from ..repositories import PaymentMethodRepository
from ..schemas import PaymentMethodSchema
from ..services import with_percentages
from ..utils.helpers import api_error, range_start
from ..utils.security import current_user_id

bp = Blueprint("payment_methods", __name__)


def _get_owned(repo: PaymentMethodRepository, method_id: str):
    method = repo.get_by_id(method_id)
    if method is None:
        raise NotFoundError("Payment method")
    return method


@bp.route("/api/payment-methods")
@jwt_required()
@api_error("fetching payment methods")
def list_payment_methods():
    repo = PaymentMethodRepository(current_user_id())
    return jsonify({"paymentMethods": [m.to_dict() for m in repo.list_ordered()]})


@bp.route("/api/payment-methods", methods=["POST"])
@jwt_required()
@api_error("creating the payment method")
def create_payment_method():
    data = PaymentMethodSchema.from_request()
    repo = PaymentMethodRepository(current_user_id())
    if data.is_default:
        repo.clear_default()
    method = repo.create(name=data.name, type=data.type, details=data.details, is_default=data.is_default)
    repo.commit()
    return jsonify({"message": "Payment method created successfully", "paymentMethod": method.to_dict()})


@bp.route("/api/payment-methods/statistics")
@jwt_required()
@api_error("fetching payment method statistics")
def payment_method_statistics():
    repo = PaymentMethodRepository(current_user_id())
    rows, total = with_percentages(repo.statistics(range_start(request.args.get("timeRange"))))
    return jsonify({"paymentMethods": rows, "totalAmount": total})


@bp.route("/api/payment-methods/<method_id>", methods=["PUT"])
@jwt_required()
@api_error("updating the payment method")
def update_payment_method(method_id: str):
    data = PaymentMethodSchema.from_request()
    repo = PaymentMethodRepository(current_user_id())
    method = _get_owned(repo, method_id)
    if data.is_default and not method.is_default:
        repo.clear_default()
    repo.update(method, name=data.name, type=data.type, details=data.details, is_default=data.is_default)
    repo.commit()
    return jsonify({"message": "Payment method updated successfully", "paymentMethod": method.to_dict()})


@bp.route("/api/payment-methods/<method_id>", methods=["DELETE"])
@jwt_required()
@api_error("deleting the payment method")
def delete_payment_method(method_id: str):
    repo = PaymentMethodRepository(current_user_id())
    method = _get_owned(repo, method_id)
    promoted = repo.delete_detaching_bills(method)
    repo.commit()
    return jsonify({
        "message": "Payment method deleted successfully",
        "newDefaultId": promoted.id if promoted else None,
    })
