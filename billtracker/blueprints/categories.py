"""Categories API:
- GET    /api/categories
- POST   /api/categories
- PUT    /api/categories/<id>
- DELETE /api/categories/<id>      bills move to "Other"
- GET    /api/categories/statistics
"""
from __future__ import annotations
from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from ..errors import NotFoundError
from ..models import DEFAULT_CATEGORY_COLOR, DEFAULT_CATEGORY_ICON
from ..repositories import CategoryRepository
from ..schemas import CategorySchema
from ..services import with_percentages
from ..utils.helpers import api_error, range_start
from ..utils.logging_utils import get_logger
from ..utils.security import current_user_id

bp = Blueprint("categories", __name__)
logger = get_logger("categories")


def _get_owned(repo: CategoryRepository, category_id: str):
    category = repo.get_by_id(category_id)
    if category is None:
        raise NotFoundError("Category")
    return category


@bp.route("/api/categories")
@jwt_required()
@api_error("fetching categories")
def list_categories():
    repo = CategoryRepository(current_user_id())
    return jsonify({"categories": [c.to_dict() for c in repo.list_ordered()]})


@bp.route("/api/categories", methods=["POST"])
@jwt_required()
@api_error("creating the category")
def create_category():
    data = CategorySchema.from_request()
    repo = CategoryRepository(current_user_id())
    category = repo.create(
        name=data.name,
        color=data.color or DEFAULT_CATEGORY_COLOR,
        icon=data.icon or DEFAULT_CATEGORY_ICON,
    )
    repo.commit()
    return jsonify({"message": "Category created successfully", "category": category.to_dict()})


@bp.route("/api/categories/statistics")
@jwt_required()
@api_error("fetching category statistics")
def category_statistics():
    repo = CategoryRepository(current_user_id())
    rows, total = with_percentages(repo.statistics(range_start(request.args.get("timeRange"))))
    return jsonify({"categories": rows, "totalAmount": total})


@bp.route("/api/categories/<category_id>", methods=["PUT"])
@jwt_required()
@api_error("updating the category")
def update_category(category_id: str):
    data = CategorySchema.from_request()
    repo = CategoryRepository(current_user_id())
    category = _get_owned(repo, category_id)
    repo.update(
        category,
        name=data.name,
        color=data.color or category.color,
        icon=data.icon or category.icon,
    )
    repo.commit()
    return jsonify({"message": "Category updated successfully", "category": category.to_dict()})


@bp.route("/api/categories/<category_id>", methods=["DELETE"])
@jwt_required()
@api_error("deleting the category")
def delete_category(category_id: str):
    repo = CategoryRepository(current_user_id())
    category = _get_owned(repo, category_id)
    moved = repo.delete_reassigning_bills(category)
    repo.commit()
    logger.info("Category %s deleted, %s bill(s) reassigned", category_id, moved)
    return jsonify({"message": "Category deleted successfully", "reassigned": moved})
