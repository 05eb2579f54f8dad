"""Domain exceptions and their JSON error handlers."""
from __future__ import annotations
from typing import Any, Optional

from flask import Flask, jsonify
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from .extensions import db
from .utils.logging_utils import get_logger

logger = get_logger("errors")


class BillTrackerError(Exception):
    status_code = 400

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationFailed(BillTrackerError):
    status_code = 400

    def __init__(self, details: Optional[Any] = None, message: str = "Validation failed"):
        super().__init__(message, details)


class NotFoundError(BillTrackerError):
    status_code = 404

    def __init__(self, entity: str):
        super().__init__(f"{entity} not found")


class ConflictError(BillTrackerError):
    status_code = 409


def _validation_details(exc: ValidationError) -> list[str]:
    details = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "body"
        details.append(f"{field}: {err.get('msg')}")
    return details


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(BillTrackerError)
    def handle_domain_error(exc: BillTrackerError):
        db.session.rollback()
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return jsonify({"error": "Validation failed", "details": _validation_details(exc)}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({"error": exc.description or exc.name}), exc.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        db.session.rollback()
        logger.exception("Unhandled error: %s", exc)
        return jsonify({"error": "An unexpected error occurred"}), 500
