"""Shared helpers: CSV export, upload checks, time ranges and view error wrapping."""
from __future__ import annotations
import csv
from datetime import date, timedelta
from functools import wraps
from io import StringIO
from typing import Iterable, Optional, Sequence
from dateutil.relativedelta import relativedelta
from flask import Response, current_app, jsonify
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from ..extensions import db
from .logging_utils import get_logger

logger = get_logger("api")

TIME_RANGES = {
    "7d": relativedelta(days=7),
    "30d": relativedelta(days=30),
    "90d": relativedelta(days=90),
    "1y": relativedelta(years=1),
}
DEFAULT_TIME_RANGE = "30d"


def csv_response(headers: Sequence[str], rows: Iterable[Sequence], filename: str = "export.csv") -> Response:
    si = StringIO()
    writer = csv.writer(si)
    writer.writerow(headers)
    for r in rows:
        writer.writerow(r)
    return Response(
        si.getvalue(),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


def allowed_file(filename: str) -> bool:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    return ext in current_app.config.get("ALLOWED_EXTENSIONS", set())


def range_start(time_range: Optional[str], today: Optional[date] = None) -> date:
    """First day covered by a ``7d``/``30d``/``90d``/``1y`` range; unknown values mean 30d."""
    today = today or date.today()
    return today - TIME_RANGES.get(time_range or DEFAULT_TIME_RANGE, TIME_RANGES[DEFAULT_TIME_RANGE])


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def days_window(days: int, today: Optional[date] = None) -> tuple[date, date]:
    today = today or date.today()
    return today, today + timedelta(days=days)


def api_error(action: str):
    """Turn unexpected exceptions raised by a view into a logged 500 response.

    Domain errors, HTTP errors and validation errors keep propagating to the
    app-level handlers.
    """
    from ..errors import BillTrackerError

    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except (BillTrackerError, HTTPException, ValidationError):
                raise
            except Exception:
                db.session.rollback()
                logger.exception("Error while %s", action)
                return jsonify({"error": f"An error occurred while {action}"}), 500
        return wrapper
    return decorator
