"""
Mock OCR extraction for scanned bills.

No OCR engine is called: every document yields the same sample utility
invoice. The shape of the result matches what a real extractor would
return so the rest of the flow (storing, creating a bill) is exercised.
"""
from __future__ import annotations
from copy import deepcopy
from datetime import date
from typing import Any, Dict, Optional

from ..models import Document
from ..utils.logging_utils import get_logger

logger = get_logger("ocr")

SAMPLE_OCR_RESULT: Dict[str, Any] = {
    "text": (
        "ACME Utilities\nInvoice #12345\nDate: 2025-04-01\nDue Date: 2025-04-15\n"
        "Amount Due: $85.50\nService Period: March 2025"
    ),
    "extracted": {
        "vendor": "ACME Utilities",
        "invoice_number": "12345",
        "issue_date": "2025-04-01",
        "due_date": "2025-04-15",
        "amount": 85.50,
        "service_period": "March 2025",
    },
    "confidence": 0.92,
}


class OcrService:
    """Runs (mock) OCR over documents and maps results onto bill fields."""

    @staticmethod
    def extract(document: Document) -> Dict[str, Any]:
        logger.info("Running OCR on document %s (%s)", document.id, document.file_type)
        return deepcopy(SAMPLE_OCR_RESULT)

    @staticmethod
    def process(document: Document) -> Dict[str, Any]:
        """Extract and store the result on the document."""
        result = OcrService.extract(document)
        document.ocr_processed = True
        document.ocr_data = result
        return result

    @staticmethod
    def bill_fields(ocr_data: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Bill attributes derived from stored OCR data, or None when unusable."""
        extracted = (ocr_data or {}).get("extracted") or {}
        vendor = extracted.get("vendor")
        amount = extracted.get("amount")
        due = extracted.get("due_date")
        if not vendor or amount is None or not due:
            return None
        try:
            due_date = date.fromisoformat(str(due))
            amount = float(amount)
        except (TypeError, ValueError):
            return None
        notes = None
        if extracted.get("invoice_number"):
            notes = f"Invoice #{extracted['invoice_number']}"
        return {"name": vendor, "amount": amount, "due_date": due_date, "notes": notes}
