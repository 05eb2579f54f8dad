"""
Integration service: mock email/Dropbox scanning, bill import and smart
assistant pairing.

Providers are not contacted; each scannable type returns a fixed set of
bill-like findings with timestamps relative to the time of the sync.
"""
from __future__ import annotations
import uuid
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from ..errors import ConflictError, NotFoundError
from ..models import UserIntegration
from ..repositories import ActiveIntegrationRepository, BillRepository, IntegrationRepository
from ..utils.logging_utils import get_logger
from .base_service import BaseService

logger = get_logger("integrations")

DEFAULT_DEVICE_NAME = "Unknown Device"


def _scan_email(now: datetime) -> Dict[str, Any]:
    bills = [
        {
            "subject": "Your Electric Bill for April 2025",
            "from": "billing@acmeutilities.com",
            "date": (now - timedelta(days=2)).isoformat(),
            "extracted": {"vendor": "ACME Utilities", "amount": 85.50, "due_date": "2025-04-15"},
        },
        {
            "subject": "Internet Service Invoice #INV-8765",
            "from": "billing@fastinternet.com",
            "date": (now - timedelta(days=3)).isoformat(),
            "extracted": {"vendor": "Fast Internet", "amount": 59.99, "due_date": "2025-04-18"},
        },
        {
            "subject": "Your Netflix Subscription",
            "from": "info@netflix.com",
            "date": (now - timedelta(days=1)).isoformat(),
            "extracted": {"vendor": "Netflix", "amount": 15.99, "due_date": "2025-04-22"},
        },
    ]
    return {"scanned": 15, "found": len(bills), "bills": bills}


def _scan_dropbox(now: datetime) -> Dict[str, Any]:
    bills = [
        {
            "filename": "water_bill_april_2025.pdf",
            "path": "/Bills/water_bill_april_2025.pdf",
            "size": 1250000,
            "modified": (now - timedelta(days=5)).isoformat(),
            "extracted": {"vendor": "City Water Department", "amount": 45.75, "due_date": "2025-04-28"},
        },
        {
            "filename": "car_insurance_q2_2025.pdf",
            "path": "/Bills/car_insurance_q2_2025.pdf",
            "size": 2340000,
            "modified": (now - timedelta(days=7)).isoformat(),
            "extracted": {"vendor": "Safe Auto Insurance", "amount": 320.00, "due_date": "2025-05-15"},
        },
    ]
    return {"scanned": 25, "found": len(bills), "bills": bills}


SCANNERS: Dict[str, Callable[[datetime], Dict[str, Any]]] = {
    "email": _scan_email,
    "dropbox": _scan_dropbox,
}


def scan(integration_type: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Findings for one provider type; unknown types scan nothing."""
    scanner = SCANNERS.get(integration_type)
    if scanner is None:
        return {"scanned": 0, "found": 0, "bills": []}
    return scanner(now or datetime.utcnow())


class IntegrationService(BaseService):
    """Operations on one user's integrations."""

    def __init__(self, user_id: str, session=None):
        super().__init__(session)
        self.user_id = user_id
        self.integrations = IntegrationRepository(user_id)
        self.bills = BillRepository(user_id)

    def get(self, integration_id: str) -> UserIntegration:
        integration = self.integrations.get_by_id(integration_id)
        if integration is None:
            raise NotFoundError("Integration")
        return integration

    def create(self, data: Dict[str, Any]) -> UserIntegration:
        if self.integrations.find_by_type(data["type"]) is not None:
            raise ConflictError(f"Integration of type {data['type']} already exists")
        integration = self.integrations.create(**data)
        self.commit()
        logger.info("Integration %s (%s) created for user %s", integration.id, integration.type, self.user_id)
        return integration

    def update(self, integration_id: str, data: Dict[str, Any]) -> UserIntegration:
        integration = self.get(integration_id)
        self.integrations.update(integration, **data)
        self.commit()
        return integration

    def delete(self, integration_id: str) -> None:
        self.integrations.delete(self.get(integration_id))
        self.commit()

    def sync(self, integration_id: str, import_bills: bool = False) -> Dict[str, Any]:
        return sync_integration(self.get(integration_id), import_bills, self.bills, self.session)

    def connect_smart_assistant(self, assistant_type: str, device_name: Optional[str] = None) -> tuple[UserIntegration, bool]:
        """Pair a voice assistant; returns the integration and whether it was newly created."""
        details = {
            "device_name": device_name or DEFAULT_DEVICE_NAME,
            "connected_at": datetime.utcnow().isoformat(),
            "connection_id": uuid.uuid4().hex[:8],
        }
        integration = self.integrations.find_by_type(assistant_type)
        created = integration is None
        if created:
            integration = self.integrations.create(type=assistant_type, details=details, status="active")
        else:
            self.integrations.update(integration, details=details, status="active")
        self.commit()
        logger.info("Smart assistant %s connected for user %s", assistant_type, self.user_id)
        return integration, created


def _import_found_bills(found: List[Dict[str, Any]], bills: BillRepository, source: str) -> int:
    imported = 0
    for item in found:
        extracted = item["extracted"]
        due = date.fromisoformat(extracted["due_date"])
        amount = float(extracted["amount"])
        if bills.find_duplicate(extracted["vendor"], amount, due) is not None:
            continue
        bills.create(
            name=extracted["vendor"],
            amount=amount,
            due_date=due,
            status="unpaid",
            notes=f"Imported from {source}",
        )
        imported += 1
    return imported


def sync_integration(
    integration: UserIntegration,
    import_bills: bool = False,
    bills: Optional[BillRepository] = None,
    session=None,
) -> Dict[str, Any]:
    """Scan one integration, stamp ``last_sync`` and optionally import what was found."""
    service = BaseService(session)
    now = datetime.utcnow()
    results = scan(integration.type, now)
    integration.last_sync = now

    imported = 0
    if import_bills and results["bills"]:
        bills = bills or BillRepository(integration.user_id)
        imported = _import_found_bills(results["bills"], bills, integration.type)
    results["imported"] = imported

    service.commit()
    logger.info(
        "Integration %s (%s) synced: scanned=%s found=%s imported=%s",
        integration.id, integration.type, results["scanned"], results["found"], imported,
    )
    return results


def sync_active_integrations(session=None) -> int:
    """Scheduled job body: sync every active email/Dropbox integration without importing."""
    repo = ActiveIntegrationRepository(session)
    synced = 0
    for integration in repo.scannable():
        try:
            sync_integration(integration, session=repo.session)
            synced += 1
        except Exception:
            repo.rollback()
            logger.exception("Scheduled sync failed for integration %s", integration.id)
    return synced
