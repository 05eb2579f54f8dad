"""
Business logic service layer.
Provides high-level business operations using repositories.
"""
from .base_service import BaseService
from .bill_service import BillService, next_due_date, with_percentages
from .integration_service import IntegrationService, scan, sync_active_integrations, sync_integration
from .ocr_service import OcrService

__all__ = [
    'BaseService',
    'BillService',
    'IntegrationService',
    'OcrService',
    'next_due_date',
    'with_percentages',
    'scan',
    'sync_integration',
    'sync_active_integrations',
]
