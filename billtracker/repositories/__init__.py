"""
Repository pattern implementation for data access abstraction.
User-owned entities go through UserScopedRepository so every query is
filtered by the authenticated user.
"""

from .base_repository import BaseRepository, UserScopedRepository
from .bill_repository import BillRepository
from .category_repository import CategoryRepository
from .document_repository import DocumentRepository
from .integration_repository import ActiveIntegrationRepository, IntegrationRepository
from .payment_method_repository import PaymentMethodRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "UserScopedRepository",
    "BillRepository",
    "CategoryRepository",
    "DocumentRepository",
    "IntegrationRepository",
    "ActiveIntegrationRepository",
    "PaymentMethodRepository",
    "UserRepository",
]
