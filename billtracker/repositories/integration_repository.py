"""
Integration Repository implementation.
"""
from typing import List, Optional
from .base_repository import BaseRepository, UserScopedRepository
from ..models import UserIntegration

SCANNABLE_TYPES = ("email", "dropbox")


class IntegrationRepository(UserScopedRepository[UserIntegration]):

    def __init__(self, user_id: str):
        super().__init__(UserIntegration, user_id)

    def list_ordered(self) -> List[UserIntegration]:
        return self.query().order_by(UserIntegration.type.asc()).all()

    def find_by_type(self, integration_type: str) -> Optional[UserIntegration]:
        return self.query().filter(UserIntegration.type == integration_type).first()


class ActiveIntegrationRepository(BaseRepository[UserIntegration]):
    """Cross-user access used by the scheduled sync job."""

    def __init__(self, session=None):
        super().__init__(UserIntegration, session)

    def scannable(self) -> List[UserIntegration]:
        return (
            self.query()
            .filter(UserIntegration.status == "active", UserIntegration.type.in_(SCANNABLE_TYPES))
            .all()
        )
