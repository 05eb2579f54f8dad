"""
Document Repository implementation.
"""
from typing import Iterable, List, Optional
from .base_repository import UserScopedRepository
from ..models import Document


class DocumentRepository(UserScopedRepository[Document]):

    def __init__(self, user_id: str):
        super().__init__(Document, user_id)

    def list_recent(self, bill_id: Optional[str] = None) -> List[Document]:
        query = self.query()
        if bill_id:
            query = query.filter(Document.bill_id == bill_id)
        return query.order_by(Document.created_at.desc()).all()

    def path_in_use(self, paths: Iterable[str]) -> bool:
        """Whether any document, whoever owns it, still points at one of ``paths``."""
        return (
            self.session.query(Document.id)
            .filter(Document.file_path.in_(list(paths)))
            .first()
        ) is not None
