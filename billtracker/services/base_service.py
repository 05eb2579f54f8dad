"""
Base service: owns the session shared by the repositories a service drives.
"""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..extensions import db
from ..utils.logging_utils import get_logger

logger = get_logger("services")


class BaseService:

    def __init__(self, session: Optional[Session] = None):
        self.session = session or db.session

    def commit(self) -> None:
        """Commit, rolling back before re-raising if the flush fails."""
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Commit failed in %s", type(self).__name__)
            raise
