"""
Repository base classes.

``BaseRepository`` wraps the session for one model. ``UserScopedRepository``
restricts every read to rows owned by a single user, so a foreign id simply
looks like a missing row.
"""
from typing import TypeVar, Generic, Optional
from sqlalchemy.orm import Query, Session
from ..extensions import db

T = TypeVar('T')


class BaseRepository(Generic[T]):

    def __init__(self, model_class: type[T], session: Optional[Session] = None):
        self.model_class = model_class
        self.session = session or db.session

    def query(self) -> Query:
        return self.session.query(self.model_class)

    def _filtered(self, **criteria) -> Query:
        query = self.query()
        for key, value in criteria.items():
            column = getattr(self.model_class, key)
            query = query.filter(column.is_(None) if value is None else column == value)
        return query

    def find_one_by(self, **criteria) -> Optional[T]:
        return self._filtered(**criteria).first()

    def get_by_id(self, entity_id) -> Optional[T]:
        return self.session.get(self.model_class, entity_id)

    def create(self, **kwargs) -> T:
        """Add a new entity to the session; the caller commits."""
        entity = self.model_class(**kwargs)
        self.session.add(entity)
        return entity

    def update(self, entity: T, **changes) -> T:
        """Apply ``changes`` to columns the model actually has."""
        for key, value in changes.items():
            if hasattr(entity, key):
                setattr(entity, key, value)
        return entity

    def delete(self, entity: T) -> None:
        self.session.delete(entity)

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    def flush(self) -> None:
        self.session.flush()


class UserScopedRepository(BaseRepository[T]):

    def __init__(self, model_class: type[T], user_id: str, session: Optional[Session] = None):
        super().__init__(model_class, session)
        self.user_id = user_id

    def query(self) -> Query:
        return super().query().filter(self.model_class.user_id == self.user_id)

    def create(self, **kwargs) -> T:
        kwargs.setdefault("user_id", self.user_id)
        return super().create(**kwargs)

    def get_by_id(self, entity_id) -> Optional[T]:
        """Owned entity with this id, or None."""
        if not entity_id:
            return None
        return self.query().filter(self.model_class.id == entity_id).first()
