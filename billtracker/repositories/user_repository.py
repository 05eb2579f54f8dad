"""
User Repository implementation with user-specific operations.
"""
from typing import Optional
from .base_repository import BaseRepository
from ..models import Category, DEFAULT_CATEGORIES, User
from ..utils.security import hash_password, verify_password


class UserRepository(BaseRepository[User]):
    """Repository for User-specific operations."""

    def __init__(self):
        super().__init__(User)

    def find_by_email(self, email: str) -> Optional[User]:
        return self.find_one_by(email=email.strip().lower())

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user if the password matches, else None."""
        user = self.find_by_email(email)
        if user and verify_password(user.password_hash, password):
            return user
        return None

    def create_user(self, email: str, name: str, password: str) -> User:
        """Create a user with a hashed password and the default categories."""
        user = self.create(email=email.strip().lower(), name=name, password_hash=hash_password(password))
        self.flush()
        for cat_name, color, icon in DEFAULT_CATEGORIES:
            self.session.add(Category(user_id=user.id, name=cat_name, color=color, icon=icon))
        return user

    def update_password(self, user: User, new_password: str) -> User:
        user.password_hash = hash_password(new_password)
        return user
