"""Repository for User database operations."""

import logging
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from tickoff.models.user import User
from tickoff.database.models import UserDB

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        user_db = self.db.query(UserDB).filter(UserDB.id == user_id).first()
        return user_db.to_pydantic() if user_db else None

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        user_db = self.db.query(UserDB).filter(UserDB.email == email).first()
        return user_db.to_pydantic() if user_db else None

    def get_or_create(self, email: str, name: Optional[str] = None) -> User:
        """Return the account registered under email, creating it on first sign-in.

        The id of an existing account never changes, so tasks stay attached to it
        across sign-ins.
        """
        existing = self.get_by_email(email)
        if existing:
            return existing

        now = datetime.utcnow()
        user = User(id=str(uuid.uuid4()), email=email, name=name, created_at=now, updated_at=now)
        try:
            user_db = UserDB.from_pydantic(user)
            self.db.add(user_db)
            self.db.commit()
            self.db.refresh(user_db)
            logger.debug(f"Created user {user.id}: {user.email}")
            return user_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create user {email}: {type(e).__name__}: {str(e)}")
            raise
