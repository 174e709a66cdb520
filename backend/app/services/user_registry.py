"""Records a user the first time they log in."""

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.core.database import DocumentStore
from app.core.exceptions import ValidationError
from app.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Registration:
    created: bool
    user: User


class UserRegistry:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def register_user(self, email: str | None, display_name: str | None) -> Registration:
        """Create the user unless one with this email already exists."""
        if not email or not display_name:
            raise ValidationError("Email and display name are required.")

        async with self._store.session() as db:
            existing = await _find_by_email(db, email)
            if existing:
                return Registration(created=False, user=existing)

            user = User(email=email, display_name=display_name)
            db.add(user)
            try:
                await db.commit()
            except IntegrityError:
                # Lost a race against a concurrent first login for the same email
                await db.rollback()
                existing = await _find_by_email(db, email)
                if existing is None:
                    raise
                return Registration(created=False, user=existing)

        logger.info("Registered user %s", email)
        return Registration(created=True, user=user)


async def _find_by_email(db, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()
