"""
User directory: registration on first contact and lookups by external id.
"""

from __future__ import annotations

import random

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from kotoba.core.enums import DEFAULT_LEVEL, StudyMode
from kotoba.core.exceptions import UserNotFoundError
from kotoba.db.database import dialect_insert
from kotoba.db.models import User


class UserDirectory:
    """Get-or-create and query learners by their external (Telegram) id."""

    def __init__(
        self,
        avatar_base_url: str | None = None,
        avatar_count: int = 30,
        rng: random.Random | None = None,
    ):
        self.avatar_base_url = avatar_base_url.rstrip("/") if avatar_base_url else None
        self.avatar_count = avatar_count
        self._rng = rng or random.Random()

    def random_avatar_url(self) -> str | None:
        if not self.avatar_base_url or self.avatar_count < 1:
            return None
        return f"{self.avatar_base_url}/avatars/{self._rng.randint(1, self.avatar_count)}.svg"

    def get(self, session: Session, external_id: int) -> User:
        user = session.scalars(select(User).where(User.telegram_id == external_id)).first()
        if user is None:
            raise UserNotFoundError(external_id)
        return user

    def ensure_user(
        self,
        session: Session,
        external_id: int,
        username: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """
        Return the user for ``external_id``, creating them on first contact.

        Creation is an insert-if-absent, so two first messages arriving at
        once still produce a single row. Profile names are refreshed when
        given, and a missing avatar is filled in.
        """
        insert = dialect_insert(session)
        result = session.execute(
            insert(User)
            .values(
                telegram_id=external_id,
                username=username,
                first_name=first_name,
                last_name=last_name,
                avatar_url=self.random_avatar_url(),
                level=DEFAULT_LEVEL.value,
                points=0.0,
                exercises_done=0,
                current_mode=StudyMode.EXERCISE.value,
            )
            .on_conflict_do_nothing(index_elements=["telegram_id"])
        )
        if result.rowcount:
            logger.info(f"Registered new user {external_id} ({username})")

        user = self.get(session, external_id)
        if username is not None:
            user.username = username
        if first_name is not None:
            user.first_name = first_name
        if last_name is not None:
            user.last_name = last_name
        if user.avatar_url is None:
            user.avatar_url = self.random_avatar_url()
        session.flush()
        return user

    def count_users(self, session: Session) -> int:
        return session.scalar(select(func.count()).select_from(User)) or 0

    def list_users(self, session: Session, limit: int = 50, offset: int = 0) -> list[User]:
        """Users newest first."""
        stmt = select(User).order_by(User.created_at.desc(), User.id.desc()).limit(limit).offset(offset)
        return list(session.scalars(stmt))
