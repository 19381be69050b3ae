"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError

from api.db.models import User, UserSession
from api.db.session import get_session

logger = logging.getLogger(__name__)


class UniquenessViolation(Exception):
    """A write collided with an existing row on a unique column."""

    def __init__(self, field: str):
        super().__init__(f"{field} already exists")
        self.field = field


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session."""

    # -------------------------- users --------------------------
    def get_user(self, user_id: int) -> Optional[User]:
        with get_session() as session:
            return session.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        with get_session() as session:
            stmt = select(User).where(User.username == username)
            return session.execute(stmt).scalar_one_or_none()

    def create_user(self, username: str, password_hash: str) -> User:
        """Insert a user row.

        Raises UniquenessViolation("username") when the name is already taken;
        any other database error propagates unchanged.
        """
        now = datetime.now(timezone.utc)
        user = User(username=username, password=password_hash, created_at=now, updated_at=now)
        try:
            with get_session() as session:
                session.add(user)
                session.commit()
                session.refresh(user)
        except IntegrityError as exc:
            if self.get_user_by_username(username) is not None:
                raise UniquenessViolation("username") from exc
            raise
        return user

    def update_user_password(self, user_id: int, password_hash: str) -> None:
        with get_session() as session:
            stmt = (
                update(User)
                .where(User.id == user_id)
                .values(password=password_hash, updated_at=datetime.now(timezone.utc))
            )
            session.execute(stmt)
            session.commit()

    def list_users(self) -> list[User]:
        with get_session() as session:
            return session.execute(select(User).order_by(User.id)).scalars().all()

    # -------------------------- sessions --------------------------
    def create_user_session(self, data: dict, *, ttl_seconds: int) -> str:
        token = secrets.token_urlsafe(32)
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=max(60, ttl_seconds))
        with get_session() as session:
            session.add(UserSession(token=token, data=dict(data), expires_at=expires_at))
            session.commit()
        return token

    def get_user_session(self, token: str) -> Optional[UserSession]:
        """Return the live session row, deleting it when it has expired."""
        if not token:
            return None
        now = datetime.now(timezone.utc)
        with get_session() as session:
            entity = session.get(UserSession, token)
            if entity is None:
                return None
            if entity.expires_at and _aware(entity.expires_at) < now:
                session.delete(entity)
                session.commit()
                return None
            return entity

    def update_user_session(self, token: str, data: dict) -> bool:
        with get_session() as session:
            result = session.execute(
                update(UserSession).where(UserSession.token == token).values(data=dict(data))
            )
            session.commit()
            return bool(result.rowcount)

    def delete_user_session(self, token: str) -> bool:
        if not token:
            return False
        with get_session() as session:
            result = session.execute(delete(UserSession).where(UserSession.token == token))
            session.commit()
            return bool(result.rowcount)

    def purge_expired_sessions(self) -> int:
        with get_session() as session:
            result = session.execute(
                delete(UserSession).where(UserSession.expires_at < datetime.now(timezone.utc))
            )
            purged = result.rowcount or 0
            session.commit()
        if purged:
            logger.info("Purged %s expired sessions", purged)
        return purged
