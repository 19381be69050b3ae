"""Session helpers (opaque session records, cookies)."""
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Request, Response

from api.core.config import get_settings
from api.repositories.sql_repository import SQLRepository

SESSION_COOKIE_NAME = "session"
SESSION_USER_KEY = "userId"

logger = logging.getLogger(__name__)


class SessionHandle:
    """
    Request-scoped view over one server-side session record.

    The record is created lazily: anonymous requests that never write to the
    session do not touch the sessions table.
    """

    def __init__(self, repository: SQLRepository, token: Optional[str] = None, data: Optional[dict] = None):
        self._repository = repository
        self.token = token
        self._data: dict = dict(data or {})
        self.issued = False
        self.cleared = False

    @classmethod
    def load(cls, repository: SQLRepository, token: Optional[str]) -> "SessionHandle":
        entity = repository.get_user_session(token) if token else None
        if entity is None:
            return cls(repository)
        return cls(repository, token=entity.token, data=entity.data)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        if self.token and self._repository.update_user_session(self.token, self._data):
            return
        ttl = get_settings().session_ttl_seconds
        self.token = self._repository.create_user_session(self._data, ttl_seconds=ttl)
        logger.debug("Issued new session record")
        self.issued = True
        self.cleared = False

    def regenerate(self) -> None:
        """Move the record to a fresh token, keeping its data; the old token stops resolving."""
        if self.token:
            self._repository.delete_user_session(self.token)
        ttl = get_settings().session_ttl_seconds
        self.token = self._repository.create_user_session(self._data, ttl_seconds=ttl)
        logger.debug("Rotated session record")
        self.issued = True
        self.cleared = False

    def clear(self) -> bool:
        """Drop the record server-side. Returns True if one existed."""
        existed = False
        if self.token:
            existed = self._repository.delete_user_session(self.token)
        self.token = None
        self._data = {}
        self.issued = False
        self.cleared = True
        return existed

    @property
    def user_id(self) -> Optional[int]:
        return self.get(SESSION_USER_KEY)

    def log_in(self, user_id: int) -> None:
        """Bind the session to a user under a newly issued token."""
        self._data[SESSION_USER_KEY] = user_id
        self.regenerate()


def load_session(request: Request, repository: SQLRepository) -> SessionHandle:
    return SessionHandle.load(repository, request.cookies.get(SESSION_COOKIE_NAME))


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    secure_cookie = settings.app_env == "prod"
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        httponly=True,
        secure=secure_cookie,
        samesite="lax",
        max_age=settings.session_ttl_seconds,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")


def sync_session_cookie(response: Response, handle: SessionHandle) -> None:
    """Mirror the handle's lifecycle changes onto the response cookies."""
    if handle.issued and handle.token:
        set_session_cookie(response, handle.token)
    elif handle.cleared:
        clear_session_cookie(response)
