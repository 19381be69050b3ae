"""Database helpers (engine/session export, ORM rows)."""

from .session import Base, get_engine, get_session
from .models import User, UserSession

__all__ = ["Base", "get_engine", "get_session", "User", "UserSession"]
