"""Create the accounts schema: the `users` table and the `sessions` table backing SessionHandle.

Run with `python -m api.db.create_tables`; the app lifespan calls create_all() too.
"""
from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from api.core.logging import configure_logging
from .session import Base, get_engine
from . import models  # noqa: F401  # ensure models are imported for metadata

logger = logging.getLogger(__name__)


def create_all() -> None:
    engine = get_engine()
    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    configure_logging()
    try:
        create_all()
        logger.info("Database tables created successfully.")
    except SQLAlchemyError as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
