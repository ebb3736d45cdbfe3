from __future__ import annotations

import logging

from sqlalchemy import inspect

from app.db.base import Base
from app.db.session import engine
import app.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_TABLES: set[str] = {"courses", "personal_timetables"}


def ensure_schema() -> None:
    """Create any missing tables; existing tables are left untouched."""
    with engine.begin() as connection:
        existing = set(inspect(connection).get_table_names())
        missing = sorted(REQUIRED_TABLES - existing)
        if not missing:
            return
        logger.info("Creating missing table(s): %s", ", ".join(missing))
        Base.metadata.create_all(bind=connection)
