from __future__ import annotations

import math

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

from app.core.config import get_settings


def build_engine(database_url: str, *, timeout_seconds: float) -> Engine:
    """Create an engine whose connects and statements give up after ``timeout_seconds``."""
    url = make_url(database_url)
    connect_args: dict = {}
    if url.get_backend_name() == "sqlite":
        connect_args = {"check_same_thread": False, "timeout": timeout_seconds}
    elif url.get_backend_name() == "postgresql":
        connect_args = {
            "connect_timeout": max(1, math.ceil(timeout_seconds)),
            "options": f"-c statement_timeout={int(timeout_seconds * 1000)}",
        }
    engine_kwargs: dict = {"connect_args": connect_args, "pool_pre_ping": True}
    if url.get_backend_name() != "sqlite":
        engine_kwargs["pool_timeout"] = timeout_seconds
    return create_engine(database_url, **engine_kwargs)


settings = get_settings()
engine = build_engine(settings.database_url, timeout_seconds=settings.store_timeout_seconds)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
