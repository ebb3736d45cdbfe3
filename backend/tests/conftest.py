import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient #fake http client that calls the FastAPI routes without running a real server.
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.core.security import create_access_token
from app.db.base import Base
from app.main import app
from app.models.course import Course


@pytest.fixture()
def session_factory():
    engine = create_engine( #isolated in-memory DB shared by every session of one test
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def seed_courses(db):
    def _seed(*courses: dict) -> None:
        for item in courses:
            db.add(
                Course(
                    code=item["code"],
                    title=item.get("title", item["code"]),
                    description=item.get("description"),
                    timetable=item.get("timetable", []),
                )
            )
        db.commit()

    return _seed


@pytest.fixture()
def auth_headers():
    def _headers(student_id: str) -> dict:
        return {"Authorization": f"Bearer {create_access_token(student_id)}"}

    return _headers
