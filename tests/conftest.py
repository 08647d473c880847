"""
Shared fixtures.

Every test gets its own SQLite file; the app's ``get_db`` dependency is
pointed at it, so nothing touches the configured database.
"""
import os
import tempfile

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{tempfile.mkdtemp()}/startup.db"
os.environ.pop("ADMIN_PASSWORD", None)

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool

from auth import create_access_token, get_password_hash
from database import Base, enable_sqlite_foreign_keys, get_db
from main import app
from models import User
from repository import FlashcardRepository
from study import StudySessionStore

PASSWORD = "Password1"


@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "test.db"


@pytest.fixture()
def engine(db_path):
    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()

    async_engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    enable_sqlite_foreign_keys(async_engine)
    return async_engine


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def repo(session_factory):
    async with session_factory() as db:
        yield FlashcardRepository(db)


@pytest.fixture()
def client(session_factory):
    async def override_get_db():
        async with session_factory() as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    app.state.study_sessions = StudySessionStore()
    app.state.answer_delay = 0
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db_path, engine):
    """Insert a user straight into the test DB and return auth headers for it."""
    def _make(username, is_superuser=False):
        sync_engine = create_engine(f"sqlite:///{db_path}")
        with Session(sync_engine) as db:
            db.add(User(
                username=username,
                hashed_password=get_password_hash(PASSWORD),
                is_superuser=is_superuser,
            ))
            db.commit()
        sync_engine.dispose()
        return {"Authorization": f"Bearer {create_access_token({'sub': username})}"}
    return _make


@pytest.fixture()
def alice(make_user):
    return make_user("alice")


@pytest.fixture()
def admin_headers(make_user):
    return make_user("root", is_superuser=True)


@pytest.fixture()
def make_set(client):
    """Create a set (and optionally cards) through the API; return its id."""
    def _make(headers, title="Spanish", tags=(), cards=(), description=None):
        response = client.post(
            "/sets",
            json={"title": title, "description": description, "tags": list(tags)},
            headers=headers,
        )
        assert response.status_code == 201, response.text
        set_id = response.json()["set"]["id"]
        for front, back in cards:
            response = client.post(
                f"/sets/{set_id}/cards",
                json={"front_text": front, "back_text": back},
                headers=headers,
            )
            assert response.status_code == 201, response.text
        return set_id
    return _make
