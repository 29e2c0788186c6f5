# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-chatline")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PRESENCE_SCOPE", "friends")

from chatline.core.security import create_access_token
from chatline.db.session import Base
from chatline.db.session import get_db as app_get_session
from chatline.main import app as fastapi_app
from chatline.models import User
from chatline.realtime.gateway import get_notifier
from chatline.repositories import UserRepository

TEST_DB_URL = "sqlite://"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db_session(engine: Engine, session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


class RecordingNotifier:
    """Stands in for the Socket.IO notifier in REST tests."""

    def __init__(self) -> None:
        self.notifications: list[tuple[str, str, Any]] = []
        self.refreshed: list[tuple[str, ...]] = []

    async def notify(self, identity: str, event: str, payload: Any = None) -> bool:
        self.notifications.append((identity, event, payload))
        return True

    async def refresh_presence(self, *identities: str) -> None:
        self.refreshed.append(identities)

    def events_for(self, identity: str) -> list[str]:
        return [event for target, event, _ in self.notifications if target == identity]


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture(autouse=True)
def notifier(app: FastAPI) -> Iterator[RecordingNotifier]:
    recorder = RecordingNotifier()
    app.dependency_overrides[get_notifier] = lambda: recorder
    try:
        yield recorder
    finally:
        app.dependency_overrides.pop(get_notifier, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def auth_headers(identity: str) -> dict[str, str]:
    """Return authorization headers for ``identity``."""
    return {"Authorization": f"Bearer {create_access_token(identity)}"}


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that syncs a user profile directly through the repository."""

    def _make(identity: str, full_name: str | None = None, email: str | None = None) -> User:
        return UserRepository(db_session).upsert(
            identity,
            email=email or f"{identity}@example.com",
            full_name=full_name or identity.title(),
            image_url=None,
        )

    return _make


@pytest.fixture()
def alice(make_user: Callable[..., User]) -> User:
    return make_user("alice", "Alice Liddell")


@pytest.fixture()
def bob(make_user: Callable[..., User]) -> User:
    return make_user("bob", "Bob Builder")


@pytest.fixture()
def carol(make_user: Callable[..., User]) -> User:
    return make_user("carol", "Carol Danvers")


@pytest.fixture()
def alice_headers(alice: User) -> dict[str, str]:
    return auth_headers(alice.identity)


@pytest.fixture()
def bob_headers(bob: User) -> dict[str, str]:
    return auth_headers(bob.identity)


@pytest.fixture()
def headers_for() -> Callable[[str], dict[str, str]]:
    """Return a helper that builds authorization headers for any identity."""
    return auth_headers
