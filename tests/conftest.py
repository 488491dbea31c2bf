# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from lumo.api.v1.dependencies import get_broadcaster_dep, get_mailer_dep
from lumo.core.identity import AuthenticatedIdentity, RequestContext
from lumo.core.security import create_access_token
from lumo.db.session import Base, create_tables, drop_tables, enable_sqlite_foreign_keys
from lumo.db.session import get_db as app_get_session
from lumo.db.time import utcnow
from lumo.main import app as fastapi_app
from lumo.models import Post, PostCollaborator, User
from lumo.models.post import POST_STATUS_DRAFT, POST_STATUS_PUBLISHED

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)


class RecordingBroadcaster:
    """Broadcaster double that remembers every emitted event."""

    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []

    def emit_to_user(self, user_id: int, event: str, payload: dict[str, Any]) -> None:
        self.events.append(
            {"room": f"user-{user_id}", "event": event, "payload": payload, "skip_sid": None}
        )

    def emit_to_post(
        self,
        post_id: str,
        event: str,
        payload: dict[str, Any],
        *,
        skip_sid: str | None = None,
    ) -> None:
        self.events.append(
            {"room": f"post-{post_id}", "event": event, "payload": payload, "skip_sid": skip_sid}
        )

    def named(self, event: str) -> list[dict[str, Any]]:
        return [item for item in self.events if item["event"] == event]


class RecordingMailer:
    """Mailer double that records invites instead of sending them."""

    def __init__(self) -> None:
        self.invites: list[dict[str, Any]] = []

    def dispatch_invite(self, **kwargs: Any) -> None:
        self.invites.append(kwargs)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    create_tables(engine)
    try:
        yield engine
    finally:
        drop_tables(engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


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


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def broadcaster() -> RecordingBroadcaster:
    return RecordingBroadcaster()


@pytest.fixture()
def mailer() -> RecordingMailer:
    return RecordingMailer()


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
def override_side_effect_dependencies(
    app: FastAPI,
    broadcaster: RecordingBroadcaster,
    mailer: RecordingMailer,
) -> Iterator[None]:
    """Route realtime pushes and invite emails to recording doubles."""
    overrides: dict[Callable[..., Any], Callable[[], Any]] = {
        get_broadcaster_dep: lambda: broadcaster,
        get_mailer_dep: lambda: mailer,
    }
    for dependency, override in overrides.items():
        app.dependency_overrides[dependency] = override

    try:
        yield
    finally:
        for dependency in list(overrides):
            app.dependency_overrides.pop(dependency, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that persists users with unique names."""

    def _make_user(username: str | None = None, email: str | None = None) -> User:
        n = next(_USER_COUNTER)
        name = username or f"user{n}"
        user = User(username=name, email=email or f"{name}@example.com")
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def author(make_user: Callable[..., User]) -> User:
    return make_user("alice", "alice@example.com")


@pytest.fixture()
def editor(make_user: Callable[..., User]) -> User:
    return make_user("bob", "bob@example.com")


@pytest.fixture()
def reviewer(make_user: Callable[..., User]) -> User:
    return make_user("carol", "carol@example.com")


@pytest.fixture()
def outsider(make_user: Callable[..., User]) -> User:
    return make_user("dave", "dave@example.com")


def context_for(user: User | None, socket_id: str | None = None) -> RequestContext:
    """Build a request context for service-level tests."""
    identity = AuthenticatedIdentity.from_user(user) if user is not None else None
    return RequestContext(identity=identity, socket_id=socket_id)


@pytest.fixture()
def ctx() -> Callable[..., RequestContext]:
    return context_for


def auth_headers(user: User) -> dict[str, str]:
    """Return authorization headers for a user."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def headers_for() -> Callable[[User], dict[str, str]]:
    return auth_headers


@pytest.fixture()
def author_headers(author: User) -> dict[str, str]:
    return auth_headers(author)


@pytest.fixture()
def editor_headers(editor: User) -> dict[str, str]:
    return auth_headers(editor)


@pytest.fixture()
def reviewer_headers(reviewer: User) -> dict[str, str]:
    return auth_headers(reviewer)


@pytest.fixture()
def outsider_headers(outsider: User) -> dict[str, str]:
    return auth_headers(outsider)


@pytest.fixture()
def draft(db_session: Session, author: User) -> Post:
    """A draft owned by ``author``."""
    post = Post(
        author_id=author.id,
        title="Working title",
        content="<p>Early thoughts on gardening</p>",
        status=POST_STATUS_DRAFT,
    )
    db_session.add(post)
    db_session.commit()
    db_session.refresh(post)
    return post


@pytest.fixture()
def published_post(db_session: Session, author: User) -> Post:
    """A published post owned by ``author``."""
    now = utcnow()
    post = Post(
        author_id=author.id,
        title="Hello world",
        content="<p>Welcome to the blog</p>",
        status=POST_STATUS_PUBLISHED,
        read_time=1,
        published_at=now,
    )
    db_session.add(post)
    db_session.commit()
    db_session.refresh(post)
    return post


@pytest.fixture()
def grant(db_session: Session) -> Callable[[Post, User, str], PostCollaborator]:
    """Return a helper that grants a user access to a post directly."""

    def _grant(post: Post, user: User, permission: str) -> PostCollaborator:
        row = PostCollaborator(
            post_id=post.id,
            user_id=user.id,
            permission=permission,
            invited_by=post.author_id,
        )
        db_session.add(row)
        db_session.commit()
        db_session.refresh(row)
        return row

    return _grant
