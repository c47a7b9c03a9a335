# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime, timedelta
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("REPUTATION_CACHE_ENABLED", "false")

from hexfeed.api.v1 import dependencies as api_dependencies
from hexfeed.core.security import create_access_token
from hexfeed.db.session import Base
from hexfeed.db.session import get_db as app_get_session
from hexfeed.main import app as fastapi_app
from hexfeed.models import Post, PostReaction, ReactionType, User
from hexfeed.services.reputation import ReputationService
from hexfeed.services.reputation_cache import ReputationCache
from tests.clock import NOW

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)


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
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


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


@pytest.fixture()
def disabled_cache() -> ReputationCache:
    return ReputationCache(enabled=False)


@pytest.fixture(autouse=True)
def override_cache_dependency(app: FastAPI, disabled_cache: ReputationCache) -> Iterator[None]:
    app.dependency_overrides[api_dependencies.get_reputation_cache_dep] = lambda: disabled_cache
    try:
        yield
    finally:
        app.dependency_overrides.pop(api_dependencies.get_reputation_cache_dep, None)


@pytest.fixture(autouse=True)
def override_service_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    """Pin the API's reputation service to ``NOW``."""
    app.dependency_overrides[api_dependencies.get_reputation_service] = lambda: ReputationService(
        db_session, clock=lambda: NOW
    )
    try:
        yield
    finally:
        app.dependency_overrides.pop(api_dependencies.get_reputation_service, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def service(db_session: Session) -> ReputationService:
    """Reputation service pinned to ``NOW``."""
    return ReputationService(db_session, clock=lambda: NOW)


@pytest.fixture()
def user_factory(db_session: Session) -> Callable[..., User]:
    """Create persisted users with unique names."""

    def _make(name: str | None = None) -> User:
        user = User(name=name or f"user-{next(_USER_COUNTER)}")
        db_session.add(user)
        db_session.flush()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def post_factory(db_session: Session) -> Callable[..., Post]:
    """Create persisted posts; ``created_at`` defaults to ``NOW``."""

    def _make(
        author: User,
        *,
        view_count: int = 0,
        created_at: datetime = NOW,
        is_deleted: bool = False,
    ) -> Post:
        post = Post(
            user_id=author.id,
            content="Coffee cart outside the library",
            h3_index="8928308280fffff",
            view_count=view_count,
            created_at=created_at,
            is_deleted=is_deleted,
        )
        db_session.add(post)
        db_session.flush()
        db_session.refresh(post)
        return post

    return _make


@pytest.fixture()
def seed_reactions(db_session: Session, user_factory: Callable[..., User]) -> Callable[..., None]:
    """Insert reaction rows from fresh users directly, keeping post counters in sync."""

    def _seed(
        post: Post,
        reaction_type: ReactionType,
        amount: int,
        *,
        created_at: datetime = NOW - timedelta(days=1),
    ) -> None:
        for _ in range(amount):
            reactor = user_factory()
            db_session.add(
                PostReaction(
                    user_id=reactor.id,
                    post_id=post.id,
                    type=reaction_type,
                    created_at=created_at,
                )
            )
        if reaction_type is ReactionType.LIKE:
            post.like_count += amount
        else:
            post.dislike_count += amount
        db_session.flush()

    return _seed


@pytest.fixture()
def author(user_factory: Callable[..., User]) -> User:
    return user_factory("Author")


@pytest.fixture()
def reader(user_factory: Callable[..., User]) -> User:
    return user_factory("Reader")


@pytest.fixture()
def post(post_factory: Callable[..., Post], author: User) -> Post:
    """A post by ``author`` seen often enough to count towards reputation."""
    return post_factory(author, view_count=10)


@pytest.fixture()
def auth_headers(reader: User) -> dict[str, str]:
    """Return authorization headers for ``reader``."""
    token = create_access_token(reader.id)
    return {"Authorization": f"Bearer {token}"}
