"""Engine, session factory and declarative base for the reputation store."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from hexfeed.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base for users, posts and reactions."""


# Populate Base.metadata for alembic autogenerate and the test schema.
import hexfeed.models  # noqa: E402,F401


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine for ``url``.

    SQLite connections are shared across the request threads of the dev
    server and get foreign key enforcement switched on, so a reaction can
    never reference a missing user or post there either.
    """
    kwargs: dict[str, Any] = {"echo": echo}
    if _is_sqlite(url):
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["pool_pre_ping"] = True

    new_engine = create_engine(url, **kwargs)
    if _is_sqlite(url):
        event.listen(new_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


engine = build_engine(settings.effective_database_url, echo=settings.sql_debug)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a request-scoped session and close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
