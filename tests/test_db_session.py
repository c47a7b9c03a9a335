# mypy: ignore-errors
"""Tests for engine construction and the request-scoped session."""

from sqlalchemy import text

from hexfeed.db import session as db_session_module
from hexfeed.db.session import build_engine


def test_sqlite_engine_enforces_foreign_keys() -> None:
    engine = build_engine("sqlite://")
    try:
        with engine.connect() as connection:
            assert connection.execute(text("PRAGMA foreign_keys")).scalar() == 1
    finally:
        engine.dispose()


def test_get_db_closes_session(monkeypatch) -> None:
    closed = []

    class FakeSession:
        def close(self) -> None:
            closed.append(True)

    monkeypatch.setattr(db_session_module, "SessionLocal", FakeSession)

    generator = db_session_module.get_db()
    assert isinstance(next(generator), FakeSession)
    generator.close()

    assert closed == [True]
