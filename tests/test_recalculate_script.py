# mypy: ignore-errors
"""Tests for the maintenance recomputation command."""

from unittest.mock import MagicMock, patch

import pytest

from hexfeed.models import ReactionType
from hexfeed.schemas.reputation import ReputationUpdate
from hexfeed.scripts import recalculate
from hexfeed.services.reputation import ReputationService
from hexfeed.services.reputation_cache import ReputationCache


@pytest.fixture()
def script_session(db_session):
    """Hand the script the test session without letting it close it."""
    proxy = MagicMock(wraps=db_session)
    proxy.close = MagicMock()
    with patch.object(recalculate, "SessionLocal", return_value=proxy), patch.object(
        recalculate, "get_reputation_cache", return_value=ReputationCache(enabled=False)
    ):
        yield proxy


def test_format_update() -> None:
    update = ReputationUpdate(
        old_score=50.0, new_score=62.14, change=12.14, tier="Trusted", color="#F59E0B"
    )
    assert recalculate.format_update(3, update) == "user=3 50.00 -> 62.14 (+12.14) Trusted"


def test_single_user(script_session, author, post, seed_reactions, capsys) -> None:
    seed_reactions(post, ReactionType.LIKE, 2)

    assert recalculate.main(["--user-id", str(author.id)]) == 0

    out = capsys.readouterr().out.strip().splitlines()
    assert len(out) == 1
    assert out[0].startswith(f"user={author.id} 50.00 -> ")
    script_session.close.assert_called_once()


def test_unknown_user_exits_non_zero(script_session) -> None:
    assert recalculate.main(["--user-id", "424242"]) == 1


def test_all_users(script_session, author, reader, capsys) -> None:
    assert recalculate.main([]) == 0

    lines = capsys.readouterr().out.strip().splitlines()
    assert {line.split()[0] for line in lines} == {f"user={author.id}", f"user={reader.id}"}


def test_all_users_in_small_batches(script_session, user_factory, capsys) -> None:
    users = [user_factory() for _ in range(3)]
    cache = MagicMock(spec=ReputationCache)

    with patch.object(recalculate, "get_reputation_cache", return_value=cache):
        assert recalculate.main(["--batch-size", "2"]) == 0

    lines = capsys.readouterr().out.strip().splitlines()
    assert [line.split()[0] for line in lines] == [f"user={user.id}" for user in users]
    assert [c.args[0] for c in cache.invalidate.call_args_list] == [user.id for user in users]


def test_batch_size_must_be_positive(script_session) -> None:
    with pytest.raises(SystemExit):
        recalculate.main(["--batch-size", "0"])


def test_finished_users_are_invalidated_when_a_later_one_fails(
    script_session, author, reader
) -> None:
    cache = MagicMock(spec=ReputationCache)
    original = ReputationService.recalculate_user_reliability

    def fail_for_reader(self, user_id):
        if user_id == reader.id:
            raise RuntimeError("database went away")
        return original(self, user_id)

    with patch.object(recalculate, "get_reputation_cache", return_value=cache), patch.object(
        ReputationService, "recalculate_user_reliability", fail_for_reader
    ):
        with pytest.raises(RuntimeError):
            recalculate.main([])

    cache.invalidate.assert_called_once_with(author.id)
    script_session.close.assert_called_once()
