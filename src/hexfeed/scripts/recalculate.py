# src/hexfeed/scripts/recalculate.py
"""
Maintenance job recomputing reliability scores.

Run after bulk imports, soft-delete sweeps, or whenever the scoring constants
change:

    python -m hexfeed.scripts.recalculate                  # every user
    python -m hexfeed.scripts.recalculate --batch-size 100
    python -m hexfeed.scripts.recalculate --user-id 7
"""

from __future__ import annotations

import argparse
import logging
import sys

from hexfeed.core.exceptions import NotFoundError
from hexfeed.core.log_config import configure_logging
from hexfeed.db.session import SessionLocal
from hexfeed.schemas.reputation import ReputationUpdate
from hexfeed.services.reputation import DEFAULT_RECALCULATE_BATCH_SIZE, ReputationService
from hexfeed.services.reputation_cache import get_reputation_cache

logger = logging.getLogger(__name__)


def format_update(user_id: int, update: ReputationUpdate) -> str:
    return (
        f"user={user_id} {update.old_score:.2f} -> {update.new_score:.2f} "
        f"({update.change:+.2f}) {update.tier}"
    )


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def run(user_id: int | None = None, batch_size: int = DEFAULT_RECALCULATE_BATCH_SIZE) -> int:
    """Recompute one or all users and print a line per user.

    Each user's cache entry is dropped as soon as its new score is committed.

    Returns:
        Process exit code.
    """
    cache = get_reputation_cache()
    db = SessionLocal()
    recalculated = 0
    try:
        service = ReputationService(db)
        if user_id is not None:
            try:
                results = iter([(user_id, service.recalculate_user_reliability(user_id))])
            except NotFoundError:
                logger.error("User %s not found", user_id)
                return 1
        else:
            results = service.recalculate_all(batch_size)

        for recomputed_id, update in results:
            cache.invalidate(recomputed_id)
            print(format_update(recomputed_id, update))
            recalculated += 1
    finally:
        db.close()

    logger.info("Recalculated reliability for %d user(s)", recalculated)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Recompute user reliability scores")
    parser.add_argument("--user-id", type=int, default=None, help="Only recompute this user")
    parser.add_argument(
        "--batch-size",
        type=_positive_int,
        default=DEFAULT_RECALCULATE_BATCH_SIZE,
        help="Users loaded per page when recomputing everyone",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    return run(args.user_id, args.batch_size)


if __name__ == "__main__":
    sys.exit(main())
