# src/quizrank/db/score_store.py

"""Durable storage for leaderboard entries.

The store exposes inserts and reads only. Uniqueness of (quiz_id, player_key)
is enforced by the database constraint, so two concurrent submissions for the
same player cannot both succeed.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quizrank.db.models import LeaderboardEntry
from quizrank.exceptions import DuplicateEntryError, StorageFailureError

logger = logging.getLogger(__name__)


async def insert(db: AsyncSession, entry: LeaderboardEntry) -> LeaderboardEntry:
    """
    Persist a new entry inside a SAVEPOINT.

    Does not commit; the caller owns the transaction. A failed insert only
    rolls back its own savepoint, so the session stays usable.

    Raises:
        DuplicateEntryError: If the player already has an entry for this quiz.
        StorageFailureError: For any other database failure.
    """
    try:
        async with db.begin_nested():
            db.add(entry)
    except IntegrityError as e:
        # Classify by looking at the table, not at the driver's message text.
        existing = await find_by_quiz_and_player(db, entry.quiz_id, entry.player_key)
        if existing is not None:
            raise DuplicateEntryError(entry.quiz_id, entry.player_key, existing) from e
        logger.error(
            "Leaderboard insert violated a constraint",
            extra={"quiz_id": entry.quiz_id, "player_key": entry.player_key},
            exc_info=True,
        )
        raise StorageFailureError("insert", str(e.orig or e)) from e
    except SQLAlchemyError as e:
        logger.error(
            "Leaderboard insert failed",
            extra={"quiz_id": entry.quiz_id, "player_key": entry.player_key},
            exc_info=True,
        )
        raise StorageFailureError("insert", str(e)) from e

    return entry


async def count_by_quiz(db: AsyncSession, quiz_id: str) -> int:
    """Number of players with an entry on the quiz leaderboard."""
    query = (
        select(func.count())
        .select_from(LeaderboardEntry)
        .where(LeaderboardEntry.quiz_id == quiz_id)
    )
    return int((await db.execute(query)).scalar_one())


async def find_by_quiz_and_player(
    db: AsyncSession, quiz_id: str, player_key: str
) -> LeaderboardEntry | None:
    return await LeaderboardEntry.find_by_quiz_and_player(db, quiz_id, player_key)


async def list_by_quiz(db: AsyncSession, quiz_id: str) -> list[LeaderboardEntry]:
    """All entries for a quiz in ranking order (score desc, earliest first)."""
    query = (
        select(LeaderboardEntry)
        .where(LeaderboardEntry.quiz_id == quiz_id)
        .order_by(
            LeaderboardEntry.score.desc(),
            LeaderboardEntry.created_at.asc(),
            LeaderboardEntry.id.asc(),
        )
    )
    result = await db.execute(query)
    return list(result.scalars().all())
