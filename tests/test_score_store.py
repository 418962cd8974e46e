# tests/test_score_store.py

"""Tests for the leaderboard score store against the database."""

from datetime import datetime, timedelta

import pytest
from quizrank.db import score_store
from quizrank.db.models import LeaderboardEntry
from quizrank.exceptions import DuplicateEntryError, StorageFailureError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


def new_entry(quiz_id: str, session_id: str, score: int, **kw) -> LeaderboardEntry:
    return LeaderboardEntry(
        quiz_id=quiz_id,
        player_key=f"session:{session_id}",
        session_id=session_id,
        nickname=kw.pop("nickname", session_id),
        score=score,
        total_questions=kw.pop("total_questions", 5),
        **kw,
    )


@pytest.mark.asyncio
async def test_insert_persists_entry(db_session: AsyncSession, make_quiz):
    """Test that an inserted entry can be found by quiz and player."""
    quiz = await make_quiz()

    await score_store.insert(db_session, new_entry(quiz.id, "sA", 4, nickname="Alice"))
    await db_session.commit()

    found = await score_store.find_by_quiz_and_player(db_session, quiz.id, "session:sA")
    assert found is not None
    assert found.nickname == "Alice"
    assert found.score == 4
    assert found.created_at is not None
    assert await score_store.count_by_quiz(db_session, quiz.id) == 1


@pytest.mark.asyncio
async def test_duplicate_insert_raises_typed_error_with_existing_row(
    db_session: AsyncSession, make_quiz
):
    """
    A second insert for the same (quiz, player) is rejected by the unique
    constraint and reported as DuplicateEntryError carrying the first row.
    """
    quiz = await make_quiz()
    await score_store.insert(db_session, new_entry(quiz.id, "sA", 4))
    await db_session.commit()

    with pytest.raises(DuplicateEntryError) as exc_info:
        await score_store.insert(db_session, new_entry(quiz.id, "sA", 2))

    assert exc_info.value.existing.score == 4
    assert await score_store.count_by_quiz(db_session, quiz.id) == 1


@pytest.mark.asyncio
async def test_session_is_still_usable_after_duplicate(
    db_session: AsyncSession, make_quiz
):
    """Only the savepoint is rolled back; earlier work in the session survives."""
    quiz = await make_quiz()
    await score_store.insert(db_session, new_entry(quiz.id, "sA", 4))

    with pytest.raises(DuplicateEntryError):
        await score_store.insert(db_session, new_entry(quiz.id, "sA", 1))

    await score_store.insert(db_session, new_entry(quiz.id, "sB", 3))
    await db_session.commit()

    assert await score_store.count_by_quiz(db_session, quiz.id) == 2


@pytest.mark.asyncio
async def test_same_player_may_enter_different_quizzes(
    db_session: AsyncSession, make_quiz
):
    quiz_one = await make_quiz()
    quiz_two = await make_quiz()

    await score_store.insert(db_session, new_entry(quiz_one.id, "sA", 1))
    await score_store.insert(db_session, new_entry(quiz_two.id, "sA", 2))
    await db_session.commit()

    assert await score_store.count_by_quiz(db_session, quiz_one.id) == 1
    assert await score_store.count_by_quiz(db_session, quiz_two.id) == 1


@pytest.mark.asyncio
async def test_constraint_violation_without_existing_row_is_storage_failure(
    db_session: AsyncSession, make_quiz
):
    """A check constraint failure is not mistaken for a duplicate."""
    quiz = await make_quiz()

    with pytest.raises(StorageFailureError):
        await score_store.insert(
            db_session, new_entry(quiz.id, "sA", 9, total_questions=5)
        )

    total = await db_session.execute(
        select(func.count()).select_from(LeaderboardEntry)
    )
    assert total.scalar_one() == 0


@pytest.mark.asyncio
async def test_list_by_quiz_orders_by_score_then_submission_time(
    db_session: AsyncSession, make_quiz
):
    quiz = await make_quiz()
    other = await make_quiz()
    t0 = datetime(2024, 1, 1)

    await score_store.insert(db_session, new_entry(quiz.id, "alice", 4, created_at=t0))
    await score_store.insert(
        db_session, new_entry(quiz.id, "cara", 5, created_at=t0 + timedelta(minutes=2))
    )
    await score_store.insert(
        db_session, new_entry(quiz.id, "bob", 5, created_at=t0 + timedelta(minutes=1))
    )
    await score_store.insert(db_session, new_entry(other.id, "dan", 5, created_at=t0))
    await db_session.commit()

    entries = await score_store.list_by_quiz(db_session, quiz.id)

    assert [e.session_id for e in entries] == ["bob", "cara", "alice"]


@pytest.mark.asyncio
async def test_count_and_find_for_unknown_quiz(db_session: AsyncSession):
    assert await score_store.count_by_quiz(db_session, "missing") == 0
    assert (
        await score_store.find_by_quiz_and_player(db_session, "missing", "session:x")
        is None
    )
