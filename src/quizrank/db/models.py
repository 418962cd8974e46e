# src/quizrank/db/models.py

"""Database models for the QuizRank application."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    TypeDecorator,
    UniqueConstraint,
    select,
)
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import (
    Mapped,
    declarative_base,
    mapped_column,
    relationship,
)

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timestamps stored as naive UTC and always loaded as aware UTC.

    SQLite keeps no offset, so rows read back would otherwise be naive while
    freshly inserted objects still hold aware values.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


# ===============================================
# Mixins for Common Columns
# ===============================================


class CreatedAtMixin:
    """Mixin providing an immutable created_at timestamp column."""

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, nullable=False
    )


# ===============================================
# Identity: anonymous or user-bound sessions
# ===============================================


class PlayerSession(Base, CreatedAtMixin):
    """A browser session. Anonymous until a user id is attached."""

    __tablename__ = "sessions"
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    last_seen_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, nullable=False
    )
    revoked: Mapped[bool] = mapped_column(default=False, nullable=False)

    def __init__(self, **kw: Any):
        super().__init__(**kw)


# ===============================================
# Quizzes and Leaderboard Entries
# ===============================================


class Quiz(Base, CreatedAtMixin):
    """One generated set of questions. Immutable once recorded."""

    __tablename__ = "quizzes"
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    session_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)

    # 'mock' or 'live'
    source: Mapped[str] = mapped_column(String(16), nullable=False)
    question_count: Mapped[int] = mapped_column(nullable=False)

    # Ex: {'league': {'id': 39, 'name': 'Premier League'}, 'fixture': {...}}
    quiz_metadata: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)

    entries: Mapped[List["LeaderboardEntry"]] = relationship(back_populates="quiz")

    __table_args__ = (
        CheckConstraint("question_count > 0", name="ck_quizzes_question_count"),
    )

    def __init__(self, **kw: Any):
        super().__init__(**kw)


class LeaderboardEntry(Base, CreatedAtMixin):
    """A player's single recorded score for a quiz.

    Rows are never updated or deleted. The (quiz_id, player_key) unique
    constraint is what makes concurrent submissions for one player safe.
    """

    __tablename__ = "quiz_leaderboard_entries"
    id: Mapped[int] = mapped_column(primary_key=True)
    quiz_id: Mapped[str] = mapped_column(
        ForeignKey("quizzes.id"), nullable=False, index=True
    )

    # "user:<user_id>" or "session:<session_id>"
    player_key: Mapped[str] = mapped_column(String, nullable=False)
    session_id: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)

    nickname: Mapped[str] = mapped_column(String(64), nullable=False)
    score: Mapped[int] = mapped_column(nullable=False)
    total_questions: Mapped[int] = mapped_column(nullable=False)

    quiz: Mapped["Quiz"] = relationship(back_populates="entries")

    __table_args__ = (
        UniqueConstraint("quiz_id", "player_key", name="uq_quiz_leaderboard_player"),
        CheckConstraint("score >= 0", name="ck_leaderboard_score_non_negative"),
        CheckConstraint(
            "score <= total_questions", name="ck_leaderboard_score_within_total"
        ),
        CheckConstraint("total_questions > 0", name="ck_leaderboard_total_positive"),
    )

    def __init__(self, **kw: Any):
        super().__init__(**kw)

    @classmethod
    async def find_by_quiz_and_player(
        cls, db: AsyncSession, quiz_id: str, player_key: str
    ) -> "LeaderboardEntry | None":
        """Find the entry a player recorded for a quiz, if any."""
        query = select(cls).where(cls.quiz_id == quiz_id, cls.player_key == player_key)
        result = await db.execute(query)
        return result.scalar_one_or_none()
