"""Create sessions, quizzes and quiz_leaderboard_entries tables

Revision ID: 20261018_quiz_leaderboard
Revises:
Create Date: 2026-10-18

This migration creates the initial schema:
- sessions: anonymous or user-bound browser sessions
- quizzes: one row per generated quiz, immutable
- quiz_leaderboard_entries: one row per (quiz, player), enforced by
  the uq_quiz_leaderboard_player unique constraint
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261018_quiz_leaderboard"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the three tables with their constraints and indexes."""
    # === SESSIONS ===
    op.create_table(
        "sessions",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("last_seen_at", sa.DateTime(), nullable=False),
        sa.Column("revoked", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_sessions_user_id", "sessions", ["user_id"])

    # === QUIZZES ===
    op.create_table(
        "quizzes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("session_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("source", sa.String(16), nullable=False),
        sa.Column("question_count", sa.Integer(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("question_count > 0", name="ck_quizzes_question_count"),
    )
    op.create_index("ix_quizzes_session_id", "quizzes", ["session_id"])

    # === QUIZ_LEADERBOARD_ENTRIES ===
    op.create_table(
        "quiz_leaderboard_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "quiz_id", sa.String(36), sa.ForeignKey("quizzes.id"), nullable=False
        ),
        sa.Column("player_key", sa.String(), nullable=False),
        sa.Column("session_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("nickname", sa.String(64), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("total_questions", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "quiz_id", "player_key", name="uq_quiz_leaderboard_player"
        ),
        sa.CheckConstraint("score >= 0", name="ck_leaderboard_score_non_negative"),
        sa.CheckConstraint(
            "score <= total_questions", name="ck_leaderboard_score_within_total"
        ),
        sa.CheckConstraint(
            "total_questions > 0", name="ck_leaderboard_total_positive"
        ),
    )
    op.create_index(
        "ix_quiz_leaderboard_entries_quiz_id",
        "quiz_leaderboard_entries",
        ["quiz_id"],
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_index(
        "ix_quiz_leaderboard_entries_quiz_id", "quiz_leaderboard_entries"
    )
    op.drop_table("quiz_leaderboard_entries")
    op.drop_index("ix_quizzes_session_id", "quizzes")
    op.drop_table("quizzes")
    op.drop_index("ix_sessions_user_id", "sessions")
    op.drop_table("sessions")
