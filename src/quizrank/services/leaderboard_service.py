# src/quizrank/services/leaderboard_service.py

"""Business logic for leaderboard submissions and views."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from quizrank import config
from quizrank.db import models, score_store
from quizrank.exceptions import (
    DuplicateEntryError,
    InvalidInputError,
    QuestionCountMismatchError,
    QuizNotFoundError,
    StorageFailureError,
)
from quizrank.ranking import engine, views
from quizrank.schemas import leaderboard as leaderboard_schema
from quizrank.services import quiz_service
from quizrank.services.session_service import PlayerIdentity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidatedSubmission:
    nickname: str
    score: int
    total_questions: int


@dataclass(frozen=True)
class SubmissionResult:
    """Standing after a submission.

    ``already_recorded`` is True when the player had submitted before; the
    entry is then the original one, not the attempted one.
    """

    quiz_id: str
    total_players: int
    entry: engine.RankedEntry
    already_recorded: bool = False


@dataclass(frozen=True)
class TopView:
    quiz_id: str
    total_players: int
    entries: list[engine.RankedEntry]


@dataclass(frozen=True)
class MeView:
    quiz_id: str
    total_players: int
    view: views.PlayerView


def sanitize_nickname(nickname: str | None) -> str:
    """Trim whitespace and cap the length."""
    return (nickname or "").strip()[: config.NICKNAME_MAX_LENGTH]


def validate_submission(
    submission: leaderboard_schema.ScoreSubmission,
) -> ValidatedSubmission:
    """
    Check a submission without touching storage.

    Raises:
        InvalidInputError: If the nickname is empty, totalQuestions is not
            positive, or the score is out of range. Non-integer numbers are
            already rejected by the request schema.
    """
    nickname = sanitize_nickname(submission.nickname)
    if not nickname:
        raise InvalidInputError("Nickname is required", field="nickname")

    score = submission.score
    total = submission.total_questions
    if total <= 0:
        raise InvalidInputError(
            "Score and totals must be whole numbers", field="totalQuestions"
        )

    if score < 0 or score > total:
        raise InvalidInputError(
            "Score must be between 0 and total questions", field="score"
        )

    return ValidatedSubmission(nickname=nickname, score=score, total_questions=total)


async def _get_quiz_or_404(db: AsyncSession, quiz_id: str) -> models.Quiz:
    quiz = await quiz_service.get_quiz(db, quiz_id)
    if quiz is None:
        raise QuizNotFoundError(quiz_id)
    return quiz


async def _rank_quiz(db: AsyncSession, quiz_id: str) -> list[engine.RankedEntry]:
    """One fresh ranking pass over every entry of the quiz."""
    return engine.rank(await score_store.list_by_quiz(db, quiz_id))


async def submit_score(
    db: AsyncSession,
    quiz_id: str,
    identity: PlayerIdentity,
    submission: ValidatedSubmission,
) -> SubmissionResult:
    """
    Record a player's score for a quiz and return their standing.

    Only the first submission per player counts. A repeat is reported through
    ``already_recorded`` together with the original entry; nothing is written.

    Raises:
        QuizNotFoundError: If the quiz was never recorded.
        QuestionCountMismatchError: If totalQuestions differs from the quiz.
        StorageFailureError: If the insert could not be confirmed.
    """
    quiz = await _get_quiz_or_404(db, quiz_id)
    if quiz.question_count != submission.total_questions:
        raise QuestionCountMismatchError(
            quiz_id, quiz.question_count, submission.total_questions
        )

    player_key = identity.player_key
    new_entry = models.LeaderboardEntry(
        quiz_id=quiz_id,
        player_key=player_key,
        session_id=identity.session_id,
        user_id=identity.user_id,
        nickname=submission.nickname,
        score=submission.score,
        total_questions=submission.total_questions,
    )

    already_recorded = False
    try:
        await score_store.insert(db, new_entry)
        await db.commit()
        logger.info(
            "Score recorded",
            extra={
                "quiz_id": quiz_id,
                "player_key": player_key,
                "score": submission.score,
            },
        )
    except DuplicateEntryError:
        already_recorded = True
        logger.info(
            "Duplicate score submission ignored",
            extra={"quiz_id": quiz_id, "player_key": player_key},
        )
    except StorageFailureError:
        await db.rollback()
        raise

    ranked = views.mark_requester(await _rank_quiz(db, quiz_id), player_key)
    player = views.find_player(ranked, quiz_id, player_key)
    total_players = await score_store.count_by_quiz(db, quiz_id)

    return SubmissionResult(
        quiz_id=quiz_id,
        total_players=total_players,
        entry=player,
        already_recorded=already_recorded,
    )


async def get_top(
    db: AsyncSession,
    quiz_id: str,
    identity: PlayerIdentity | None = None,
    n: int = config.TOP_VIEW_SIZE,
) -> TopView:
    """
    The global top of a quiz. ``identity`` is optional; without it no row
    is flagged as the requester's.

    Raises:
        QuizNotFoundError: If the quiz was never recorded.
    """
    await _get_quiz_or_404(db, quiz_id)
    player_key = identity.player_key if identity else None

    ranked = views.mark_requester(await _rank_quiz(db, quiz_id), player_key)
    total_players = await score_store.count_by_quiz(db, quiz_id)

    return TopView(
        quiz_id=quiz_id,
        total_players=total_players,
        entries=views.top(ranked, n),
    )


async def get_me(
    db: AsyncSession,
    quiz_id: str,
    identity: PlayerIdentity,
) -> MeView:
    """
    The requester's row with the top, around-me and bottom windows.

    Raises:
        QuizNotFoundError: If the quiz was never recorded.
        PlayerNotFoundError: If the requester has no entry for the quiz.
    """
    await _get_quiz_or_404(db, quiz_id)

    ranked = await _rank_quiz(db, quiz_id)
    player_view = views.player_view(
        ranked,
        quiz_id,
        identity.player_key,
        top_n=config.ME_TOP_SIZE,
        radius=config.ME_AROUND_RADIUS,
        bottom_n=config.ME_BOTTOM_SIZE,
    )
    total_players = await score_store.count_by_quiz(db, quiz_id)

    return MeView(quiz_id=quiz_id, total_players=total_players, view=player_view)
