# src/quizrank/api/leaderboard.py

"""API endpoints for quiz leaderboards."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from quizrank.api.deps import get_or_create_identity, get_session_cookie
from quizrank.db.session import get_db
from quizrank.exceptions import DuplicateEntryError
from quizrank.schemas import leaderboard as leaderboard_schema
from quizrank.services import leaderboard_service, session_service
from quizrank.services.session_service import PlayerIdentity

router = APIRouter(prefix="/leaderboard", tags=["Leaderboard"])

EntryRead = leaderboard_schema.LeaderboardEntryRead


@router.post(
    "/{quiz_id}/score",
    response_model=leaderboard_schema.SubmitScoreResponse,
    responses={409: {"description": "Score already recorded for this player"}},
)
async def submit_score(
    quiz_id: str,
    submission: leaderboard_schema.ScoreSubmission,
    session_id: str | None = Depends(get_session_cookie),
    db: AsyncSession = Depends(get_db),
):
    """
    Record the caller's score for a quiz.

    - **score**: Correct answers (0..totalQuestions)
    - **totalQuestions**: Must equal the quiz's question count
    - **nickname**: Display name, trimmed and capped at 64 characters

    Raises:
        400 Bad Request: Invalid input or question count mismatch.
        401 Unauthorized: Missing, unknown or revoked session.
        404 Not Found: Unknown quiz.
        409 Conflict: The player already has a score; the body carries it.
    """
    # Input is validated before the session is resolved.
    validated = leaderboard_service.validate_submission(submission)
    identity = await session_service.resolve_identity(db, session_id)

    result = await leaderboard_service.submit_score(db, quiz_id, identity, validated)
    body = leaderboard_schema.SubmitScoreResponse(
        quiz_id=result.quiz_id,
        total_players=result.total_players,
        entry=EntryRead.from_ranked(result.entry),
    )

    if result.already_recorded:
        return JSONResponse(
            status_code=409,
            content={
                "detail": "Score already recorded",
                "error_type": DuplicateEntryError.__name__,
                **body.model_dump(mode="json", by_alias=True),
            },
        )
    return body


@router.get("/{quiz_id}/top", response_model=leaderboard_schema.LeaderboardTopResponse)
async def get_top(
    quiz_id: str,
    identity: PlayerIdentity = Depends(get_or_create_identity),
    db: AsyncSession = Depends(get_db),
) -> leaderboard_schema.LeaderboardTopResponse:
    """
    Get the top 10 rows of a quiz leaderboard.

    The caller's row is flagged with isMe. A session is started for
    first-time visitors.

    Raises:
        401 Unauthorized: Revoked session.
        404 Not Found: Unknown quiz.
    """
    top = await leaderboard_service.get_top(db, quiz_id, identity)
    return leaderboard_schema.LeaderboardTopResponse(
        quiz_id=top.quiz_id,
        total_players=top.total_players,
        entries=[EntryRead.from_ranked(item) for item in top.entries],
    )


@router.get("/{quiz_id}/me", response_model=leaderboard_schema.LeaderboardMeResponse)
async def get_me(
    quiz_id: str,
    identity: PlayerIdentity = Depends(get_or_create_identity),
    db: AsyncSession = Depends(get_db),
) -> leaderboard_schema.LeaderboardMeResponse:
    """
    Get the caller's standing with top 5, +/-2 ranks around them and bottom 5.

    A session is started for first-time visitors, who then get 404.

    Raises:
        401 Unauthorized: Revoked session.
        404 Not Found: Unknown quiz, or the caller has no score recorded.
    """
    me = await leaderboard_service.get_me(db, quiz_id, identity)
    view = me.view
    return leaderboard_schema.LeaderboardMeResponse(
        quiz_id=me.quiz_id,
        total_players=me.total_players,
        player=EntryRead.from_ranked(view.player),
        top=[EntryRead.from_ranked(item) for item in view.top],
        around=[EntryRead.from_ranked(item) for item in view.around],
        bottom=[EntryRead.from_ranked(item) for item in view.bottom],
    )
