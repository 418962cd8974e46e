# src/quizrank/api/quiz.py

"""API endpoints for generating quizzes."""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from quizrank.api.auth_cookies import apply_auth_cookies
from quizrank.api.deps import get_session_cookie
from quizrank.db.models import Quiz
from quizrank.db.session import get_db
from quizrank.exceptions import QuizNotFoundError
from quizrank.schemas import quiz as quiz_schema
from quizrank.services import quiz_service, session_service

router = APIRouter(prefix="/quiz", tags=["Quiz"])


@router.post("/generate", response_model=quiz_schema.GeneratedQuiz)
async def generate_quiz(
    request: Request,
    response: Response,
    session_id: str | None = Depends(get_session_cookie),
    db: AsyncSession = Depends(get_db),
) -> quiz_schema.GeneratedQuiz:
    """
    Generate and record a new quiz for the caller.

    A session is created when the request has none.

    Raises:
        401 Unauthorized: If the session cookie names a revoked session.
        500: If no quiz could be generated.
    """
    session = await session_service.ensure_session(
        db, session_id, create_if_missing=True, replace_revoked=False
    )
    issued = session_service.issue_token(session)
    quiz = await quiz_service.generate_quiz(db, session)
    apply_auth_cookies(request, response, session.id, issued.token)
    return quiz


@router.get("/{quiz_id}", response_model=quiz_schema.QuizRecordRead)
async def read_quiz(quiz_id: str, db: AsyncSession = Depends(get_db)) -> Quiz:
    """
    Retrieve the stored record of a quiz (no questions).
    """
    quiz = await quiz_service.get_quiz(db, quiz_id)
    if quiz is None:
        raise QuizNotFoundError(quiz_id)
    return quiz
