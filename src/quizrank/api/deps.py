# src/quizrank/api/deps.py

"""Shared FastAPI dependencies for resolving the caller's session."""

from fastapi import Cookie, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from quizrank.api.auth_cookies import apply_auth_cookies
from quizrank.config import SESSION_COOKIE
from quizrank.db.session import get_db
from quizrank.services import session_service
from quizrank.services.session_service import PlayerIdentity


async def get_session_cookie(
    session_id: str | None = Cookie(None, alias=SESSION_COOKIE),
) -> str | None:
    """The raw session id from the request, if any."""
    return session_id


async def get_or_create_identity(
    request: Request,
    response: Response,
    session_id: str | None = Depends(get_session_cookie),
    db: AsyncSession = Depends(get_db),
) -> PlayerIdentity:
    """
    Identity for leaderboard reads.

    First-time visitors get a new session and fresh cookies. A revoked
    session is rejected with 401.
    """
    session = await session_service.ensure_session(
        db, session_id, create_if_missing=True, replace_revoked=False
    )
    issued = session_service.issue_token(session)
    apply_auth_cookies(request, response, session.id, issued.token)
    # Error responses are built from scratch; they re-apply these cookies.
    request.state.auth_cookies = (session.id, issued.token)
    return PlayerIdentity(session_id=session.id, user_id=session.user_id)
