# src/quizrank/api/session.py

"""API endpoints for bootstrapping and refreshing sessions."""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from quizrank.api.auth_cookies import apply_auth_cookies
from quizrank.api.deps import get_session_cookie
from quizrank.db import models
from quizrank.db.session import get_db
from quizrank.schemas.session import SessionRead
from quizrank.services import session_service

router = APIRouter(prefix="/session", tags=["Session"])


def _session_response(
    request: Request, response: Response, session: models.PlayerSession
) -> SessionRead:
    issued = session_service.issue_token(session)
    apply_auth_cookies(request, response, session.id, issued.token)
    return SessionRead(
        session_id=session.id,
        user_id=session.user_id,
        token=issued.token,
        expires_at=issued.expires_at,
    )


@router.post("/bootstrap", response_model=SessionRead)
async def bootstrap_session(
    request: Request,
    response: Response,
    session_id: str | None = Depends(get_session_cookie),
    db: AsyncSession = Depends(get_db),
) -> SessionRead:
    """
    Reuse the caller's active session or start a new one.

    Unknown and revoked sessions are replaced. A fresh access token is
    issued every time.
    """
    session = await session_service.ensure_session(
        db, session_id, create_if_missing=True, replace_revoked=True
    )
    return _session_response(request, response, session)


@router.post("/refresh", response_model=SessionRead)
async def refresh_session(
    request: Request,
    response: Response,
    session_id: str | None = Depends(get_session_cookie),
    db: AsyncSession = Depends(get_db),
) -> SessionRead:
    """
    Reissue the access token for an existing session.

    Raises:
        401 Unauthorized: If the session is missing, unknown or revoked.
    """
    session = await session_service.ensure_session(
        db, session_id, create_if_missing=False, replace_revoked=False
    )
    return _session_response(request, response, session)
