# src/quizrank/services/session_service.py

"""Session lookup, creation and access token issuance.

This is the identity provider for the leaderboard: it turns a session cookie
value into a ``PlayerIdentity`` whose ``player_key`` the leaderboard uses as
its uniqueness key. The leaderboard never reads cookies itself.
"""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass

import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from quizrank import config
from quizrank.db import models
from quizrank.exceptions import (
    InvalidSessionError,
    TokenIssueError,
    UnauthenticatedError,
)

logger = logging.getLogger(__name__)


def build_player_key(session_id: str, user_id: str | None = None) -> str:
    """Authenticated players are keyed by user, anonymous ones by session."""
    return f"user:{user_id}" if user_id else f"session:{session_id}"


@dataclass(frozen=True)
class PlayerIdentity:
    session_id: str
    user_id: str | None = None

    @property
    def player_key(self) -> str:
        return build_player_key(self.session_id, self.user_id)


@dataclass(frozen=True)
class IssuedToken:
    token: str
    # Epoch milliseconds
    expires_at: int


def generate_session_id() -> str:
    """16 random bytes, base64url without padding."""
    return secrets.token_urlsafe(16)


async def get_session(
    db: AsyncSession, session_id: str
) -> models.PlayerSession | None:
    return await db.get(models.PlayerSession, session_id)


async def create_session(
    db: AsyncSession, session_id: str | None = None, user_id: str | None = None
) -> models.PlayerSession:
    session = models.PlayerSession(
        id=session_id or generate_session_id(), user_id=user_id
    )
    db.add(session)
    await db.commit()
    logger.info("Created new session", extra={"session_id": session.id})
    return session


async def touch_session(db: AsyncSession, session: models.PlayerSession) -> None:
    session.last_seen_at = models.utcnow()
    db.add(session)
    await db.commit()


async def ensure_session(
    db: AsyncSession,
    session_id: str | None,
    *,
    create_if_missing: bool,
    replace_revoked: bool,
) -> models.PlayerSession:
    """
    Resolve the caller's session, optionally creating one.

    Raises:
        UnauthenticatedError: No session cookie and creation not allowed.
        InvalidSessionError: Cookie names an unknown session (and creation is
            not allowed) or a revoked one (and replacement is not allowed).
    """
    session = await get_session(db, session_id) if session_id else None

    if session is not None and session.revoked:
        if not replace_revoked:
            raise InvalidSessionError(session.id, reason="revoked")
        session = None

    if session is None:
        if not create_if_missing:
            if session_id:
                raise InvalidSessionError(session_id, reason="unknown")
            raise UnauthenticatedError()
        return await create_session(db)

    await touch_session(db, session)
    return session


async def resolve_identity(
    db: AsyncSession, session_id: str | None
) -> PlayerIdentity:
    """
    Look up the player behind a session cookie. Never creates sessions.

    Raises:
        UnauthenticatedError: If there is no session cookie.
        InvalidSessionError: If the session is unknown or revoked.
    """
    if not session_id:
        raise UnauthenticatedError()

    session = await get_session(db, session_id)
    if session is None:
        raise InvalidSessionError(session_id, reason="unknown")
    if session.revoked:
        raise InvalidSessionError(session_id, reason="revoked")

    return PlayerIdentity(session_id=session.id, user_id=session.user_id)


def issue_token(session: models.PlayerSession) -> IssuedToken:
    """
    Sign a short-lived HS256 access token for the session.

    Raises:
        TokenIssueError: If AUTH_SECRET is not configured.
    """
    if not config.AUTH_SECRET:
        raise TokenIssueError("Auth secret is not configured")

    issued_at = int(time.time())
    expires = issued_at + config.ACCESS_TOKEN_MAX_AGE_SECONDS

    payload: dict = {
        "sid": session.id,
        "iat": issued_at,
        "exp": expires,
        "iss": config.JWT_ISSUER,
    }
    if config.JWT_AUDIENCE:
        payload["aud"] = config.JWT_AUDIENCE
    if session.user_id:
        payload["sub"] = session.user_id

    token = jwt.encode(payload, config.AUTH_SECRET, algorithm=config.JWT_ALGORITHM)
    return IssuedToken(token=token, expires_at=expires * 1000)
