# src/quizrank/api/auth_cookies.py

"""Writing the session and access token cookies onto responses."""

from fastapi import Request, Response

from quizrank import config


def apply_auth_cookies(
    request: Request, response: Response, session_id: str, token: str
) -> None:
    """Set both auth cookies. ``Secure`` only when served over https."""
    secure = request.url.scheme == "https"

    response.set_cookie(
        config.SESSION_COOKIE,
        session_id,
        max_age=config.SESSION_MAX_AGE_SECONDS,
        path="/",
        secure=secure,
        httponly=True,
        samesite="lax",
    )
    response.set_cookie(
        config.ACCESS_TOKEN_COOKIE,
        token,
        max_age=config.ACCESS_TOKEN_MAX_AGE_SECONDS,
        path="/",
        secure=secure,
        httponly=True,
        samesite="lax",
    )
