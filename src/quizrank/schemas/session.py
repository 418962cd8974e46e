# src/quizrank/schemas/session.py

"""Pydantic schemas for session bootstrap and refresh."""

from .common import CamelModel


class SessionRead(CamelModel):
    """Properties returned after a session is bootstrapped or refreshed."""

    session_id: str
    user_id: str | None = None
    token: str

    # Epoch milliseconds
    expires_at: int
