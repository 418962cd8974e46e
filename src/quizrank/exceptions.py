# src/quizrank/exceptions.py

"""Custom exception hierarchy for QuizRank.

Each family maps onto one HTTP status code in ``main.py``:

1. ResourceNotFoundError -> 404
2. ValidationError -> 400
3. AuthenticationError -> 401
4. ConflictError -> 409
5. StorageError / ConfigurationError -> 500
"""

from __future__ import annotations

from typing import Any


class QuizRankError(Exception):
    """Base exception for all QuizRank errors.

    Attributes:
        message: Human-readable error description
        details: Optional dict with additional context for logging/debugging
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


# =============================================================================
# Resource Not Found Errors (HTTP 404)
# =============================================================================


class ResourceNotFoundError(QuizRankError):
    """Base class for resource not found errors."""

    pass


class QuizNotFoundError(ResourceNotFoundError):
    """Raised when a quiz ID has no stored quiz record."""

    def __init__(self, quiz_id: str) -> None:
        super().__init__(
            message="Quiz not found",
            details={"quiz_id": quiz_id},
        )


class PlayerNotFoundError(ResourceNotFoundError):
    """Raised when the requesting player has no entry on a quiz leaderboard."""

    def __init__(self, quiz_id: str, player_key: str) -> None:
        super().__init__(
            message="Player not found on leaderboard",
            details={"quiz_id": quiz_id, "player_key": player_key},
        )


# =============================================================================
# Validation Errors (HTTP 400)
# =============================================================================


class ValidationError(QuizRankError):
    """Base class for validation errors."""

    pass


class InvalidInputError(ValidationError):
    """Raised when a score submission fails basic input checks."""

    def __init__(self, reason: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message=reason, details=details)


class QuestionCountMismatchError(ValidationError):
    """Raised when submitted totalQuestions differs from the stored quiz."""

    def __init__(self, quiz_id: str, expected: int, submitted: int) -> None:
        super().__init__(
            message="Total questions mismatch",
            details={
                "quiz_id": quiz_id,
                "expected": expected,
                "submitted": submitted,
            },
        )


# =============================================================================
# Authentication Errors (HTTP 401)
# =============================================================================


class AuthenticationError(QuizRankError):
    """Base class for session/identity errors."""

    pass


class UnauthenticatedError(AuthenticationError):
    """Raised when a request carries no session at all."""

    def __init__(self) -> None:
        super().__init__(message="Missing session")


class InvalidSessionError(AuthenticationError):
    """Raised when the session cookie names an unknown or revoked session."""

    def __init__(self, session_id: str, reason: str = "unknown") -> None:
        super().__init__(
            message="Invalid session",
            details={"session_id": session_id, "reason": reason},
        )


# =============================================================================
# Conflict Errors (HTTP 409)
# =============================================================================


class ConflictError(QuizRankError):
    """Base class for uniqueness conflicts."""

    pass


class DuplicateEntryError(ConflictError):
    """Raised by the score store when (quiz, player) already has an entry.

    The already-recorded row is attached so callers can report the standing
    that stands instead of failing the request.
    """

    def __init__(self, quiz_id: str, player_key: str, existing: Any) -> None:
        self.existing = existing
        super().__init__(
            message="Score already recorded",
            details={"quiz_id": quiz_id, "player_key": player_key},
        )


# =============================================================================
# Storage and Configuration Errors (HTTP 500)
# =============================================================================


class StorageError(QuizRankError):
    """Base class for persistence failures."""

    pass


class StorageFailureError(StorageError):
    """Raised when a write could not be confirmed by the database."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            message=f"Storage failure during {operation}",
            details={"operation": operation, "reason": reason},
        )


class ConfigurationError(QuizRankError):
    """Base class for errors caused by missing or bad configuration."""

    pass


class TokenIssueError(ConfigurationError):
    """Raised when an access token cannot be signed."""

    def __init__(self, reason: str) -> None:
        super().__init__(message="Failed to issue token", details={"reason": reason})


class QuizGenerationError(ConfigurationError):
    """Raised when no playable quiz can be produced."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            message="Failed to generate quiz", details={"reason": reason}
        )


# =============================================================================
# Upstream Service Errors
# =============================================================================


class UpstreamError(QuizRankError):
    """Base class for failures of external services."""

    pass


class LiveQuizError(UpstreamError):
    """Raised when the live quiz API cannot supply a quiz."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            message="Live quiz unavailable", details={"reason": reason}
        )
