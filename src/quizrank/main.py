# src/quizrank/main.py

"""Main FastAPI application for QuizRank."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .api import leaderboard, quiz, session
from .api.auth_cookies import apply_auth_cookies
from .db.session import engine
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    QuizRankError,
    ResourceNotFoundError,
    StorageError,
    ValidationError,
)
from .middleware.logging import RequestLoggingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager for startup and shutdown events."""
    yield
    # Shutdown: Dispose of database connections gracefully
    await engine.dispose()


app = FastAPI(title="QuizRank API", lifespan=lifespan)

app.add_middleware(RequestLoggingMiddleware)


def _error_response(
    request: Request, status_code: int, exc: QuizRankError
) -> JSONResponse:
    response = JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error_type": type(exc).__name__},
    )
    # A session started earlier in the request still reaches the client.
    auth_cookies = getattr(request.state, "auth_cookies", None)
    if auth_cookies:
        apply_auth_cookies(request, response, *auth_cookies)
    return response


# =============================================================================
# Global Exception Handlers
# =============================================================================


@app.exception_handler(ResourceNotFoundError)
async def resource_not_found_handler(
    request: Request, exc: ResourceNotFoundError
) -> JSONResponse:
    """Unknown quiz, or no leaderboard entry for the player -> 404."""
    logger.info("Resource not found: %s", exc.message, extra=exc.details)
    return _error_response(request, 404, exc)


@app.exception_handler(ValidationError)
async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Invalid submissions and question count mismatches -> 400."""
    logger.warning("Validation error: %s", exc.message, extra=exc.details)
    return _error_response(request, 400, exc)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies -> 400 instead of FastAPI's default 422."""
    logger.warning("Malformed request: %s", exc.errors())
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Invalid request body",
            "error_type": "InvalidInputError",
            "errors": jsonable_errors(exc),
        },
    )


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(
    request: Request, exc: AuthenticationError
) -> JSONResponse:
    """Missing, unknown or revoked session -> 401."""
    logger.info("Authentication failed: %s", exc.message, extra=exc.details)
    return _error_response(request, 401, exc)


@app.exception_handler(ConflictError)
async def conflict_error_handler(request: Request, exc: ConflictError) -> JSONResponse:
    """Uniqueness conflicts that escaped the service layer -> 409."""
    logger.info("Conflict: %s", exc.message, extra=exc.details)
    return _error_response(request, 409, exc)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Unconfirmed writes -> 500. Never reported as success."""
    logger.error("Storage error: %s", exc.message, extra=exc.details, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Failed to record score", "error_type": type(exc).__name__},
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(
    request: Request, exc: ConfigurationError
) -> JSONResponse:
    """Missing secrets or unusable quiz configuration -> 500."""
    logger.error("Configuration error: %s", exc.message, extra=exc.details)
    return _error_response(request, 500, exc)


@app.exception_handler(QuizRankError)
async def quizrank_error_handler(request: Request, exc: QuizRankError) -> JSONResponse:
    """Catch-all for any other QuizRank errors -> 500."""
    logger.error("QuizRank error: %s", exc.message, extra=exc.details, exc_info=True)
    return _error_response(request, 500, exc)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(
    request: Request, exc: IntegrityError
) -> JSONResponse:
    """Constraint violations outside the score store -> 409."""
    logger.warning("Database integrity error: %s", exc.orig or exc)
    return JSONResponse(
        status_code=409,
        content={"detail": "Database constraint violation"},
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_error_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """Catch-all for other SQLAlchemy database errors."""
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "An internal database error occurred"},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions."""
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "An internal server error occurred"},
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Field locations and messages, without the raw input values."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


app.include_router(session.router)
app.include_router(quiz.router)
app.include_router(leaderboard.router)


@app.get("/", tags=["Root"])
async def read_root() -> dict[str, str]:
    """Provides a welcome message."""
    return {"message": "Welcome to the QuizRank API"}


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str | int]:
    """Health check endpoint for monitoring. ``timestamp`` is epoch ms."""
    return {"status": "ok", "timestamp": int(time.time() * 1000)}
