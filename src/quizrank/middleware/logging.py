# src/quizrank/middleware/logging.py

"""Request/response logging middleware for the QuizRank API."""

import logging
import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from quizrank.config import SESSION_COOKIE

logger = logging.getLogger("quizrank.api")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its outcome and timing.

    A request id is taken from an incoming X-Request-ID header or generated,
    and echoed back on the response. Session ids are never logged; only
    whether the request carried one.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        started = time.perf_counter()

        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "has_session": SESSION_COOKIE in request.cookies,
            "client_ip": request.client.host if request.client else "unknown",
        }
        logger.info(
            "[%s] -> %s %s", request_id, request.method, request.url.path, extra=context
        )

        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.error(
                "[%s] <- %s %s failed after %.2fms",
                request_id,
                request.method,
                request.url.path,
                elapsed_ms,
                extra={**context, "duration_ms": round(elapsed_ms, 2)},
                exc_info=True,
            )
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        # 4xx are expected client outcomes (duplicate scores, missing players)
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "[%s] <- %s %s %d (%.2fms)",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            extra={
                **context,
                "status_code": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response  # type: ignore[no-any-return]
