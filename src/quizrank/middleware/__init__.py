# src/quizrank/middleware/__init__.py

"""Middleware components for the QuizRank API."""

from .logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
