# src/quizrank/schemas/__init__.py

"""Pydantic schemas for API validation and serialization."""

from .common import CamelModel
from .leaderboard import (
    LeaderboardEntryRead,
    LeaderboardMeResponse,
    LeaderboardTopResponse,
    ScoreSubmission,
    SubmitScoreResponse,
)
from .quiz import GeneratedQuiz, QuizOption, QuizQuestion, QuizRecordRead, QuizSource
from .session import SessionRead

__all__ = [
    # Common
    "CamelModel",
    # Leaderboard
    "LeaderboardEntryRead",
    "LeaderboardMeResponse",
    "LeaderboardTopResponse",
    "ScoreSubmission",
    "SubmitScoreResponse",
    # Quiz
    "GeneratedQuiz",
    "QuizOption",
    "QuizQuestion",
    "QuizRecordRead",
    "QuizSource",
    # Session
    "SessionRead",
]
