# src/quizrank/schemas/quiz.py

"""Pydantic schemas for generated quizzes."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import ConfigDict

from .common import CamelModel


class QuizSource(str, Enum):
    """Where a quiz's questions came from."""

    MOCK = "mock"
    LIVE = "live"


# ===============================================
# == Normalized Questions
# ===============================================


class QuizOption(CamelModel):
    id: str
    text: str
    is_correct: bool


class QuizQuestion(CamelModel):
    id: str
    prompt: str
    options: list[QuizOption]


class GeneratedQuiz(CamelModel):
    """A freshly generated quiz, ready to be played."""

    quiz_id: str
    session_id: str
    source: QuizSource
    metadata: dict[str, Any] | None = None
    questions: list[QuizQuestion]


# ===============================================
# == Stored Quiz Record
# ===============================================


class QuizRecordRead(CamelModel):
    """The persisted quiz record the leaderboard validates against."""

    id: str
    session_id: str
    user_id: str | None = None
    source: QuizSource
    question_count: int
    created_at: datetime

    # Merged with the camelCase config inherited from CamelModel
    model_config = ConfigDict(from_attributes=True)
