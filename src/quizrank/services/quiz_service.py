# src/quizrank/services/quiz_service.py

"""Quiz generation and the quiz records the leaderboard validates against."""

from __future__ import annotations

import json
import logging
import random
import uuid
from pathlib import Path
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from quizrank import config
from quizrank.db import models
from quizrank.exceptions import LiveQuizError, QuizGenerationError
from quizrank.schemas import quiz as quiz_schema
from quizrank.services import qz_api

logger = logging.getLogger(__name__)

MOCK_QUIZ_PATH = Path(__file__).resolve().parent.parent / "data" / "mock_quiz.json"


# ===============================================
# == Configuration
# ===============================================


def parse_quiz_length(value: str | int | None = None) -> int:
    """
    Read the configured number of questions per quiz.

    Raises:
        QuizGenerationError: If the value is not a positive number.
    """
    raw = config.QUIZ_LENGTH if value is None else value
    try:
        parsed = int(float(raw))
    except (TypeError, ValueError) as e:
        raise QuizGenerationError(
            f"QUIZ_LENGTH must be a positive number, got: {raw}"
        ) from e
    if parsed <= 0:
        raise QuizGenerationError(f"QUIZ_LENGTH must be a positive number, got: {raw}")
    return parsed


def resolve_quiz_mode(value: str | None = None) -> quiz_schema.QuizSource:
    mode = config.QUIZ_MODE if value is None else value
    return quiz_schema.QuizSource.LIVE if mode == "live" else quiz_schema.QuizSource.MOCK


# ===============================================
# == Question Normalization
# ===============================================


def _option_text(answer: Any) -> str | None:
    if isinstance(answer, str):
        return answer
    if isinstance(answer, dict) and isinstance(answer.get("text"), str):
        return answer["text"]
    return None


def _option_candidates(question: dict[str, Any]) -> list[tuple[str, bool]]:
    """
    Collect (text, is_correct) pairs from any of the supported raw layouts.

    Plain string answers count the first one as correct.
    """
    candidates: list[tuple[str, bool]] = []

    answers = question.get("answers") or question.get("options")
    if isinstance(answers, list):
        for index, answer in enumerate(answers):
            text = _option_text(answer)
            if not text:
                continue
            if isinstance(answer, dict):
                is_correct = bool(answer.get("isCorrect", answer.get("correct")))
            else:
                is_correct = index == 0
            candidates.append((text, is_correct))

    correct = question.get("correct_answer") or question.get("correctAnswer")
    incorrect = question.get("incorrect_answers") or question.get("incorrectAnswers")
    if isinstance(correct, str) and isinstance(incorrect, list) and incorrect:
        candidates.append((correct, True))
        candidates.extend((text, False) for text in incorrect if isinstance(text, str))

    return candidates


def normalize_question(
    question: dict[str, Any], rng: random.Random | None = None
) -> quiz_schema.QuizQuestion | None:
    """Normalize one raw question, or None if it has no prompt or options."""
    rng = rng or random.Random()
    prompt = question.get("question") or question.get("prompt")
    candidates = _option_candidates(question)
    if not prompt or not candidates:
        return None

    rng.shuffle(candidates)
    return quiz_schema.QuizQuestion(
        id=str(uuid.uuid4()),
        prompt=prompt,
        options=[
            quiz_schema.QuizOption(id=str(uuid.uuid4()), text=text, is_correct=ok)
            for text, ok in candidates
        ],
    )


def normalize_questions(
    raw_questions: list[dict[str, Any]],
    target_length: int,
    rng: random.Random | None = None,
) -> list[quiz_schema.QuizQuestion]:
    """
    Normalize raw questions and keep at most ``target_length`` of them.

    Raises:
        QuizGenerationError: If no usable question remains.
    """
    normalized = [normalize_question(q, rng) for q in raw_questions]
    questions = [q for q in normalized if q is not None][:target_length]
    if not questions:
        raise QuizGenerationError("Quiz data did not contain any questions")
    return questions


def load_mock_questions(
    target_length: int, rng: random.Random | None = None
) -> list[dict[str, Any]]:
    """A random sample of the bundled football question bank."""
    rng = rng or random.Random()
    with MOCK_QUIZ_PATH.open(encoding="utf-8") as f:
        bank = json.load(f)
    rng.shuffle(bank)
    return bank[:target_length]


async def load_live_quiz(
    target_length: int, rng: random.Random | None = None
) -> tuple[list[dict[str, Any]], dict[str, Any]]:
    """
    Fetch raw questions and their league/fixture metadata from the quiz API.

    Random leagues are tried until one returns questions, up to
    QUIZ_LIVE_ATTEMPTS times. QUIZ_LEAGUE_ID pins the league.

    Raises:
        LiveQuizError: If the API is not configured or no league yields a quiz.
    """
    rng = rng or random.Random()
    async with qz_api.build_client() as client:
        if config.QUIZ_LEAGUE_ID:
            leagues = [{"id": config.QUIZ_LEAGUE_ID}]
        else:
            leagues = await qz_api.get_leagues(client)
        if not leagues:
            raise LiveQuizError("No leagues available from the quiz API")

        for attempt in range(1, config.QUIZ_LIVE_ATTEMPTS + 1):
            league = rng.choice(leagues)
            try:
                payload = await qz_api.get_quiz_by_latest_fixture(
                    client, league["id"], target_length
                )
            except LiveQuizError as e:
                logger.warning(
                    "Live quiz attempt failed",
                    extra={"league_id": league["id"], "attempt": attempt, **e.details},
                )
                continue

            questions = qz_api.extract_questions(payload)
            if questions:
                metadata: dict[str, Any] = {"league": league}
                if payload.get("fixture"):
                    metadata["fixture"] = payload["fixture"]
                return questions, metadata

    raise LiveQuizError(
        f"No league returned questions after {config.QUIZ_LIVE_ATTEMPTS} attempts"
    )


# ===============================================
# == Quiz Records
# ===============================================


async def record_quiz(
    db: AsyncSession,
    *,
    quiz_id: str,
    session_id: str,
    source: quiz_schema.QuizSource,
    question_count: int,
    user_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> models.Quiz:
    quiz = models.Quiz(
        id=quiz_id,
        session_id=session_id,
        user_id=user_id,
        source=source.value,
        question_count=question_count,
        quiz_metadata=metadata or None,
    )
    db.add(quiz)
    await db.commit()
    return quiz


async def get_quiz(db: AsyncSession, quiz_id: str) -> models.Quiz | None:
    return await db.get(models.Quiz, quiz_id)


async def generate_quiz(
    db: AsyncSession,
    session: models.PlayerSession,
    *,
    length: int | None = None,
    mode: quiz_schema.QuizSource | None = None,
    rng: random.Random | None = None,
) -> quiz_schema.GeneratedQuiz:
    """
    Build a quiz for the session and record it so scores can reference it.

    Live mode falls back to the bundled bank when the quiz API fails.

    Raises:
        QuizGenerationError: If the length is misconfigured or no question
            survives normalization.
    """
    target_length = length if length is not None else parse_quiz_length()
    requested = mode or resolve_quiz_mode()

    source = requested
    raw_questions: list[dict[str, Any]] = []
    metadata: dict[str, Any] | None = None

    if requested == quiz_schema.QuizSource.LIVE:
        try:
            raw_questions, metadata = await load_live_quiz(target_length, rng)
        except LiveQuizError as e:
            logger.warning(
                "Live quiz failed, falling back to mock",
                extra={"session_id": session.id, **e.details},
            )
            source = quiz_schema.QuizSource.MOCK
            metadata = None

    if source == quiz_schema.QuizSource.MOCK:
        raw_questions = load_mock_questions(target_length, rng)

    questions = normalize_questions(raw_questions, target_length, rng)

    quiz_id = str(uuid.uuid4())
    await record_quiz(
        db,
        quiz_id=quiz_id,
        session_id=session.id,
        user_id=session.user_id,
        source=source,
        question_count=len(questions),
        metadata=metadata,
    )
    logger.info(
        "Generated quiz",
        extra={
            "quiz_id": quiz_id,
            "source": source.value,
            "question_count": len(questions),
        },
    )

    return quiz_schema.GeneratedQuiz(
        quiz_id=quiz_id,
        session_id=session.id,
        source=source,
        metadata=metadata,
        questions=questions,
    )
