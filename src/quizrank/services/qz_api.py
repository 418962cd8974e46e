# src/quizrank/services/qz_api.py

"""Client for the football quiz API that backs live quizzes."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from quizrank import config
from quizrank.exceptions import LiveQuizError

logger = logging.getLogger(__name__)

LEAGUES_PATH = "/leagues"
LATEST_FIXTURE_QUIZ_PATH = "/quiz/latest-fixture"


def build_client() -> httpx.AsyncClient:
    """
    An authenticated client for the configured API.

    Raises:
        LiveQuizError: If the base URL or credentials are missing.
    """
    if not config.QUIZ_API_BASE:
        raise LiveQuizError("QUIZ_API_BASE is not configured for live quiz mode")
    if not config.QUIZ_API_AUTH:
        raise LiveQuizError("QUIZ_API_AUTH is not configured for live quiz mode")

    return httpx.AsyncClient(
        base_url=config.QUIZ_API_BASE,
        headers={"Authorization": config.QUIZ_API_AUTH, "Accept": "application/json"},
        timeout=config.QUIZ_API_TIMEOUT,
    )


async def _get_json(
    client: httpx.AsyncClient, path: str, params: dict[str, Any] | None = None
) -> Any:
    try:
        response = await client.get(path, params=params)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPError as e:
        raise LiveQuizError(f"GET {path} failed: {e}") from e
    except ValueError as e:
        raise LiveQuizError(f"GET {path} returned invalid JSON") from e


async def get_leagues(client: httpx.AsyncClient) -> list[dict[str, Any]]:
    """Leagues the API can build quizzes for. Entries without an id are skipped."""
    data = await _get_json(client, LEAGUES_PATH)
    if isinstance(data, dict):
        data = data.get("leagues") or data.get("data") or []
    if not isinstance(data, list):
        raise LiveQuizError("Unexpected leagues payload")
    return [league for league in data if isinstance(league, dict) and "id" in league]


async def get_quiz_by_latest_fixture(
    client: httpx.AsyncClient, league_id: Any, length: int
) -> dict[str, Any]:
    """A quiz about the latest fixture of a league."""
    data = await _get_json(
        client,
        LATEST_FIXTURE_QUIZ_PATH,
        params={
            "leagueId": league_id,
            "length": length,
            "nbAnswers": 4,
            "distinct": "true",
            "shuffle": "true",
            "lang": "en",
        },
    )
    if not isinstance(data, dict):
        raise LiveQuizError("Unexpected quiz payload")
    return data


def _convert_answers(answers: list[Any]) -> list[Any]:
    # API answers look like {"txt": ..., "type": "OK" | "KO"}
    converted = []
    for answer in answers:
        if isinstance(answer, dict) and "txt" in answer:
            converted.append(
                {"text": answer["txt"], "isCorrect": answer.get("type") == "OK"}
            )
        else:
            converted.append(answer)
    return converted


def extract_questions(payload: dict[str, Any]) -> list[dict[str, Any]]:
    """
    Raw questions from a quiz payload.

    The API returns each question under a numeric key ("0", "1", ...) next to
    a ``fixture`` object; a plain ``questions`` list is accepted as well.
    """
    if isinstance(payload.get("questions"), list):
        items = payload["questions"]
    else:
        items = [
            value
            for key, value in payload.items()
            if key != "fixture" and isinstance(value, dict)
        ]

    questions = []
    for item in items:
        if not isinstance(item, dict):
            continue
        if not item.get("question") or not isinstance(item.get("answers"), list):
            continue
        questions.append(
            {
                "question": item["question"],
                "answers": _convert_answers(item["answers"]),
            }
        )
    return questions
