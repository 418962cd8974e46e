# tests/test_live_quiz.py

"""Tests for live quizzes served from the football quiz API."""

import random

import httpx
import pytest
from httpx import AsyncClient
from quizrank.db.models import Quiz
from quizrank.exceptions import LiveQuizError
from quizrank.services import quiz_service, qz_api
from sqlalchemy.ext.asyncio import AsyncSession

LEAGUES = [{"id": 39, "name": "Premier League"}]


def api_quiz(count: int) -> dict:
    """A quiz payload shaped like the API's: numbered questions plus a fixture."""
    payload: dict = {
        str(i): {
            "question": f"Live question {i + 1}",
            "answers": [
                {"txt": "Right", "type": "OK"},
                {"txt": "Wrong 1", "type": "KO"},
                {"txt": "Wrong 2", "type": "KO"},
                {"txt": "Wrong 3", "type": "KO"},
            ],
        }
        for i in range(count)
    }
    payload["fixture"] = {"id": "fx-1", "home": "Arsenal", "away": "Chelsea"}
    return payload


@pytest.fixture
def quiz_api(monkeypatch):
    """
    Route the quiz API client to in-process handlers.

    Returns the requests seen and a path -> handler dict the test fills in.
    """
    seen: list[httpx.Request] = []
    routes: dict = {}

    def handle(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return routes[request.url.path](request)

    def build_client() -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.MockTransport(handle), base_url="https://qz.test"
        )

    monkeypatch.setattr(qz_api, "build_client", build_client)
    monkeypatch.setattr(quiz_service.config, "QUIZ_MODE", "live")
    monkeypatch.setattr(quiz_service.config, "QUIZ_LEAGUE_ID", None)
    return seen, routes


# =============================================================================
# Client
# =============================================================================


def test_client_requires_base_url_and_credentials(monkeypatch):
    monkeypatch.setattr(qz_api.config, "QUIZ_API_BASE", None)
    monkeypatch.setattr(qz_api.config, "QUIZ_API_AUTH", "secret")
    with pytest.raises(LiveQuizError):
        qz_api.build_client()

    monkeypatch.setattr(qz_api.config, "QUIZ_API_BASE", "https://qz.test")
    monkeypatch.setattr(qz_api.config, "QUIZ_API_AUTH", None)
    with pytest.raises(LiveQuizError):
        qz_api.build_client()


@pytest.mark.asyncio
async def test_client_sends_credentials(monkeypatch):
    monkeypatch.setattr(qz_api.config, "QUIZ_API_BASE", "https://qz.test")
    monkeypatch.setattr(qz_api.config, "QUIZ_API_AUTH", "Bearer abc")

    async with qz_api.build_client() as client:
        assert client.headers["Authorization"] == "Bearer abc"
        assert client.base_url.host == "qz.test"


def test_extract_questions_converts_api_answers():
    questions = qz_api.extract_questions(api_quiz(2))

    assert [q["question"] for q in questions] == ["Live question 1", "Live question 2"]
    assert questions[0]["answers"][0] == {"text": "Right", "isCorrect": True}
    assert questions[0]["answers"][1] == {"text": "Wrong 1", "isCorrect": False}


def test_extract_questions_accepts_question_list():
    payload = {
        "questions": [
            {"question": "Q1", "answers": ["A", "B"]},
            {"question": "", "answers": ["A"]},
            {"answers": ["A"]},
        ]
    }

    assert qz_api.extract_questions(payload) == [
        {"question": "Q1", "answers": ["A", "B"]}
    ]


# =============================================================================
# Live Generation
# =============================================================================


@pytest.mark.asyncio
async def test_generate_live_quiz_records_league_and_fixture(
    async_client: AsyncClient, db_session: AsyncSession, quiz_api, monkeypatch
):
    seen, routes = quiz_api
    routes["/leagues"] = lambda request: httpx.Response(200, json=LEAGUES)
    routes["/quiz/latest-fixture"] = lambda request: httpx.Response(
        200, json=api_quiz(6)
    )
    monkeypatch.setattr(quiz_service.config, "QUIZ_LENGTH", "6")

    response = await async_client.post("/quiz/generate")

    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "live"
    assert data["metadata"]["fixture"]["id"] == "fx-1"
    assert data["metadata"]["league"]["id"] == 39
    assert len(data["questions"]) == 6
    for question in data["questions"]:
        assert [o["text"] for o in question["options"] if o["isCorrect"]] == ["Right"]

    quiz_request = seen[-1]
    assert quiz_request.url.params["leagueId"] == "39"
    assert quiz_request.url.params["length"] == "6"

    stored = await db_session.get(Quiz, data["quizId"])
    assert stored is not None
    assert stored.source == "live"
    assert stored.question_count == 6
    assert stored.quiz_metadata["fixture"]["id"] == "fx-1"


@pytest.mark.asyncio
async def test_upstream_failure_falls_back_to_mock(
    async_client: AsyncClient, quiz_api
):
    _, routes = quiz_api
    routes["/leagues"] = lambda request: httpx.Response(500, text="upstream error")

    response = await async_client.post("/quiz/generate")

    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "mock"
    assert data["metadata"] is None
    assert len(data["questions"]) > 0


@pytest.mark.asyncio
async def test_failed_league_attempt_is_retried(quiz_api):
    seen, routes = quiz_api
    routes["/leagues"] = lambda request: httpx.Response(200, json=LEAGUES)
    replies = iter(
        [
            httpx.Response(502, text="bad gateway"),
            httpx.Response(200, json={"fixture": {"id": "empty"}}),
            httpx.Response(200, json=api_quiz(3)),
        ]
    )
    routes["/quiz/latest-fixture"] = lambda request: next(replies)

    questions, metadata = await quiz_service.load_live_quiz(3, random.Random(1))

    assert len(questions) == 3
    assert metadata == {"league": LEAGUES[0], "fixture": api_quiz(3)["fixture"]}
    assert [r.url.path for r in seen].count("/quiz/latest-fixture") == 3


@pytest.mark.asyncio
async def test_attempts_are_bounded(quiz_api):
    seen, routes = quiz_api
    routes["/leagues"] = lambda request: httpx.Response(200, json=LEAGUES)
    routes["/quiz/latest-fixture"] = lambda request: httpx.Response(503)

    with pytest.raises(LiveQuizError):
        await quiz_service.load_live_quiz(3)

    attempts = [r for r in seen if r.url.path == "/quiz/latest-fixture"]
    assert len(attempts) == quiz_service.config.QUIZ_LIVE_ATTEMPTS


@pytest.mark.asyncio
async def test_pinned_league_skips_league_lookup(quiz_api, monkeypatch):
    seen, routes = quiz_api
    routes["/quiz/latest-fixture"] = lambda request: httpx.Response(
        200, json=api_quiz(2)
    )
    monkeypatch.setattr(quiz_service.config, "QUIZ_LEAGUE_ID", "61")

    questions, metadata = await quiz_service.load_live_quiz(2)

    assert len(questions) == 2
    assert metadata["league"] == {"id": "61"}
    assert [r.url.path for r in seen] == ["/quiz/latest-fixture"]
