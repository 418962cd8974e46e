# src/quizrank/schemas/leaderboard.py

"""Leaderboard schemas for score submission and ranked views."""

from pydantic import Field

from quizrank.ranking.engine import RankedEntry

from .common import CamelModel


class ScoreSubmission(CamelModel):
    """Body of a score submission.

    Range checks and nickname cleanup happen in the leaderboard service so
    they report as InvalidInputError rather than as schema errors.

    Examples:
        {"score": 4, "totalQuestions": 5, "nickname": "Alice"}
    """

    score: int
    total_questions: int
    nickname: str = ""


class LeaderboardEntryRead(CamelModel):
    """Single ranked row as shown to clients.

    Attributes:
        rank: Shared position in the leaderboard (1-indexed)
        nickname: Display name chosen at submission time
        score: Correct answers
        total_questions: Questions in the quiz
        is_me: Whether this row belongs to the requesting player
    """

    rank: int = Field(..., ge=1, description="Position in leaderboard (1-indexed)")
    nickname: str
    score: int
    total_questions: int
    is_me: bool = False

    @classmethod
    def from_ranked(cls, item: RankedEntry) -> "LeaderboardEntryRead":
        return cls(
            rank=item.rank,
            nickname=item.entry.nickname,  # type: ignore[attr-defined]
            score=item.entry.score,
            total_questions=item.entry.total_questions,  # type: ignore[attr-defined]
            is_me=item.is_me,
        )


class SubmitScoreResponse(CamelModel):
    """Result of a submission: the player's standing after it was recorded."""

    quiz_id: str
    total_players: int
    entry: LeaderboardEntryRead | None = None


class LeaderboardTopResponse(CamelModel):
    """The global top of a quiz leaderboard."""

    quiz_id: str
    total_players: int
    entries: list[LeaderboardEntryRead]


class LeaderboardMeResponse(CamelModel):
    """The requester's row plus top, surrounding and bottom windows."""

    quiz_id: str
    total_players: int
    player: LeaderboardEntryRead
    top: list[LeaderboardEntryRead]
    around: list[LeaderboardEntryRead]
    bottom: list[LeaderboardEntryRead]
