# src/quizrank/ranking/engine.py

"""
Shared ("competition") ranking of leaderboard entries.

Entries are ordered by score (highest first) and then by submission time
(earliest first). Tied scores share a rank and the next distinct score skips
the tied positions, the same numbers SQL's ``RANK()`` window function gives:

    scores 5, 5, 4, 3, 3, 1  ->  ranks 1, 1, 3, 4, 4, 6

Ranks are never stored. They are recomputed from the full entry list on every
read, so concurrent inserts cannot leave a stale rank behind.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol, Sequence


class Rankable(Protocol):
    """The attributes of a leaderboard entry the engine reads."""

    player_key: str
    score: int
    created_at: datetime


@dataclass(frozen=True)
class RankedEntry:
    """A leaderboard entry with its computed rank.

    ``is_me`` is filled in by the view assembler for the requesting player.
    """

    entry: Rankable
    rank: int
    is_me: bool = False

    @property
    def player_key(self) -> str:
        return self.entry.player_key

    @property
    def score(self) -> int:
        return self.entry.score


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken to be UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def ranking_order(entry: Rankable) -> tuple[int, datetime]:
    """Sort key: higher score first, then earlier submission."""
    return (-entry.score, _as_utc(entry.created_at))


def rank(entries: Sequence[Rankable]) -> list[RankedEntry]:
    """
    Assign shared ranks to every entry of one quiz.

    The sort is stable, so entries with identical score and timestamp keep
    the order they were given in.
    """
    ordered = sorted(entries, key=ranking_order)

    ranked: list[RankedEntry] = []
    for position, entry in enumerate(ordered, start=1):
        if ranked and entry.score == ranked[-1].score:
            current_rank = ranked[-1].rank
        else:
            current_rank = position
        ranked.append(RankedEntry(entry=entry, rank=current_rank))

    return ranked
