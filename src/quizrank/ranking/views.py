# src/quizrank/ranking/views.py

"""Bounded leaderboard views derived from one ranking pass."""

from dataclasses import dataclass, replace
from typing import Sequence

from quizrank.exceptions import PlayerNotFoundError
from quizrank.ranking.engine import RankedEntry


@dataclass(frozen=True)
class PlayerView:
    """Everything the "me" screen shows, cut from the same ranked list."""

    player: RankedEntry
    top: list[RankedEntry]
    around: list[RankedEntry]
    bottom: list[RankedEntry]


def mark_requester(
    ranked: Sequence[RankedEntry], player_key: str | None
) -> list[RankedEntry]:
    """Flag the requester's row. Anonymous requests flag nothing."""
    return [
        replace(item, is_me=player_key is not None and item.player_key == player_key)
        for item in ranked
    ]


def top(ranked: Sequence[RankedEntry], n: int = 10) -> list[RankedEntry]:
    """The first ``n`` rows in rank order.

    The cut is by row count, not by distinct rank, so a tie straddling the
    boundary is split.
    """
    return list(ranked[: max(n, 0)])


def bottom(ranked: Sequence[RankedEntry], n: int = 5) -> list[RankedEntry]:
    """The last ``n`` rows, returned in ascending rank order."""
    start = max(len(ranked) - max(n, 0), 0)
    return list(ranked[start:])


def around(
    ranked: Sequence[RankedEntry], target_rank: int, radius: int = 2
) -> list[RankedEntry]:
    """Every row whose rank is within ``radius`` of ``target_rank``.

    Because tied players share a rank the window can hold more or fewer
    than ``2 * radius + 1`` rows.
    """
    lower = max(1, target_rank - radius)
    upper = target_rank + radius
    return [item for item in ranked if lower <= item.rank <= upper]


def find_player(
    ranked: Sequence[RankedEntry], quiz_id: str, player_key: str
) -> RankedEntry:
    """
    Return the requester's ranked row.

    Raises:
        PlayerNotFoundError: If the player has no entry for this quiz.
    """
    for item in ranked:
        if item.player_key == player_key:
            return item
    raise PlayerNotFoundError(quiz_id, player_key)


def player_view(
    ranked: Sequence[RankedEntry],
    quiz_id: str,
    player_key: str,
    top_n: int = 5,
    radius: int = 2,
    bottom_n: int = 5,
) -> PlayerView:
    """
    Build the "me" view. Fails as a whole when the player has no entry
    rather than returning empty windows.
    """
    marked = mark_requester(ranked, player_key)
    player = find_player(marked, quiz_id, player_key)
    return PlayerView(
        player=player,
        top=top(marked, top_n),
        around=around(marked, player.rank, radius),
        bottom=bottom(marked, bottom_n),
    )
