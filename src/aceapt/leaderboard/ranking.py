"""Coin ranking: computed at read time, never stored.

A user's rank is the number of users with a strictly greater balance, plus
one. Tied users share a rank and the next balance down skips ahead, so
balances [50, 50, 30] rank as 1, 1, 3. ``leaderboard.service.get_rank_for_coins``
evaluates the same rule in SQL for a single balance.
"""

from __future__ import annotations

from typing import Any


def assign_ranks(entries: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Sort entries by coins (desc, then id) and set each entry's ``rank``.

    Input: dicts with at least ``coins``; ``id`` is used as a stable tiebreak
    for display order only and never changes a rank.
    """
    ordered = sorted(entries, key=lambda e: (-e["coins"], e.get("id", 0)))
    rank = 0
    previous: int | None = None
    for position, entry in enumerate(ordered, start=1):
        if entry["coins"] != previous:
            rank = position
            previous = entry["coins"]
        entry["rank"] = rank
    return ordered
