"""
LEADERBOARD AGGREGATOR
----------------------
Ranks users by accumulated points. Entries are recomputed on every read
and never stored.

Ordering: points descending, then earliest last-active first, then user id.
"""

from __future__ import annotations

from itertools import islice
from typing import Iterable, Iterator, List, Optional

import config
import gamification_rules
from errors import ValidationError
from models import LeaderboardEntry, User


def _sort_key(user: User):
    return (-user.total_points, user.last_active, user.user_id)


def rank(users: Iterable[User]) -> Iterator[LeaderboardEntry]:
    """
    Yields one LeaderboardEntry per user, rank 1..N.

    `users` is consumed once as a snapshot. The returned generator can only
    be iterated once.
    """
    ordered = sorted(users, key=_sort_key)
    for position, user in enumerate(ordered, start=1):
        yield LeaderboardEntry(
            user_id=user.user_id,
            total_points=user.total_points,
            rank=position,
            display_name=user.display_name,
            level=user.level,
            rank_title=gamification_rules.get_user_rank(user.total_points),
        )


def get_leaderboard(limit: Optional[int] = None, repo=None) -> List[LeaderboardEntry]:
    """Top `limit` entries from a snapshot of all users."""
    if limit is None:
        limit = config.LEADERBOARD_LIMIT
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise ValidationError("Limit must be a positive integer.", {"limit": repr(limit)})

    repo = repo or config.get_repository()
    snapshot = repo.list_users()
    return list(islice(rank(snapshot), limit))
