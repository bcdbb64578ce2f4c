"""
POINTS LEDGER
-------------
Accumulates point awards per user and derives the level.

Every award is validated here before storage is touched, so a rejected
award never changes state. The total update and the award append are one
atomic unit inside the repository.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import config
import gamification_rules
from errors import InvalidAwardError, NotFoundError
from models import PointAward, User, utc_now


def _validate_award(category, magnitude):
    # bool is an int subclass, reject it explicitly
    if isinstance(magnitude, bool) or not isinstance(magnitude, int):
        raise InvalidAwardError(
            "Magnitude must be a positive integer.",
            {"magnitude": repr(magnitude)},
        )
    if magnitude <= 0:
        raise InvalidAwardError(
            "Magnitude must be a positive integer.",
            {"magnitude": magnitude},
        )
    if not gamification_rules.is_valid_category(category):
        raise InvalidAwardError(
            f"Unknown category '{category}'.",
            {"allowed": list(gamification_rules.CATEGORIES)},
        )


def _add_award(user: User, award: PointAward) -> User:
    updated = user.with_award(award)
    unlocked = gamification_rules.check_achievements(updated)
    if unlocked:
        print(f"[Ledger] {user.user_id} unlocked: {', '.join(unlocked)}")
        updated = updated.with_achievements(unlocked, award.timestamp)
    return updated


def apply_award(user_id: str, category: str, magnitude: int, reason: Optional[str] = None,
                repo=None) -> Tuple[int, int]:
    """
    Adds `magnitude` points in `category` to the user.

    Returns:
        (new_total, new_level)

    Raises:
        InvalidAwardError: magnitude is not a positive integer or category is unknown.
        NotFoundError: the user does not exist.
        StorageUnavailableError: the document store failed.
    """
    _validate_award(category, magnitude)
    repo = repo or config.get_repository()

    award = PointAward(
        user_id=user_id,
        category=category,
        magnitude=magnitude,
        reason=reason,
        timestamp=utc_now(),
    )
    updated = repo.apply_award(award, _add_award)

    print(f"[Ledger] +{magnitude} {category} -> {user_id}: total={updated.total_points} level={updated.level}")
    return updated.total_points, updated.level


def get_profile(user_id: str, repo=None) -> Dict[str, Any]:
    """Points summary for one user: total, level, progress and category breakdown."""
    repo = repo or config.get_repository()
    user = repo.get_user(user_id)
    if user is None:
        raise NotFoundError(f"User '{user_id}' not found.")

    points = user.total_points
    return {
        "user_id": user.user_id,
        "total_points": points,
        "level": user.level,
        "rank_title": gamification_rules.get_user_rank(points),
        "points_to_next_level": gamification_rules.points_to_next_level(points),
        "level_progress": gamification_rules.level_progress_percent(points),
        "category_points": dict(user.category_points),
        "current_streak": user.current_streak,
        "longest_streak": user.longest_streak,
        "achievements": sorted(user.achievements),
        "last_active": user.last_active.isoformat(),
    }


def get_award_history(user_id: str, limit: Optional[int] = None, repo=None) -> List[PointAward]:
    repo = repo or config.get_repository()
    if repo.get_user(user_id) is None:
        raise NotFoundError(f"User '{user_id}' not found.")
    return repo.list_awards(user_id, limit=limit)


def get_achievements(user_id: str, repo=None) -> List[Dict[str, Any]]:
    """Every achievement in the rule book with the user's progress towards it."""
    repo = repo or config.get_repository()
    user = repo.get_user(user_id)
    if user is None:
        raise NotFoundError(f"User '{user_id}' not found.")

    rows = []
    for achievement in gamification_rules.ACHIEVEMENTS:
        unlocked_at = user.achievements.get(achievement["id"])
        target = achievement["requirements"]["target"]
        rows.append({
            "id": achievement["id"],
            "title": achievement["title"],
            "description": achievement["description"],
            "icon": achievement["icon"],
            "category": achievement["category"],
            "progress": min(gamification_rules.achievement_progress(user, achievement), target),
            "target": target,
            "unlocked": unlocked_at is not None,
            "unlocked_at": unlocked_at.isoformat() if unlocked_at else None,
        })
    return rows
