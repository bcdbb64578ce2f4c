"""
models.py

Immutable value objects passed between the API, the ledger and storage.

Firestore data model:
  users/{user_id}                  -> User
  users/{user_id}/awards/{id}      -> PointAward (append-only)
  users/{user_id}/moods/{id}       -> MoodEntry
  waste_events/{id}                -> WasteEvent
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import uuid

import gamification_rules


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def _iso(value):
    return value.isoformat() if hasattr(value, "isoformat") else value


def _empty_breakdown() -> Dict[str, int]:
    return {c: 0 for c in gamification_rules.CATEGORIES}


# Stands in for a missing timestamp so reads never depend on the wall clock
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _as_datetime(value) -> Optional[datetime]:
    """Firestore returns datetimes; profiles written by the SPA hold ISO strings."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return value


def _first(data: Dict[str, Any], *keys, default=None):
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return default


@dataclass(frozen=True)
class User:
    user_id: str
    email: str = ""
    display_name: str = ""
    total_points: int = 0
    last_active: datetime = field(default_factory=utc_now)
    joined_at: datetime = field(default_factory=utc_now)
    category_points: Dict[str, int] = field(default_factory=_empty_breakdown)
    current_streak: int = 0
    longest_streak: int = 0
    # achievement id -> unlocked at
    achievements: Dict[str, datetime] = field(default_factory=dict)

    @property
    def level(self) -> int:
        return gamification_rules.compute_level(self.total_points)

    def with_award(self, award: "PointAward") -> "User":
        """Return a copy of this user with the award added."""
        breakdown = dict(self.category_points)
        breakdown[award.category] = breakdown.get(award.category, 0) + award.magnitude
        streak = gamification_rules.next_streak(
            self.current_streak, self.last_active.date(), award.timestamp.date()
        )
        return replace(
            self,
            total_points=self.total_points + award.magnitude,
            last_active=award.timestamp,
            category_points=breakdown,
            current_streak=streak,
            longest_streak=max(self.longest_streak, streak),
        )

    def with_achievements(self, achievement_ids, unlocked_at: datetime) -> "User":
        unlocked = dict(self.achievements)
        for achievement_id in achievement_ids:
            unlocked.setdefault(achievement_id, unlocked_at)
        return replace(self, achievements=unlocked)

    def to_document(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "display_name": self.display_name,
            "points": self.total_points,
            "level": self.level,
            "last_active": self.last_active,
            "joined_at": self.joined_at,
            "category_points": dict(self.category_points),
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "achievements": dict(self.achievements),
        }

    @classmethod
    def from_document(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> "User":
        """
        Builds a User from a Firestore document body.

        `doc_id` is the document id and wins over any id stored in the body;
        profiles created by the SPA carry `uid` and camelCase fields instead.
        """
        breakdown = _empty_breakdown()
        breakdown.update(_first(data, "category_points", "categoriesProgress", default={}))

        joined_at = _as_datetime(_first(data, "joined_at", "joinedAt")) or EPOCH
        last_active = _as_datetime(_first(data, "last_active", "lastActive")) or joined_at

        achievements = {
            k: _as_datetime(v) or EPOCH for k, v in (data.get("achievements") or {}).items()
        }
        return cls(
            user_id=doc_id or _first(data, "user_id", "uid", default=""),
            email=data.get("email", ""),
            display_name=_first(data, "display_name", "displayName", default=""),
            total_points=int(_first(data, "points", "totalPoints", default=0)),
            last_active=last_active,
            joined_at=joined_at,
            category_points=breakdown,
            current_streak=int(_first(data, "current_streak", "currentStreak", default=0)),
            longest_streak=int(_first(data, "longest_streak", "longestStreak", default=0)),
            achievements=achievements,
        )

    def to_dict(self) -> Dict[str, Any]:
        d = self.to_document()
        d["last_active"] = _iso(self.last_active)
        d["joined_at"] = _iso(self.joined_at)
        d["achievements"] = {k: _iso(v) for k, v in self.achievements.items()}
        return d


@dataclass(frozen=True)
class PointAward:
    user_id: str
    category: str
    magnitude: int
    timestamp: datetime = field(default_factory=utc_now)
    reason: Optional[str] = None
    award_id: str = field(default_factory=new_id)

    def to_document(self) -> Dict[str, Any]:
        return {
            "award_id": self.award_id,
            "user_id": self.user_id,
            "category": self.category,
            "magnitude": self.magnitude,
            "reason": self.reason,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "PointAward":
        return cls(
            award_id=data["award_id"],
            user_id=data["user_id"],
            category=data["category"],
            magnitude=int(data["magnitude"]),
            reason=data.get("reason"),
            timestamp=data["timestamp"],
        )

    def to_dict(self) -> Dict[str, Any]:
        d = self.to_document()
        d["timestamp"] = _iso(self.timestamp)
        return d


@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: str
    total_points: int
    rank: int
    display_name: str = ""
    level: int = 1
    rank_title: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "user_id": self.user_id,
            "display_name": self.display_name,
            "points": self.total_points,
            "level": self.level,
            "rank_title": self.rank_title,
        }


@dataclass(frozen=True)
class MoodEntry:
    user_id: str
    mood: str
    score: int
    notes: Optional[str] = None
    points_awarded: int = 0
    timestamp: datetime = field(default_factory=utc_now)
    entry_id: str = field(default_factory=new_id)

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.entry_id,
            "user_id": self.user_id,
            "mood": self.mood,
            "score": self.score,
            "notes": self.notes,
            "points_awarded": self.points_awarded,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "MoodEntry":
        return cls(
            entry_id=data["id"],
            user_id=data["user_id"],
            mood=data["mood"],
            score=int(data["score"]),
            notes=data.get("notes"),
            points_awarded=int(data.get("points_awarded", 0)),
            timestamp=data["timestamp"],
        )

    def to_dict(self) -> Dict[str, Any]:
        d = self.to_document()
        d["timestamp"] = _iso(self.timestamp)
        return d


@dataclass(frozen=True)
class WasteEvent:
    user_id: str
    waste_type: str
    location: str
    weight: Optional[float] = None
    device_id: Optional[str] = None
    points_awarded: int = 0
    verified: bool = False
    timestamp: datetime = field(default_factory=utc_now)
    event_id: str = field(default_factory=new_id)

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.event_id,
            "user_id": self.user_id,
            "type": self.waste_type,
            "location": self.location,
            "weight": self.weight,
            "device_id": self.device_id,
            "points_awarded": self.points_awarded,
            "verified": self.verified,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "WasteEvent":
        return cls(
            event_id=data["id"],
            user_id=data["user_id"],
            waste_type=data["type"],
            location=data["location"],
            weight=data.get("weight"),
            device_id=data.get("device_id"),
            points_awarded=int(data.get("points_awarded", 0)),
            verified=bool(data.get("verified", False)),
            timestamp=data["timestamp"],
        )

    def to_dict(self) -> Dict[str, Any]:
        d = self.to_document()
        d["timestamp"] = _iso(self.timestamp)
        return d
