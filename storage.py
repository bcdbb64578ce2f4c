"""
storage.py

Repository layer between the ledger and the document store.

Two implementations share one interface:
- FirestoreRepository: production, backed by firebase_admin's Firestore client.
- InMemoryRepository: development and tests, plain dicts guarded by locks.

Every read-modify-write of a user's points happens inside a single atomic
unit (a Firestore transaction, or the user's lock in memory), together with
the append of the award document.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import defaultdict
import functools
import threading
from typing import Callable, Dict, List, Optional

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from errors import NotFoundError, StorageUnavailableError
from models import MoodEntry, PointAward, User, WasteEvent

USERS_COL = "users"
AWARDS_COL = "awards"
MOODS_COL = "moods"
WASTE_COL = "waste_events"


class BaseRepository(ABC):
    """Document-store interface consumed by the ledger and the leaderboard."""

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    def create_user_if_absent(self, user: User) -> User:
        """Store the user unless one with the same id exists. Returns the stored user."""

    @abstractmethod
    def list_users(self) -> List[User]:
        """Snapshot of every user at call time."""

    @abstractmethod
    def apply_award(self, award: PointAward, update_fn: Callable[[User, PointAward], User]) -> User:
        """
        Atomically read the user, compute update_fn(user, award), write the
        result and append the award. Raises NotFoundError for unknown users.
        """

    @abstractmethod
    def list_awards(self, user_id: str, limit: Optional[int] = None) -> List[PointAward]:
        ...

    @abstractmethod
    def add_mood(self, entry: MoodEntry) -> MoodEntry:
        ...

    @abstractmethod
    def list_moods(self, user_id: str, limit: Optional[int] = None) -> List[MoodEntry]:
        ...

    @abstractmethod
    def add_waste_event(self, event: WasteEvent) -> WasteEvent:
        ...

    @abstractmethod
    def list_waste_events(self, user_id: str, limit: Optional[int] = None) -> List[WasteEvent]:
        ...


def _newest_first(rows, limit):
    # reversed() keeps insertion order newest-first among equal timestamps
    rows = sorted(reversed(rows), key=lambda r: r.timestamp, reverse=True)
    return rows[:limit] if limit else rows


# ==========================================
# IN-MEMORY (DEVELOPMENT / TESTS)
# ==========================================

class InMemoryRepository(BaseRepository):

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._awards: Dict[str, List[PointAward]] = defaultdict(list)
        self._moods: Dict[str, List[MoodEntry]] = defaultdict(list)
        self._waste: List[WasteEvent] = []
        self._lock = threading.Lock()
        self._user_locks: Dict[str, threading.Lock] = {}

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._lock:
            return self._user_locks.setdefault(user_id, threading.Lock())

    def get_user(self, user_id):
        with self._lock:
            return self._users.get(user_id)

    def create_user_if_absent(self, user):
        with self._lock:
            return self._users.setdefault(user.user_id, user)

    def list_users(self):
        with self._lock:
            return list(self._users.values())

    def apply_award(self, award, update_fn):
        with self._lock_for(award.user_id):
            current = self.get_user(award.user_id)
            if current is None:
                raise NotFoundError(f"User '{award.user_id}' not found.")
            updated = update_fn(current, award)
            with self._lock:
                self._users[updated.user_id] = updated
                self._awards[award.user_id].append(award)
            return updated

    def list_awards(self, user_id, limit=None):
        with self._lock:
            rows = list(self._awards.get(user_id, []))
        return _newest_first(rows, limit)

    def add_mood(self, entry):
        with self._lock:
            self._moods[entry.user_id].append(entry)
        return entry

    def list_moods(self, user_id, limit=None):
        with self._lock:
            rows = list(self._moods.get(user_id, []))
        return _newest_first(rows, limit)

    def add_waste_event(self, event):
        with self._lock:
            self._waste.append(event)
        return event

    def list_waste_events(self, user_id, limit=None):
        with self._lock:
            rows = [e for e in self._waste if e.user_id == user_id]
        return _newest_first(rows, limit)


# ==========================================
# FIRESTORE (PRODUCTION)
# ==========================================

def _storage_errors(func):
    """Translate Google API failures into StorageUnavailableError."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except google_exceptions.GoogleAPIError as e:
            print(f"[Storage] {func.__name__} failed: {e}")
            raise StorageUnavailableError("Document store unavailable.", {"operation": func.__name__}) from e
    return wrapper


class FirestoreRepository(BaseRepository):

    def __init__(self, db):
        self.db = db

    def _user_ref(self, user_id):
        return self.db.collection(USERS_COL).document(user_id)

    @_storage_errors
    def get_user(self, user_id):
        doc = self._user_ref(user_id).get()
        return User.from_document(doc.to_dict(), doc.id) if doc.exists else None

    @_storage_errors
    def create_user_if_absent(self, user):
        user_ref = self._user_ref(user.user_id)

        @firestore.transactional
        def _create(transaction):
            snapshot = user_ref.get(transaction=transaction)
            if snapshot.exists:
                return User.from_document(snapshot.to_dict(), snapshot.id)
            transaction.set(user_ref, user.to_document())
            return user

        return _create(self.db.transaction())

    @_storage_errors
    def list_users(self):
        return [User.from_document(doc.to_dict(), doc.id) for doc in self.db.collection(USERS_COL).stream()]

    @_storage_errors
    def apply_award(self, award, update_fn):
        user_ref = self._user_ref(award.user_id)
        award_ref = user_ref.collection(AWARDS_COL).document(award.award_id)

        @firestore.transactional
        def _apply(transaction):
            snapshot = user_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise NotFoundError(f"User '{award.user_id}' not found.")
            updated = update_fn(User.from_document(snapshot.to_dict(), snapshot.id), award)
            transaction.update(user_ref, {
                "points": updated.total_points,
                "level": updated.level,
                "last_active": updated.last_active,
                "category_points": dict(updated.category_points),
                "current_streak": updated.current_streak,
                "longest_streak": updated.longest_streak,
                "achievements": dict(updated.achievements),
            })
            transaction.set(award_ref, award.to_document())
            return updated

        return _apply(self.db.transaction())

    @_storage_errors
    def list_awards(self, user_id, limit=None):
        q = (self._user_ref(user_id).collection(AWARDS_COL)
               .order_by("timestamp", direction=firestore.Query.DESCENDING))
        if limit:
            q = q.limit(int(limit))
        return [PointAward.from_document(doc.to_dict()) for doc in q.stream()]

    @_storage_errors
    def add_mood(self, entry):
        self._user_ref(entry.user_id).collection(MOODS_COL).document(entry.entry_id).set(entry.to_document())
        return entry

    @_storage_errors
    def list_moods(self, user_id, limit=None):
        q = (self._user_ref(user_id).collection(MOODS_COL)
               .order_by("timestamp", direction=firestore.Query.DESCENDING))
        if limit:
            q = q.limit(int(limit))
        return [MoodEntry.from_document(doc.to_dict()) for doc in q.stream()]

    @_storage_errors
    def add_waste_event(self, event):
        self.db.collection(WASTE_COL).document(event.event_id).set(event.to_document())
        return event

    @_storage_errors
    def list_waste_events(self, user_id, limit=None):
        q = (self.db.collection(WASTE_COL)
               .where("user_id", "==", user_id)
               .order_by("timestamp", direction=firestore.Query.DESCENDING))
        if limit:
            q = q.limit(int(limit))
        return [WasteEvent.from_document(doc.to_dict()) for doc in q.stream()]
