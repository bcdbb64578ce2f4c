from dataclasses import replace

import config
import gamification_rules
import points_ledger
from errors import NotFoundError, ValidationError
from models import MoodEntry, WasteEvent

MOODS = ("happy", "neutral", "sad")
WASTE_TYPES = ("wet", "dry", "recycling", "hazardous")
DEFAULT_HISTORY_LIMIT = 50


def _require_user(repo, user_id):
    if repo.get_user(user_id) is None:
        raise NotFoundError(f"User '{user_id}' not found.")


def handle_gamified_action(user_id, action_key, reason=None, repo=None):
    """
    Grants the points an action is worth and returns the ledger result.
    """
    points = gamification_rules.get_points_for_action(action_key)
    category = gamification_rules.get_category_for_action(action_key)
    if category is None:
        raise ValidationError(f"Unknown action '{action_key}'.")

    new_total, new_level = points_ledger.apply_award(user_id, category, points, reason=reason or action_key, repo=repo)
    return {
        "points_awarded": points,
        "total_points": new_total,
        "level": new_level,
    }

# ==========================================
# MOOD TRACKER
# ==========================================
# An activity is stored only after its award succeeded.

def log_mood(user_id, mood, score, notes=None, repo=None):
    repo = repo or config.get_repository()

    if mood not in MOODS:
        raise ValidationError(f"Mood must be one of {', '.join(MOODS)}.")
    if isinstance(score, bool) or not isinstance(score, int) or not 1 <= score <= 10:
        raise ValidationError("Score must be an integer between 1 and 10.")

    entry = MoodEntry(user_id=user_id, mood=mood, score=score, notes=notes)
    result = handle_gamified_action(user_id, "MOOD_LOG", reason=f"mood:{entry.entry_id}", repo=repo)
    entry = repo.add_mood(replace(entry, points_awarded=result["points_awarded"]))
    return entry, result


def list_moods(user_id, limit=DEFAULT_HISTORY_LIMIT, repo=None):
    repo = repo or config.get_repository()
    _require_user(repo, user_id)
    return repo.list_moods(user_id, limit=limit)

# ==========================================
# SUSTAINABILITY TRACKER
# ==========================================

def log_waste_event(user_id, waste_type, location, weight=None, device_id=None, repo=None):
    repo = repo or config.get_repository()

    if waste_type not in WASTE_TYPES:
        raise ValidationError(f"Waste type must be one of {', '.join(WASTE_TYPES)}.")
    if not location or not location.strip():
        raise ValidationError("Location is required.")
    if weight is not None and weight < 0:
        raise ValidationError("Weight cannot be negative.")

    event = WasteEvent(
        user_id=user_id,
        waste_type=waste_type,
        location=location.strip(),
        weight=weight,
        device_id=device_id,
    )
    result = handle_gamified_action(user_id, "WASTE_SORT", reason=f"waste:{event.event_id}", repo=repo)
    event = repo.add_waste_event(replace(event, points_awarded=result["points_awarded"]))
    return event, result


def list_waste_events(user_id, limit=DEFAULT_HISTORY_LIMIT, repo=None):
    repo = repo or config.get_repository()
    _require_user(repo, user_id)
    return repo.list_waste_events(user_id, limit=limit)
