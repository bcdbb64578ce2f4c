"""
GAMIFICATION RULES MODULE
-------------------------
This file defines the points system and the level ladder.
It serves as the "Rule Book" for the ledger and the leaderboard.

KEY RULES:
1. Every activity is worth a fixed number of points, whatever its weight or intensity.
2. Level = floor(total points / 250) + 1. Level is never stored on its own.
3. Total Score NEVER resets.
4. The daily streak grows by one for each consecutive UTC day with an award.
"""

# ==========================================
# 1. CATEGORIES & LEVELS
# ==========================================

CATEGORIES = ("mood", "safety", "sustainability", "social")

POINTS_PER_LEVEL = 250

# ==========================================
# 2. POINTS SYSTEM (The "Price List")
# ==========================================
# Simple Logic: Action Performed -> Points Awarded immediately.

ACTIONS = {
    "MOOD_LOG": {
        "points": 5,
        "category": "mood",
        "description": "Logging a daily mood check-in"
    },
    "WASTE_SORT": {
        "points": 5,
        "category": "sustainability",
        "description": "Sorting waste into the right bin"
    }
}

# ==========================================
# 3. TIER TITLES
# ==========================================

TIERS = [
    (100, "Beginner"),
    (500, "Advanced"),
    (1000, "Pro"),
]
TOP_TIER = "Master"

# ==========================================
# 4. ACHIEVEMENTS
# ==========================================
# Unlocked once, never revoked. Badges only: they add no points, so a
# user's total always equals the sum of their awards.
#
# Requirement types:
#   "category_points" -> points earned in the achievement's category
#   "total_points"    -> total points across all categories
#   "streak"          -> consecutive days with at least one award

ACHIEVEMENTS = [
    {
        "id": "mood-master",
        "title": "Mood Master",
        "description": "Log your mood 7 times.",
        "icon": "😊",
        "category": "mood",
        "requirements": {"type": "category_points", "target": 35}
    },
    {
        "id": "waste-warrior",
        "title": "Waste Warrior",
        "description": "Use smart bins 25 times.",
        "icon": "♻️",
        "category": "sustainability",
        "requirements": {"type": "category_points", "target": 125}
    },
    {
        "id": "streak-keeper",
        "title": "Streak Keeper",
        "description": "Stay active 7 days in a row.",
        "icon": "🔥",
        "category": "mood",
        "requirements": {"type": "streak", "target": 7}
    },
    {
        "id": "wellness-champion",
        "title": "Wellness Champion",
        "description": "Earn 150 points from wellness activities.",
        "icon": "🏆",
        "category": "social",
        "requirements": {"type": "total_points", "target": 150}
    }
]

# ==========================================
# 5. HELPER FUNCTIONS
# ==========================================

def get_points_for_action(action_key):
    """
    Returns the points for a specific action.
    """
    if action_key in ACTIONS:
        return ACTIONS[action_key]["points"]
    return 0


def get_category_for_action(action_key):
    if action_key in ACTIONS:
        return ACTIONS[action_key]["category"]
    return None


def is_valid_category(category):
    return category in CATEGORIES


def compute_level(total_points: int) -> int:
    return total_points // POINTS_PER_LEVEL + 1


def points_to_next_level(total_points: int) -> int:
    """Points still missing before the next level is reached."""
    next_threshold = compute_level(total_points) * POINTS_PER_LEVEL
    return next_threshold - total_points


def level_progress_percent(total_points: int) -> float:
    """How far (0-100) the user is through the current level."""
    return round((total_points % POINTS_PER_LEVEL) / POINTS_PER_LEVEL * 100, 2)


def get_user_rank(current_score):
    """
    Simple rank calculation based on total score.
    """
    for threshold, title in TIERS:
        if current_score < threshold:
            return title
    return TOP_TIER


def next_streak(current_streak, last_active_day, activity_day):
    """
    Daily streak after an activity on `activity_day` (a date).
    Same day keeps the streak, the next day extends it, any gap restarts it.
    """
    if current_streak <= 0:
        return 1
    gap = (activity_day - last_active_day).days
    if gap <= 0:
        return current_streak
    if gap == 1:
        return current_streak + 1
    return 1


def achievement_progress(user, achievement):
    """Current value of the metric the achievement's requirement measures."""
    requirement = achievement["requirements"]["type"]
    if requirement == "category_points":
        return user.category_points.get(achievement["category"], 0)
    if requirement == "total_points":
        return user.total_points
    if requirement == "streak":
        return user.current_streak
    return 0


def check_achievements(user):
    """
    Returns the ids of achievements the user now meets but has not unlocked yet.
    """
    newly_unlocked = []
    for achievement in ACHIEVEMENTS:
        if achievement["id"] in user.achievements:
            continue
        if achievement_progress(user, achievement) >= achievement["requirements"]["target"]:
            newly_unlocked.append(achievement["id"])
    return newly_unlocked
