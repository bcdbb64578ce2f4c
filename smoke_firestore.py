"""
Manual smoke run against a REAL Firestore project.

Needs FIREBASE_CREDENTIALS_PATH (or serviceAccountKey.json next to this file).
Writes to the live `users` collection, so point it at a test project.

    python smoke_firestore.py
"""

import uuid

import auth_service
import config
import leaderboard
import points_ledger
from errors import InvalidAwardError
from storage import FirestoreRepository

# ==========================================
# TEST CONFIGURATION
# ==========================================
test_user_id = f"smoke-{uuid.uuid4().hex[:8]}"
test_email = "smoke@campus.edu"

# ==========================================
# HELPER FUNCTIONS
# ==========================================
def print_header(text):
    print("\n" + "="*60)
    print(f"   {text}")
    print("="*60)


def main():
    repo = FirestoreRepository(config.get_db())

    print_header("STARTING SYSTEM TEST: LEDGER & LEADERBOARD")

    # ---------------------------------------------------------
    # SECTION 1: PROFILE CREATION
    # ---------------------------------------------------------
    print("\n--- 1. Creating profile ---")
    user = auth_service.ensure_user(test_user_id, test_email, "Smoke Test", repo=repo)
    print(f"[Profile] {user.user_id} points={user.total_points} level={user.level}")

    # ---------------------------------------------------------
    # SECTION 2: VALIDATION (NEGATIVE TESTING)
    # ---------------------------------------------------------
    print("\n--- 2. Invalid award (Expect Error) ---")
    try:
        points_ledger.apply_award(test_user_id, "mood", -5, repo=repo)
        print("[Test: Negative Magnitude] -> FAILED! Award accepted.")
    except InvalidAwardError as e:
        print(f"[Test: Negative Magnitude] -> BLOCKED SUCCESSFULLY. Msg: {e.message}")

    # ---------------------------------------------------------
    # SECTION 3: SCORING
    # ---------------------------------------------------------
    print("\n--- 3. Applying awards ---")
    total, level = points_ledger.apply_award(test_user_id, "sustainability", 240, repo=repo)
    print(f"[Action] +240 -> total={total} level={level}")
    total, level = points_ledger.apply_award(test_user_id, "mood", 15, repo=repo)
    print(f"[Action] +15 -> total={total} level={level} (expected 255 / 2)")

    # ---------------------------------------------------------
    # SECTION 4: LEADERBOARD
    # ---------------------------------------------------------
    print("\n--- 4. Leaderboard ---")
    print(f"{'RANK':<6} {'USER':<24} {'POINTS':<6}")
    print("-" * 40)
    for entry in leaderboard.get_leaderboard(limit=5, repo=repo):
        print(f"{entry.rank:<6} {entry.user_id:<24} {entry.total_points:<6}")

    print("\n" + "="*50)
    print("      TEST COMPLETED")
    print("="*50)


if __name__ == "__main__":
    main()
