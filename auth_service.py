import re

import config
from errors import NotFoundError, ValidationError
from models import User

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'

# ==========================================
# USER PROFILE FUNCTIONS
# ==========================================
# Authentication itself is mocked: the caller hands us a verified user id.

def ensure_user(user_id, email, display_name="", repo=None):
    """
    Returns the user's profile, creating it on first authentication.
    An existing profile is returned untouched.
    """
    user_id = (user_id or "").strip()

    # Validation: Ensure fields are not empty
    if not user_id or not email:
        raise ValidationError("User id and email are required.")

    # Check for spaces and path separators in user id (it becomes a document path)
    if " " in user_id or "/" in user_id:
        raise ValidationError("User id cannot contain spaces or '/'.", {"user_id": user_id})

    if not re.match(EMAIL_PATTERN, email):
        raise ValidationError("Please enter a valid email address (e.g., user@example.com).")

    repo = repo or config.get_repository()
    new_user = User(
        user_id=user_id,
        email=email,
        display_name=display_name or email.split("@")[0],
    )
    stored = repo.create_user_if_absent(new_user)
    if stored is new_user:
        print(f"[Auth] Created profile for {user_id}")
    return stored


def get_user_details(user_id, repo=None):
    """
    Fetches a user profile.
    Used for refreshing the dashboard after an action.
    """
    repo = repo or config.get_repository()
    user = repo.get_user(user_id)
    if user is None:
        raise NotFoundError(f"User '{user_id}' not found.")
    return user
