import os
import json
import firebase_admin
from firebase_admin import credentials, firestore
from dotenv import load_dotenv

from storage import FirestoreRepository, InMemoryRepository

# Load environment variables from .env file
load_dotenv()

# ==========================================
# PART 1: ENVIRONMENT & PATH CONFIGURATION
# ==========================================

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))

# "development" runs against the in-memory store, anything else uses Firestore
APP_ENV = os.getenv("APP_ENV", "development").strip().lower()

KEY_FILENAME = "serviceAccountKey.json"
DEFAULT_CRED_PATH = os.path.join(PROJECT_ROOT, KEY_FILENAME)

# Priority: ENV variable > Default path
FIREBASE_CRED_PATH = os.getenv("FIREBASE_CREDENTIALS_PATH", DEFAULT_CRED_PATH)

LEADERBOARD_LIMIT = int(os.getenv("LEADERBOARD_LIMIT", "10"))

API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))

# Comma separated list of origins allowed to call the API (the SPA dev server by default)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]


def is_development():
    return APP_ENV == "development"

# ==========================================
# PART 2: DATABASE INITIALIZATION (SINGLETON)
# ==========================================

# Global variables to hold the DB and repository instances
_DB_CLIENT = None
_REPOSITORY = None

def get_db():
    """Returns singleton Firestore client. Initializes Firebase if needed."""
    global _DB_CLIENT

    # Return existing instance if available
    if _DB_CLIENT is not None:
        return _DB_CLIENT

    # Check if Firebase is already initialized internally
    if not firebase_admin._apps:
        if not os.path.exists(FIREBASE_CRED_PATH):
            raise FileNotFoundError(f"Firebase key not found at {FIREBASE_CRED_PATH}")

        with open(FIREBASE_CRED_PATH, "r") as f:
            project_id = json.load(f).get("project_id")

        cred = credentials.Certificate(FIREBASE_CRED_PATH)
        options = {"projectId": project_id} if project_id else None
        firebase_admin.initialize_app(cred, options=options)
        print(f"[System] Firebase initialized using {FIREBASE_CRED_PATH}")

    _DB_CLIENT = firestore.client()
    return _DB_CLIENT


def get_repository():
    """Returns the singleton repository for the configured environment."""
    global _REPOSITORY

    if _REPOSITORY is not None:
        return _REPOSITORY

    if is_development():
        print("[System] APP_ENV=development -> using in-memory document store")
        _REPOSITORY = InMemoryRepository()
    else:
        _REPOSITORY = FirestoreRepository(get_db())
    return _REPOSITORY


def set_repository(repository):
    """Swap the active repository (tests, scripts). Pass None to reset."""
    global _REPOSITORY
    _REPOSITORY = repository
