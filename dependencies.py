"""
Dependency container for the EcoPack backend.
Centralizes configuration read from the environment and builds the shared
collaborators (model client, profile store) lazily, on first use.
"""

import logging
import os
import threading
from dotenv import load_dotenv

from gemini_service import DEFAULT_MODEL, GeminiModelClient
from profile_store import InMemoryProfileStore, ProfileStore, RedisProfileStore

load_dotenv()

# --- Environment variables ---
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", DEFAULT_MODEL)
MODEL_MAX_ATTEMPTS = int(os.environ.get("MODEL_MAX_ATTEMPTS", "3"))
MODEL_BASE_DELAY_MS = int(os.environ.get("MODEL_BASE_DELAY_MS", "1000"))
MODEL_REQUEST_BUDGET_SECONDS = float(os.environ.get("MODEL_REQUEST_BUDGET_SECONDS", "30"))
REDIS_URL = os.environ.get("REDIS_URL")
PROFILE_LOCK_TIMEOUT_SECONDS = float(os.environ.get("PROFILE_LOCK_TIMEOUT_SECONDS", "10"))
RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")

_lock = threading.Lock()
_model_client = None
_profile_store = None


def get_model_client() -> GeminiModelClient:
    global _model_client
    with _lock:
        if _model_client is None:
            # Per-call HTTP timeout stays inside the request budget
            _model_client = GeminiModelClient(GEMINI_API_KEY, model=GEMINI_MODEL,
                                              timeout_ms=int(MODEL_REQUEST_BUDGET_SECONDS * 1000))
        return _model_client


def get_profile_store() -> ProfileStore:
    global _profile_store
    with _lock:
        if _profile_store is None:
            if REDIS_URL:
                _profile_store = RedisProfileStore.from_url(REDIS_URL, lock_timeout=PROFILE_LOCK_TIMEOUT_SECONDS)
                logging.info("Profile store: Redis")
            else:
                _profile_store = InMemoryProfileStore()
                logging.info("Profile store: in-memory (REDIS_URL not set)")
        return _profile_store
