"""Process-wide Firestore client bootstrap (REST-based, no firebase-admin).

Initialized at startup using either FIREBASE_SERVICE_ACCOUNT_KEY (JSON string)
or FIREBASE_SERVICE_ACCOUNT_PATH (file path). FIREBASE_PROJECT_ID overrides the
project in the key; with a project id but no key the client runs without
credentials (useful against the emulator via FIRESTORE_BASE_URL).
"""

import json
from pathlib import Path

from firebase_rest.core.config import get_settings
from firebase_rest.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    _get_credentials,
)
from firebase_rest.infrastructure.firebase.options import SerializerOptions
from firebase_rest.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_firestore_client: FirestoreRESTClient | None = None


def _load_key_dict() -> dict | None:
    """Return service account dict from env key or file path."""
    settings = get_settings()
    key_json = (
        settings.firebase_service_account_key.get_secret_value()
        if settings.firebase_service_account_key
        else None
    )
    if key_json:
        try:
            return json.loads(key_json)
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e
    path = settings.firebase_service_account_path
    if path:
        resolved = Path(path).expanduser().resolve()
        if not resolved.is_file():
            logger.warning(
                "FIREBASE_SERVICE_ACCOUNT_PATH set but file not found: %s (resolved: %s)",
                path,
                resolved,
            )
            return None
        with open(resolved, encoding="utf-8") as f:
            return json.load(f)
    return None


def init_firebase() -> bool:
    """Initialize the Firestore client (REST API + google-auth).

    Safe to call when nothing is configured (no-op). Idempotent if already
    initialized. On invalid credentials or any initialization error, logs the
    exception and returns False.

    Returns:
        True if the client was initialized, False if disabled or on error.
    """
    global _firestore_client
    if _firestore_client is not None:
        return True
    try:
        settings = get_settings()
        key_dict = _load_key_dict()
        project_id = settings.firebase_project_id or (key_dict or {}).get("project_id")
        if not project_id:
            if key_dict:
                logger.error("Firebase service account JSON missing 'project_id'")
            return False

        cred = _get_credentials(key_dict) if key_dict else None
        if cred is None:
            logger.warning("No Firebase credentials configured; requests are sent unauthenticated")
        _firestore_client = FirestoreRESTClient(
            project_id,
            cred,
            database_id=settings.firebase_database_id,
            base_url=settings.firestore_base_url,
            options=SerializerOptions.from_settings(settings),
            timeout=settings.request_timeout_seconds,
        )
        logger.info("Firestore client initialized for project %s", project_id)
        return True
    except Exception:
        logger.exception("Firebase initialization failed")
        return False


def get_firestore_client() -> FirestoreRESTClient | None:
    """Return the Firestore client, or None if not configured."""
    return _firestore_client


async def close_firebase() -> None:
    """Close the Firestore client's HTTP connection pool."""
    global _firestore_client
    if _firestore_client is not None:
        await _firestore_client.aclose()
        _firestore_client = None
        logger.info("Firestore HTTP client closed")
