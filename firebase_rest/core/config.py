"""Library configuration (settings and environment).

Single source of truth for Firebase project and serializer configuration.
Uses pydantic-settings with .env support. Nothing here is required for the
pure codec/parser/writer; only the REST client bootstrap needs credentials.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

NAMING_POLICIES = ("camel", "pascal", "snake", "none")


class Settings(BaseSettings):
    """Settings loaded from environment and .env.

    All settings are optional with defaults; validate_settings rejects
    inconsistent values at load time.
    """

    debug: bool = False

    # Firebase / Firestore: use key (env) or path (file).
    firebase_project_id: str | None = None
    firebase_database_id: str = "(default)"
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None  # Path to JSON file
    # Emulator or proxy override, e.g. http://localhost:8080/v1
    firestore_base_url: str = "https://firestore.googleapis.com/v1"

    request_timeout_seconds: float = 30.0

    # Default wire-name derivation for model members without an override
    naming_policy: str = "camel"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Validate naming policy, timeout and database id."""
        policy = self.naming_policy.strip().lower()
        if policy not in NAMING_POLICIES:
            raise ValueError(
                f"naming_policy must be one of {', '.join(NAMING_POLICIES)}, got: {self.naming_policy!r}"
            )
        self.naming_policy = policy
        if self.request_timeout_seconds <= 0:
            raise ValueError(
                f"request_timeout_seconds must be positive, got: {self.request_timeout_seconds}"
            )
        if not self.firebase_database_id.strip():
            raise ValueError("firebase_database_id must not be empty; use '(default)'.")
        self.firestore_base_url = self.firestore_base_url.rstrip("/")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
