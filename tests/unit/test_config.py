"""Tests for Settings validation and serializer options built from settings."""

import pytest
from pydantic import ValidationError

from firebase_rest.core.config import Settings, get_settings
from firebase_rest.infrastructure.firebase.options import SerializerOptions


def test_defaults() -> None:
    """Defaults point at production Firestore with camelCase names."""
    settings = Settings()
    assert settings.firebase_database_id == "(default)"
    assert settings.firestore_base_url == "https://firestore.googleapis.com/v1"
    assert settings.naming_policy == "camel"
    assert settings.request_timeout_seconds == 30.0


def test_naming_policy_normalized() -> None:
    assert Settings(naming_policy=" PASCAL ").naming_policy == "pascal"


def test_invalid_naming_policy_rejected() -> None:
    with pytest.raises(ValidationError, match="naming_policy must be one of"):
        Settings(naming_policy="kebab")


def test_non_positive_timeout_rejected() -> None:
    with pytest.raises(ValidationError, match="request_timeout_seconds must be positive"):
        Settings(request_timeout_seconds=0)


def test_blank_database_id_rejected() -> None:
    with pytest.raises(ValidationError, match="firebase_database_id must not be empty"):
        Settings(firebase_database_id=" ")


def test_base_url_trailing_slash_stripped() -> None:
    assert Settings(firestore_base_url="http://localhost:8080/v1/").firestore_base_url == (
        "http://localhost:8080/v1"
    )


def test_get_settings_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """get_settings picks up env vars after cache_clear and then stays cached."""
    monkeypatch.setenv("NAMING_POLICY", "snake")
    get_settings.cache_clear()
    settings = get_settings()
    assert settings.naming_policy == "snake"
    assert get_settings() is settings


def test_serializer_options_from_settings() -> None:
    options = SerializerOptions.from_settings(Settings(naming_policy="none"))
    assert options.naming_policy == "none"
    assert options.convert_name("display_name") == "display_name"
