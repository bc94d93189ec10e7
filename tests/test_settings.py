"""Tests for settings parsing."""

from __future__ import annotations


def test_providers_are_split_and_lowercased(test_settings_factory) -> None:
    settings = test_settings_factory(REGISTRY_PROVIDERS="AA" * 32 + ", " + "bb" * 32 + ",")
    assert settings.registry_providers == ["aa" * 32, "bb" * 32]


def test_testing_database_override(test_settings_factory) -> None:
    settings = test_settings_factory(
        DATABASE_URL="sqlite:///main.db",
        TEST_DATABASE_URL="sqlite:///test.db",
        USE_TEST_DATABASE=True,
    )
    assert settings.effective_database_url == "sqlite:///test.db"
    assert settings.database_url_sync == "sqlite:///test.db"


def test_defaults(test_settings_factory) -> None:
    settings = test_settings_factory()
    assert settings.player_type_bucket_width == 15
    assert settings.auth_challenge_ttl_seconds == 300
