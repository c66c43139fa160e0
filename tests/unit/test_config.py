"""Unit tests for configuration module."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from src.core.config import Settings, get_settings

REQUIRED_ENV = {
    "SUPABASE_URL": "https://test.supabase.co",
    "SUPABASE_SECRET_KEY": "test-secret",
}


class TestSettings:
    """Tests for Settings class."""

    def test_settings_loads_from_environment(self) -> None:
        """Test that Settings loads values from environment variables."""
        env_vars = {
            **REQUIRED_ENV,
            "APP_NAME": "test-app",
            "APP_ENV": "testing",
            "DEBUG": "true",
            "PORT": "9000",
            "STRIPE_SECRET_KEY": "sk_live_abc",
            "ASTRIA_IMAGES_PER_PROMPT": "8",
            "MIN_TRAINING_UPLOADS": "12",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            settings = Settings()

            assert settings.app_name == "test-app"
            assert settings.app_env == "testing"
            assert settings.debug is True
            assert settings.port == 9000
            assert settings.astria_images_per_prompt == 8
            assert settings.min_training_uploads == 12
            assert settings.is_stripe_test_mode is False

    def test_settings_default_values(self) -> None:
        """Test that default values are applied correctly."""
        with patch.dict(os.environ, REQUIRED_ENV, clear=True):
            settings = Settings(_env_file=None)

            assert settings.app_name == "iheadshot-backend"
            assert settings.app_env == "development"
            assert settings.storage_bucket == "headshots"
            assert settings.currency == "usd"
            assert settings.min_training_uploads == 10
            assert settings.max_upload_bytes == 10 * 1024 * 1024
            assert settings.astria_images_per_prompt == 4
            assert settings.replicate_standard_model == "black-forest-labs/flux-kontext-pro"
            assert settings.replicate_premium_model == "black-forest-labs/flux-kontext-max"

    def test_list_properties_are_parsed(self) -> None:
        """Test that comma-separated settings are split and trimmed."""
        env_vars = {
            **REQUIRED_ENV,
            "CORS_ORIGINS": "http://localhost:3000, https://iheadshot.test ,",
            "ALLOWED_UPLOAD_TYPES": "image/jpeg, image/png",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            settings = Settings()

            assert settings.cors_origins_list == ["http://localhost:3000", "https://iheadshot.test"]
            assert settings.allowed_upload_types_list == ["image/jpeg", "image/png"]

    def test_astria_callback_url_uses_app_url(self) -> None:
        """Test that the Astria callback points at this API's webhook route."""
        env_vars = {**REQUIRED_ENV, "APP_URL": "https://api.example.com/"}

        with patch.dict(os.environ, env_vars, clear=False):
            settings = Settings()

            assert settings.astria_callback_url == "https://api.example.com/api/v1/webhooks/astria"

    def test_settings_validation_error_missing_required(self) -> None:
        """Test that validation errors are raised for missing required fields."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings(_env_file=None)

            error_fields = [e["loc"][0] for e in exc_info.value.errors()]
            assert "supabase_url" in error_fields
            assert "supabase_secret_key" in error_fields


class TestGetSettings:
    """Tests for get_settings function."""

    def test_get_settings_returns_cached_singleton(self) -> None:
        """Test that get_settings returns the same cached instance."""
        get_settings.cache_clear()

        settings1 = get_settings()
        settings2 = get_settings()

        assert isinstance(settings1, Settings)
        assert settings1 is settings2

        get_settings.cache_clear()

    def test_get_settings_cache_can_be_cleared(self) -> None:
        """Test that cache can be cleared to reload settings."""
        get_settings.cache_clear()

        settings1 = get_settings()
        get_settings.cache_clear()
        settings2 = get_settings()

        assert settings1 is not settings2

        get_settings.cache_clear()
