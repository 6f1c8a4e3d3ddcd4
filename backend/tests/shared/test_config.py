"""Tests for shared/config.py."""

from decimal import Decimal
from unittest.mock import patch
import os

from shared.config import Settings, get_settings


class TestSettings:
    def test_default_values(self):
        """Settings should have sensible defaults."""
        settings = Settings(_env_file=None)
        assert settings.app_name == "PictoText API"
        assert settings.debug is False
        assert settings.port == 8000
        assert settings.app_version == "0.1.0"

    def test_quota_defaults(self):
        """Free and premium quotas should default to 3/day and 1500/month."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.free_daily_limit == 3
        assert settings.premium_monthly_limit == 1500
        assert settings.premium_price == Decimal("10.00")
        assert settings.premium_currency == "USD"

    def test_loads_from_env(self):
        """Settings should load from environment variables."""
        with patch.dict(os.environ, {"DEBUG": "true", "PORT": "9000", "FREE_DAILY_LIMIT": "5"}):
            settings = Settings(_env_file=None)
            assert settings.debug is True
            assert settings.port == 9000
            assert settings.free_daily_limit == 5

    def test_loads_supabase_config_from_env(self):
        """Settings should load Supabase configuration from environment variables."""
        with patch.dict(os.environ, {
            "SUPABASE_URL": "https://test.supabase.co",
            "SUPABASE_SERVICE_ROLE_KEY": "test-service-key",
        }):
            settings = Settings(_env_file=None)
            assert settings.supabase_url == "https://test.supabase.co"
            assert settings.supabase_service_role_key == "test-service-key"

    def test_feature_flags_follow_credentials(self):
        """PayPal and Google are enabled only with both credentials."""
        settings = Settings(_env_file=None, paypal_client_id="id", paypal_client_secret="")
        assert settings.paypal_enabled is False
        assert settings.google_oauth_enabled is False

        settings = Settings(
            _env_file=None,
            paypal_client_id="id",
            paypal_client_secret="secret",
            google_client_id="gid",
            google_client_secret="gsecret",
        )
        assert settings.paypal_enabled is True
        assert settings.google_oauth_enabled is True

    def test_is_production(self):
        """Production mode is driven by ENVIRONMENT."""
        assert Settings(_env_file=None, environment="production").is_production is True
        assert Settings(_env_file=None, environment="development").is_production is False


class TestGetSettings:
    def test_get_settings_returns_settings_instance(self):
        """get_settings should return a Settings instance."""
        get_settings.cache_clear()
        settings = get_settings()
        assert isinstance(settings, Settings)

    def test_get_settings_caches(self):
        """get_settings should return cached instance."""
        get_settings.cache_clear()
        settings1 = get_settings()
        settings2 = get_settings()
        assert settings1 is settings2
