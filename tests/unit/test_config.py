"""
Unit tests for ApiConfig.
"""

import pytest

from httpapi.config import ApiConfig


class TestApiConfig:
    """Tests for ApiConfig."""

    def test_defaults(self):
        """Test default values."""
        config = ApiConfig()

        assert config.debug is False
        assert config.show_pagination_links is True
        assert config.allow_jsonp is False
        assert config.error_controller_name == "ErrorController"
        assert config.extensions == ("json",)
        config.validate()

    def test_from_env(self, monkeypatch):
        """Test loading from environment variables."""
        monkeypatch.setenv("API_DEBUG", "true")
        monkeypatch.setenv("API_SHOW_PAGINATION_LINKS", "0")
        monkeypatch.setenv("API_BASE_URL", "https://api.example.com")
        monkeypatch.setenv("API_LOG_FORMAT", "json")

        config = ApiConfig.from_env()

        assert config.debug is True
        assert config.show_pagination_links is False
        assert config.base_url == "https://api.example.com"
        assert config.log_format == "json"

    def test_from_env_defaults(self, monkeypatch):
        """Test from_env with nothing set."""
        for name in ("API_DEBUG", "API_SHOW_PAGINATION_LINKS", "API_BASE_URL"):
            monkeypatch.delenv(name, raising=False)

        config = ApiConfig.from_env()

        assert config.debug is False
        assert config.show_pagination_links is True
        assert config.base_url is None

    @pytest.mark.parametrize("overrides", [
        {"log_format": "xml"},
        {"log_level": "LOUD"},
        {"error_controller_name": ""},
        {"jsonp_callback_param": ""},
        {"base_url": "api.example.com"},
    ])
    def test_validate_rejects(self, overrides):
        """Test invalid values."""
        with pytest.raises(ValueError):
            ApiConfig(**overrides).validate()
