"""Tests for gateway configuration."""

import pytest

from iconect_mcp_server.core.config import IconectConfig
from iconect_mcp_server.core.errors import ConfigurationError


class TestIconectConfig:
    """Tests for IconectConfig validation and derived values."""

    def test_defaults(self) -> None:
        config = IconectConfig(base_url="https://api.test.com", client_id="c1")

        assert config.timeout_ms == 30000
        assert config.max_retries == 3
        assert config.retry_delay_ms == 1000
        assert config.log_level == "INFO"
        assert config.client_secret is None
        assert not config.has_client_secret()

    def test_derived_urls(self) -> None:
        config = IconectConfig(base_url="https://api.test.com/", client_id="c1")

        assert config.base_url == "https://api.test.com"
        assert config.api_base_url == "https://api.test.com/v1"
        assert config.token_url == "https://api.test.com/oauth/token"
        assert config.authorize_url == "https://api.test.com/oauth/authorize"
        assert config.timeout_seconds == 30.0

    @pytest.mark.parametrize("base_url", ["", "not a url", "ftp://files.test.com", "https://", None])
    def test_rejects_invalid_base_url(self, base_url) -> None:
        with pytest.raises(ConfigurationError):
            IconectConfig(base_url=base_url, client_id="c1")

    def test_rejects_blank_client_id(self) -> None:
        with pytest.raises(ConfigurationError, match="clientId"):
            IconectConfig(base_url="https://api.test.com", client_id="   ")

    @pytest.mark.parametrize("field", ["timeout_ms", "max_retries", "retry_delay_ms"])
    @pytest.mark.parametrize("value", [0, -5, True, "100"])
    def test_rejects_non_positive_numbers(self, field, value) -> None:
        with pytest.raises(ConfigurationError):
            IconectConfig(base_url="https://api.test.com", client_id="c1", **{field: value})

    def test_log_level_normalized(self) -> None:
        assert IconectConfig(base_url="https://a.test", client_id="c1", log_level="debug").log_level == "DEBUG"
        assert IconectConfig(base_url="https://a.test", client_id="c1", log_level="WARN").log_level == "WARNING"

    def test_rejects_unknown_log_level(self) -> None:
        with pytest.raises(ConfigurationError, match="log level"):
            IconectConfig(base_url="https://a.test", client_id="c1", log_level="VERBOSE")

    def test_empty_secret_is_public_client(self) -> None:
        config = IconectConfig(base_url="https://a.test", client_id="c1", client_secret="")
        assert config.client_secret is None

    def test_public_view_hides_secret(self) -> None:
        config = IconectConfig(base_url="https://a.test", client_id="c1", client_secret="s3cret")

        assert config.public_view() == {"baseUrl": "https://a.test", "clientId": "c1", "timeout": 30000}
        assert "s3cret" not in str(config.public_view())


class TestFromMapping:
    """Tests for building configuration from iconect_configure arguments."""

    def test_camel_case_keys(self) -> None:
        config = IconectConfig.from_mapping({
            "baseUrl": "https://api.test.com",
            "clientId": "c1",
            "clientSecret": "s",
            "timeout": 5000,
            "maxRetries": 1,
            "retryDelay": 250,
            "logLevel": "ERROR",
        })

        assert config.client_secret == "s"
        assert config.timeout_ms == 5000
        assert config.max_retries == 1
        assert config.retry_delay_ms == 250
        assert config.log_level == "ERROR"

    def test_none_values_fall_back_to_defaults(self) -> None:
        config = IconectConfig.from_mapping({
            "baseUrl": "https://api.test.com",
            "clientId": "c1",
            "timeout": None,
            "logLevel": None,
        })

        assert config.timeout_ms == 30000
        assert config.log_level == "INFO"

    def test_missing_base_url(self) -> None:
        with pytest.raises(ConfigurationError, match="baseUrl"):
            IconectConfig.from_mapping({"clientId": "c1"})


class TestFromEnv:
    """Tests for startup configuration from the environment."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch) -> None:
        for name in (
            "ICONECT_BASE_URL", "ICONECT_CLIENT_ID", "ICONECT_CLIENT_SECRET",
            "ICONECT_TIMEOUT", "ICONECT_MAX_RETRIES", "ICONECT_RETRY_DELAY", "LOG_LEVEL",
        ):
            monkeypatch.delenv(name, raising=False)

    def test_returns_none_when_unset(self) -> None:
        assert IconectConfig.from_env() is None

    def test_reads_variables(self, monkeypatch) -> None:
        monkeypatch.setenv("ICONECT_BASE_URL", "https://env.test.com")
        monkeypatch.setenv("ICONECT_CLIENT_ID", "env-client")
        monkeypatch.setenv("ICONECT_TIMEOUT", "10000")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        config = IconectConfig.from_env()

        assert config.base_url == "https://env.test.com"
        assert config.client_id == "env-client"
        assert config.timeout_ms == 10000
        assert config.max_retries == 3
        assert config.log_level == "DEBUG"

    def test_non_integer_timeout(self, monkeypatch) -> None:
        monkeypatch.setenv("ICONECT_BASE_URL", "https://env.test.com")
        monkeypatch.setenv("ICONECT_CLIENT_ID", "env-client")
        monkeypatch.setenv("ICONECT_TIMEOUT", "soon")

        with pytest.raises(ConfigurationError, match="ICONECT_TIMEOUT"):
            IconectConfig.from_env()
