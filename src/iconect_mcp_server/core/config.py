#!/usr/bin/env python3
"""
Iconect MCP Server - Core Configuration

Builds and validates the gateway settings, either from the arguments of
iconect_configure or from environment variables at startup.
"""

import os
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

from .errors import ConfigurationError

DEFAULT_TIMEOUT_MS = 30000
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_MS = 1000
DEFAULT_LOG_LEVEL = "INFO"

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]
_LOG_LEVEL_ALIASES = {"WARN": "WARNING"}


class IconectConfig:
    """Gateway settings. Treated as immutable once a session is built from it."""

    def __init__(
        self,
        base_url: str,
        client_id: str,
        client_secret: Optional[str] = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS,
        log_level: str = DEFAULT_LOG_LEVEL,
    ):
        self.base_url = base_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout_ms = timeout_ms
        # Carried and reported, but no component retries on them.
        self.max_retries = max_retries
        self.retry_delay_ms = retry_delay_ms
        self.log_level = log_level

        self._validate_config()

    def _validate_config(self):
        """Validate configuration settings."""
        if not isinstance(self.base_url, str) or not self.base_url.strip():
            raise ConfigurationError("baseUrl is required")

        base_url = self.base_url.strip().rstrip("/")
        parsed = urlparse(base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(f"Invalid base URL: {self.base_url}")
        self.base_url = base_url

        if not isinstance(self.client_id, str) or not self.client_id.strip():
            raise ConfigurationError("clientId must not be empty")
        self.client_id = self.client_id.strip()

        if self.client_secret is not None:
            if not isinstance(self.client_secret, str):
                raise ConfigurationError("clientSecret must be a string")
            # An empty secret means a public client.
            self.client_secret = self.client_secret or None

        for name, value in (
            ("timeout", self.timeout_ms),
            ("maxRetries", self.max_retries),
            ("retryDelay", self.retry_delay_ms),
        ):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")

        level = str(self.log_level).upper()
        level = _LOG_LEVEL_ALIASES.get(level, level)
        if level not in VALID_LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.log_level}. Must be one of {VALID_LOG_LEVELS}")
        self.log_level = level

    @property
    def api_base_url(self) -> str:
        return f"{self.base_url}/v1"

    @property
    def token_url(self) -> str:
        return f"{self.base_url}/oauth/token"

    @property
    def authorize_url(self) -> str:
        return f"{self.base_url}/oauth/authorize"

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    def has_client_secret(self) -> bool:
        return bool(self.client_secret)

    def public_view(self) -> Dict[str, Any]:
        """Non-secret subset returned to the caller after configure."""
        return {
            "baseUrl": self.base_url,
            "clientId": self.client_id,
            "timeout": self.timeout_ms,
        }

    def get_server_info(self) -> Dict[str, Any]:
        """Get configuration information for logging and status."""
        return {
            "base_url": self.base_url,
            "client_id": self.client_id,
            "confidential_client": self.has_client_secret(),
            "timeout_ms": self.timeout_ms,
            "max_retries": self.max_retries,
            "retry_delay_ms": self.retry_delay_ms,
            "log_level": self.log_level,
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "IconectConfig":
        """Build from caller-supplied camelCase keys merged over defaults."""
        return cls(
            base_url=data.get("baseUrl"),
            client_id=data.get("clientId"),
            client_secret=data.get("clientSecret"),
            timeout_ms=_or_default(data.get("timeout"), DEFAULT_TIMEOUT_MS),
            max_retries=_or_default(data.get("maxRetries"), DEFAULT_MAX_RETRIES),
            retry_delay_ms=_or_default(data.get("retryDelay"), DEFAULT_RETRY_DELAY_MS),
            log_level=_or_default(data.get("logLevel"), DEFAULT_LOG_LEVEL),
        )

    @classmethod
    def from_env(cls) -> Optional["IconectConfig"]:
        """Build from ICONECT_* environment variables, or None when unset."""
        load_dotenv()

        base_url = os.getenv("ICONECT_BASE_URL")
        client_id = os.getenv("ICONECT_CLIENT_ID")
        if not base_url or not client_id:
            return None

        return cls(
            base_url=base_url,
            client_id=client_id,
            client_secret=os.getenv("ICONECT_CLIENT_SECRET"),
            timeout_ms=_int_env("ICONECT_TIMEOUT", DEFAULT_TIMEOUT_MS),
            max_retries=_int_env("ICONECT_MAX_RETRIES", DEFAULT_MAX_RETRIES),
            retry_delay_ms=_int_env("ICONECT_RETRY_DELAY", DEFAULT_RETRY_DELAY_MS),
            log_level=os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL),
        )


def _or_default(value: Any, default: Any) -> Any:
    return default if value is None else value


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")
