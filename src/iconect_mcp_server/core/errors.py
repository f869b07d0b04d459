#!/usr/bin/env python3
"""
Iconect MCP Server - Error Taxonomy

Every failure that can reach a caller is an IconectError carrying a stable
code, a message and, where one exists, the HTTP status it corresponds to.
"""

from typing import Any, Dict, Optional


class IconectError(Exception):
    """Base error for the gateway."""

    default_code = "ICONECT_ERROR"
    default_status: Optional[int] = None

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status_code = status_code if status_code is not None else self.default_status
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        """Caller-facing error object. Details stay server-side."""
        error: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.status_code is not None:
            error["statusCode"] = self.status_code
        return error

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}, status_code={self.status_code!r})"


class ConfigurationError(IconectError):
    """Bad or missing settings; fatal to configure only."""

    default_code = "CONFIGURATION_ERROR"


class AuthenticationError(IconectError):
    """Any grant or refresh failure."""

    default_code = "AUTHENTICATION_ERROR"
    default_status = 401

    def __init__(self, message: str = "Authentication failed", details: Any = None):
        super().__init__(message, details=details)


class ValidationError(IconectError):
    """Command input did not satisfy its contract."""

    default_code = "VALIDATION_ERROR"
    default_status = 400

    def __init__(self, message: str = "Validation failed", details: Any = None):
        super().__init__(message, details=details)


class NotConfiguredError(IconectError):
    default_code = "NOT_CONFIGURED"

    def __init__(self, message: str = "Server not configured. Use iconect_configure first."):
        super().__init__(message)


class UnknownCommandError(IconectError):
    default_code = "UNKNOWN_TOOL"

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class TransportError(IconectError):
    """Network failure or timeout; never carries an HTTP status."""

    default_code = "NETWORK_ERROR"


class UpstreamError(IconectError):
    """Non-2xx (or unreadable) response from the remote API."""

    default_code = "HTTP_ERROR"


class InternalError(IconectError):
    default_code = "INTERNAL_ERROR"
    default_status = 500

    def __init__(self, message: str = "An internal error occurred"):
        super().__init__(message)


_STATUS_CODES = {
    400: "BAD_REQUEST",
    403: "AUTHORIZATION_ERROR",
    404: "NOT_FOUND",
    409: "CONFLICT",
    429: "RATE_LIMIT_ERROR",
}


def _message_from_body(status_code: int, body: Any) -> str:
    if isinstance(body, dict):
        for key in ("message", "error_description", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return f"HTTP {status_code}"


def error_from_response(status_code: int, body: Any = None) -> IconectError:
    """Map an upstream non-2xx response onto the error taxonomy."""
    message = _message_from_body(status_code, body)

    if status_code == 401:
        return AuthenticationError(message, details=body)

    if status_code >= 500:
        code = "SERVER_ERROR"
    else:
        code = _STATUS_CODES.get(status_code, "HTTP_ERROR")

    return UpstreamError(message, code=code, status_code=status_code, details=body)
