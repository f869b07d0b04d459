#!/usr/bin/env python3
"""
Iconect MCP Server - Core Module

Core functionality including configuration, errors, tokens, the HTTP client,
authentication and the command registry.
"""

from .auth import IconectAuth
from .config import IconectConfig
from .envelope import error_envelope, success_envelope
from .errors import (
    AuthenticationError,
    ConfigurationError,
    IconectError,
    InternalError,
    NotConfiguredError,
    TransportError,
    UnknownCommandError,
    UpstreamError,
    ValidationError,
)
from .http_client import IconectHttpClient
from .registry import CommandDescriptor, CommandInput, CommandRegistry
from .tokens import CredentialSet, TokenStore

__all__ = [
    "IconectAuth",
    "IconectConfig",
    "IconectHttpClient",
    "CommandDescriptor",
    "CommandInput",
    "CommandRegistry",
    "CredentialSet",
    "TokenStore",
    "error_envelope",
    "success_envelope",
    "AuthenticationError",
    "ConfigurationError",
    "IconectError",
    "InternalError",
    "NotConfiguredError",
    "TransportError",
    "UnknownCommandError",
    "UpstreamError",
    "ValidationError",
]
