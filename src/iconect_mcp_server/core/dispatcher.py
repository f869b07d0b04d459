#!/usr/bin/env python3
"""
Iconect MCP Server - Command Dispatcher

Single entry point for inbound commands. Owns the configured GatewaySession,
validates input against each command's contract and turns every outcome
into a response envelope.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import httpx
from pydantic import Field

from .auth import IconectAuth
from .config import IconectConfig, VALID_LOG_LEVELS
from .envelope import error_envelope, is_success_envelope, success_envelope
from .errors import (
    ConfigurationError,
    IconectError,
    InternalError,
    NotConfiguredError,
    UnknownCommandError,
)
from .http_client import IconectHttpClient
from .logging_utils import set_log_level
from .registry import CommandDescriptor, CommandInput, CommandRegistry
from .tokens import TokenStore

CONFIGURE_COMMAND = "iconect_configure"


class ConfigureInput(CommandInput):
    base_url: str = Field(..., alias="baseUrl", description="Iconect API base URL")
    client_id: str = Field(..., alias="clientId", description="OAuth client ID")
    client_secret: Optional[str] = Field(default=None, alias="clientSecret", description="OAuth client secret (optional)")
    timeout: Optional[int] = Field(default=None, description="Request timeout in milliseconds (default: 30000)")
    max_retries: Optional[int] = Field(default=None, alias="maxRetries", description="Maximum retries (default: 3)")
    retry_delay: Optional[int] = Field(default=None, alias="retryDelay", description="Retry delay in milliseconds (default: 1000)")
    log_level: Optional[str] = Field(
        default=None, alias="logLevel",
        description=f"Log level, one of {', '.join(VALID_LOG_LEVELS)} (default: INFO)",
    )


@dataclass
class GatewaySession:
    """Everything built from one configuration. Replaced wholesale on reconfigure."""

    config: IconectConfig
    token_store: TokenStore
    http_client: IconectHttpClient
    auth: IconectAuth
    registry: CommandRegistry

    async def close(self) -> None:
        await self.http_client.close()


def build_session(config: IconectConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> GatewaySession:
    """Construct token store, HTTP client, auth service and command registry."""
    # Imported here: the tool modules import core.
    from ..tools import get_all_commands

    token_store = TokenStore()
    http_client = IconectHttpClient(config, token_store, transport=transport)
    auth = IconectAuth(config, http_client, token_store)
    http_client.set_refresh_handler(auth.ensure_fresh_token)

    registry = CommandRegistry()
    registry.register(get_all_commands(http_client, auth))

    return GatewaySession(
        config=config,
        token_store=token_store,
        http_client=http_client,
        auth=auth,
        registry=registry,
    )


class Dispatcher:
    """Configuration-aware command dispatcher."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport
        self._session: Optional[GatewaySession] = None
        self._configure_descriptor = CommandDescriptor(
            name=CONFIGURE_COMMAND,
            description="Configure the Iconect MCP server with connection details",
            input_model=ConfigureInput,
            handler=self._handle_configure,
        )
        self.logger = logging.getLogger(__name__)

    @property
    def session(self) -> Optional[GatewaySession]:
        return self._session

    def is_configured(self) -> bool:
        return self._session is not None

    def list_commands(self) -> List[Dict[str, Any]]:
        """Advertised commands: only configure until configured, then configure plus the registry."""
        descriptors = [self._configure_descriptor]
        if self._session is not None:
            descriptors.extend(self._session.registry.list())
        return [descriptor.describe() for descriptor in descriptors]

    async def dispatch(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Run one command. Always returns exactly one envelope, never raises."""
        if name == CONFIGURE_COMMAND:
            descriptor = self._configure_descriptor
        else:
            session = self._session
            if session is None:
                return error_envelope(NotConfiguredError())
            descriptor = session.registry.get(name)
            if descriptor is None:
                self.logger.warning(f"Unknown tool requested: {name}")
                return error_envelope(UnknownCommandError(name))

        try:
            params = descriptor.validate(arguments)
            result = await descriptor.handler(params)
        except IconectError as e:
            self.logger.error(f"Tool execution failed: {name}: {e.code}: {e.message}")
            if e.details is not None:
                self.logger.debug(f"Error details for {name}: {e.details}")
            return error_envelope(e)
        except Exception:
            self.logger.exception(f"Unexpected error while executing tool: {name}")
            return error_envelope(InternalError())

        if not is_success_envelope(result):
            self.logger.error(f"Tool {name} returned a malformed result: {result!r}")
            return error_envelope(InternalError())
        return result

    async def configure(self, arguments: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self.dispatch(CONFIGURE_COMMAND, arguments)

    async def _handle_configure(self, params: ConfigureInput) -> Dict[str, Any]:
        try:
            config = IconectConfig.from_mapping(params.model_dump(by_alias=True))
        except ConfigurationError as e:
            self.logger.error(f"Configuration failed: {e.message}")
            raise

        # Build completely before swapping so a failure leaves the old session in place.
        new_session = build_session(config, transport=self._transport)
        await self.install_session(new_session)

        if params.log_level is not None:
            set_log_level(config.log_level)

        self.logger.info(
            f"Iconect MCP server configured successfully: {config.base_url} (client {config.client_id})"
        )
        return success_envelope("Iconect MCP server configured successfully", config.public_view())

    async def install_session(self, session: GatewaySession) -> None:
        """Make session current and release the one it replaces."""
        previous, self._session = self._session, session
        if previous is not None:
            self.logger.info("Replacing previous configuration, dropping its credentials")
            previous.token_store.clear()
            await previous.close()

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None
