#!/usr/bin/env python3
"""
Iconect MCP Server - HTTP Client

Wraps httpx.AsyncClient for calls to the Iconect API. Attaches the stored
bearer token, and on a 401 refreshes the credentials once and replays the
request. Every failure leaves this module as an IconectError.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from .config import IconectConfig
from .errors import (
    AuthenticationError,
    TransportError,
    UpstreamError,
    error_from_response,
)
from .tokens import CredentialSet, TokenStore

USER_AGENT = "iconect-mcp-server/1.0.0"

RefreshHandler = Callable[[], Awaitable[CredentialSet]]


class IconectHttpClient:
    """Authenticated request pipeline for the Iconect API."""

    def __init__(
        self,
        config: IconectConfig,
        token_store: TokenStore,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.token_store = token_store
        self._refresh_handler: Optional[RefreshHandler] = None
        self.http_client = httpx.AsyncClient(
            base_url=config.api_base_url,
            timeout=config.timeout_seconds,
            headers={"Accept": "application/json", "User-Agent": USER_AGENT},
            transport=transport,
        )
        self.logger = logging.getLogger(__name__)

    def set_refresh_handler(self, handler: RefreshHandler) -> None:
        """Register the coroutine used to obtain fresh credentials after a 401."""
        self._refresh_handler = handler

    async def send(
        self,
        method: str,
        path: str,
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        authenticate: bool = True,
        raw: bool = False,
    ) -> Any:
        """Send a request and return the decoded response body.

        Args:
            method: HTTP method
            path: Path relative to {baseUrl}/v1, or an absolute URL
            json: JSON request body
            data: Form-encoded request body
            params: Query parameters
            headers: Extra request headers
            authenticate: Attach credentials and recover from 401. Disabled for
                calls to the token endpoint itself.
            raw: Return the success body as bytes instead of decoding it

        Returns:
            Parsed JSON body, response text for non-JSON bodies, or None when empty

        Raises:
            IconectError: TransportError, UpstreamError or AuthenticationError
        """
        request_kwargs = {"json": json, "data": data, "params": params, "headers": headers}
        return await self._perform(method, path, request_kwargs, authenticate, raw, retried=False)

    async def _perform(
        self,
        method: str,
        path: str,
        request_kwargs: Dict[str, Any],
        authenticate: bool,
        raw: bool,
        retried: bool,
    ) -> Any:
        request = self.http_client.build_request(method, path, **request_kwargs)
        if authenticate:
            self._apply_credentials(request)

        response = await self._transmit(request)

        if response.status_code == 401 and authenticate and not retried:
            credentials = self.token_store.get()
            if credentials is not None and credentials.has_refresh_token() and self._refresh_handler:
                self.logger.warning(f"Received 401 for {method} {path}, attempting token refresh")
                await self._recover_credentials()
                # Replayed at most once: the replay carries retried=True.
                return await self._perform(method, path, request_kwargs, authenticate, raw, retried=True)

        return self._handle_response(response, raw)

    async def _recover_credentials(self) -> None:
        try:
            await self._refresh_handler()
        except Exception as e:
            self.token_store.clear()
            self.logger.error(f"Token refresh failed, credentials cleared: {e}")
            if isinstance(e, AuthenticationError):
                raise
            raise AuthenticationError("Token refresh failed") from e

    def _apply_credentials(self, request: httpx.Request) -> None:
        credentials = self.token_store.get()
        if credentials is not None and credentials.is_usable():
            request.headers["Authorization"] = credentials.authorization_header

    async def _transmit(self, request: httpx.Request) -> httpx.Response:
        try:
            return await self.http_client.send(request)
        except httpx.TimeoutException as e:
            self.logger.error(f"Request timed out: {request.method} {request.url}")
            raise TransportError(
                f"Request timed out after {self.config.timeout_ms}ms", code="REQUEST_TIMEOUT"
            ) from e
        except httpx.RequestError as e:
            self.logger.error(f"Request failed: {request.method} {request.url}: {e}")
            raise TransportError(str(e) or type(e).__name__) from e

    def _handle_response(self, response: httpx.Response, raw: bool = False) -> Any:
        if response.is_success:
            if raw:
                return response.content
            return self._decode_body(response)

        body = self._error_body(response)
        error = error_from_response(response.status_code, body)
        self.logger.warning(
            f"{response.request.method} {response.request.url.path} failed with HTTP {response.status_code}: {error.message}"
        )
        raise error

    def _decode_body(self, response: httpx.Response) -> Any:
        if not response.content:
            return None

        content_type = response.headers.get("content-type", "")
        if "json" not in content_type:
            return response.text

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                "Malformed JSON in upstream response",
                code="INVALID_RESPONSE",
                status_code=response.status_code,
                details=response.text[:500],
            ) from e

    @staticmethod
    def _error_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return await self.send("GET", path, params=params, **kwargs)

    async def post(self, path: str, json: Any = None, **kwargs) -> Any:
        return await self.send("POST", path, json=json, **kwargs)

    async def put(self, path: str, json: Any = None, **kwargs) -> Any:
        return await self.send("PUT", path, json=json, **kwargs)

    async def patch(self, path: str, json: Any = None, **kwargs) -> Any:
        return await self.send("PATCH", path, json=json, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.send("DELETE", path, **kwargs)

    async def close(self):
        """Close the HTTP client."""
        await self.http_client.aclose()


