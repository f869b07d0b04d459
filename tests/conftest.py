"""Shared fixtures and utilities for Iconect MCP Server tests."""

import inspect
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from urllib.parse import parse_qs

import httpx
import pytest
import pytest_asyncio

from iconect_mcp_server.core.config import IconectConfig
from iconect_mcp_server.core.dispatcher import Dispatcher, build_session
from iconect_mcp_server.core.tokens import CredentialSet

BASE_URL = "https://api.test.com"
TOKEN_PATH = "/oauth/token"

Responder = Union[Tuple[int, Any], Callable[[httpx.Request], Any]]


# ============================================================================
# Fake Iconect API
# ============================================================================


class FakeIconectApi:
    """Scripted upstream served through httpx.MockTransport.

    Each route holds a queue of responders. A responder is either a
    (status, json_body) tuple or a callable taking the request and returning
    an httpx.Response (sync or async). The last responder of a queue is
    reused once the others are consumed.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._routes: Dict[Tuple[str, str], List[Responder]] = {}

    def add(self, method: str, path: str, *responders: Responder) -> None:
        self._routes.setdefault((method.upper(), path), []).extend(responders)

    def add_token(self, *responders: Responder) -> None:
        self.add("POST", TOKEN_PATH, *responders)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    def token_calls(self) -> List[httpx.Request]:
        return self.calls("POST", TOKEN_PATH)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": f"No route for {request.method} {request.url.path}"})

        responder = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(responder):
            response = responder(request)
            if inspect.isawaitable(response):
                response = await response
            return response

        status, body = responder
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)


def token_payload(
    access_token: str = "T",
    expires_in: int = 3600,
    refresh_token: Optional[str] = "R",
    token_type: Optional[str] = "Bearer",
    scope: Optional[str] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"access_token": access_token, "expires_in": expires_in}
    if token_type is not None:
        payload["token_type"] = token_type
    if refresh_token is not None:
        payload["refresh_token"] = refresh_token
    if scope is not None:
        payload["scope"] = scope
    return payload


def form_of(request: httpx.Request) -> Dict[str, str]:
    """Decode a form-encoded request body into a flat dict."""
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


def make_credentials(
    access_token: str = "T1",
    refresh_token: Optional[str] = "R1",
    expires_in: int = 3600,
) -> CredentialSet:
    return CredentialSet(
        access_token=access_token,
        token_type="Bearer",
        expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        refresh_token=refresh_token,
    )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def api() -> FakeIconectApi:
    return FakeIconectApi()


@pytest.fixture
def config() -> IconectConfig:
    return IconectConfig(base_url=BASE_URL, client_id="c1")


@pytest_asyncio.fixture
async def session(config: IconectConfig, api: FakeIconectApi):
    """A configured gateway session talking to the fake API."""
    gateway_session = build_session(config, transport=api.transport)
    yield gateway_session
    await gateway_session.close()


@pytest_asyncio.fixture
async def dispatcher(api: FakeIconectApi):
    """An unconfigured dispatcher whose sessions talk to the fake API."""
    gateway_dispatcher = Dispatcher(transport=api.transport)
    yield gateway_dispatcher
    await gateway_dispatcher.close()


@pytest_asyncio.fixture
async def configured_dispatcher(dispatcher: Dispatcher):
    envelope = await dispatcher.configure({"baseUrl": BASE_URL, "clientId": "c1"})
    assert envelope["success"] is True
    return dispatcher
