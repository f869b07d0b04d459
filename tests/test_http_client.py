"""Tests for the authenticated request pipeline."""

import httpx
import pytest

from iconect_mcp_server.core.errors import AuthenticationError, TransportError, UpstreamError

from .conftest import make_credentials, token_payload

PROJECTS = "/v1/projects"


class TestCredentialInjection:
    """Tests for bearer token attachment."""

    @pytest.mark.asyncio
    async def test_attaches_usable_token(self, session, api) -> None:
        api.add("GET", PROJECTS, (200, {"items": []}))
        session.token_store.set(make_credentials(access_token="T1"))

        result = await session.http_client.get("/projects")

        assert result == {"items": []}
        assert api.calls("GET", PROJECTS)[0].headers["Authorization"] == "Bearer T1"

    @pytest.mark.asyncio
    async def test_no_header_without_credentials(self, session, api) -> None:
        api.add("GET", PROJECTS, (200, {"items": []}))

        await session.http_client.get("/projects")

        assert "Authorization" not in api.calls("GET", PROJECTS)[0].headers

    @pytest.mark.asyncio
    async def test_no_header_inside_skew_window(self, session, api) -> None:
        api.add("GET", PROJECTS, (200, {"items": []}))
        session.token_store.set(make_credentials(access_token="T1", expires_in=10))

        await session.http_client.get("/projects")

        assert "Authorization" not in api.calls("GET", PROJECTS)[0].headers

    @pytest.mark.asyncio
    async def test_sends_default_headers(self, session, api) -> None:
        api.add("GET", PROJECTS, (200, {}))

        await session.http_client.get("/projects")

        request = api.calls("GET", PROJECTS)[0]
        assert request.headers["Accept"] == "application/json"
        assert request.headers["User-Agent"].startswith("iconect-mcp-server/")


class TestUnauthorizedRecovery:
    """Tests for 401 -> refresh -> replay."""

    @pytest.mark.asyncio
    async def test_refresh_then_replay_succeeds(self, session, api) -> None:
        api.add("GET", PROJECTS, (401, {"message": "expired"}), (200, {"items": [{"id": "p1"}]}))
        api.add_token((200, token_payload(access_token="T2", refresh_token="R2")))
        session.token_store.set(make_credentials(access_token="T1", refresh_token="R1"))

        result = await session.http_client.get("/projects")

        assert result == {"items": [{"id": "p1"}]}
        assert len(api.token_calls()) == 1
        replay = api.calls("GET", PROJECTS)[1]
        assert replay.headers["Authorization"] == "Bearer T2"
        assert session.token_store.get().refresh_token == "R2"

    @pytest.mark.asyncio
    async def test_retried_at_most_once(self, session, api) -> None:
        api.add("GET", PROJECTS, (401, {"message": "still unauthorized"}))
        api.add_token((200, token_payload(access_token="T2")))
        session.token_store.set(make_credentials(access_token="T1", refresh_token="R1"))

        with pytest.raises(AuthenticationError, match="still unauthorized"):
            await session.http_client.get("/projects")

        assert len(api.calls("GET", PROJECTS)) == 2
        assert len(api.token_calls()) == 1

    @pytest.mark.asyncio
    async def test_refresh_failure_clears_credentials(self, session, api) -> None:
        api.add("GET", PROJECTS, (401, {"message": "expired"}))
        api.add_token((400, {"error": "invalid_grant"}))
        session.token_store.set(make_credentials(access_token="T1", refresh_token="R1"))

        with pytest.raises(AuthenticationError):
            await session.http_client.get("/projects")

        assert session.token_store.get() is None
        assert session.auth.current_status() == {"authenticated": False}
        assert len(api.calls("GET", PROJECTS)) == 1

    @pytest.mark.asyncio
    async def test_no_refresh_without_refresh_token(self, session, api) -> None:
        api.add("GET", PROJECTS, (401, {"message": "expired"}))
        session.token_store.set(make_credentials(access_token="T1", refresh_token=None))

        with pytest.raises(AuthenticationError):
            await session.http_client.get("/projects")

        assert api.token_calls() == []

    @pytest.mark.asyncio
    async def test_unauthenticated_calls_skip_recovery(self, session, api) -> None:
        api.add("POST", "/oauth/token", (401, {"error": "invalid_client"}))
        session.token_store.set(make_credentials(access_token="T1", refresh_token="R1"))

        with pytest.raises(AuthenticationError):
            await session.http_client.send(
                "POST", session.config.token_url, data={"grant_type": "client_credentials"}, authenticate=False
            )

        assert len(api.token_calls()) == 1
        assert "Authorization" not in api.token_calls()[0].headers


class TestErrorNormalization:
    """Tests for mapping transport and upstream failures."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,code", [
        (400, "BAD_REQUEST"),
        (403, "AUTHORIZATION_ERROR"),
        (404, "NOT_FOUND"),
        (409, "CONFLICT"),
        (429, "RATE_LIMIT_ERROR"),
        (418, "HTTP_ERROR"),
        (503, "SERVER_ERROR"),
    ])
    async def test_status_mapping(self, session, api, status, code) -> None:
        api.add("GET", PROJECTS, (status, {"message": "upstream says no"}))

        with pytest.raises(UpstreamError) as exc_info:
            await session.http_client.get("/projects")

        assert exc_info.value.code == code
        assert exc_info.value.status_code == status
        assert exc_info.value.message == "upstream says no"

    @pytest.mark.asyncio
    async def test_message_falls_back_to_status(self, session, api) -> None:
        api.add("GET", PROJECTS, (500, None))

        with pytest.raises(UpstreamError, match="HTTP 500"):
            await session.http_client.get("/projects")

    @pytest.mark.asyncio
    async def test_connection_error(self, session, api) -> None:
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        api.add("GET", PROJECTS, refuse)

        with pytest.raises(TransportError) as exc_info:
            await session.http_client.get("/projects")

        assert exc_info.value.code == "NETWORK_ERROR"
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_timeout(self, session, api) -> None:
        def stall(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        api.add("GET", PROJECTS, stall)

        with pytest.raises(TransportError) as exc_info:
            await session.http_client.get("/projects")

        assert exc_info.value.code == "REQUEST_TIMEOUT"

    @pytest.mark.asyncio
    async def test_malformed_json(self, session, api) -> None:
        api.add(
            "GET", PROJECTS,
            lambda request: httpx.Response(200, content=b"{not json", headers={"content-type": "application/json"}),
        )

        with pytest.raises(UpstreamError) as exc_info:
            await session.http_client.get("/projects")

        assert exc_info.value.code == "INVALID_RESPONSE"


class TestResponseDecoding:
    """Tests for success body decoding."""

    @pytest.mark.asyncio
    async def test_empty_body(self, session, api) -> None:
        api.add("DELETE", "/v1/projects/p1", (204, None))
        assert await session.http_client.delete("/projects/p1") is None

    @pytest.mark.asyncio
    async def test_text_body(self, session, api) -> None:
        api.add("GET", "/v1/export", lambda request: httpx.Response(200, text="a,b,c"))
        assert await session.http_client.get("/export") == "a,b,c"

    @pytest.mark.asyncio
    async def test_query_params(self, session, api) -> None:
        api.add("GET", PROJECTS, (200, []))

        await session.http_client.get("/projects", params={"page": 2, "filter.status": "active"})

        request = api.calls("GET", PROJECTS)[0]
        assert request.url.params["page"] == "2"
        assert request.url.params["filter.status"] == "active"
