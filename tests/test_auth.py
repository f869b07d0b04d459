"""Tests for the OAuth token lifecycle."""

import asyncio
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qsl, urlsplit

import httpx
import jwt
import pytest

from iconect_mcp_server.core.config import IconectConfig
from iconect_mcp_server.core.dispatcher import build_session
from iconect_mcp_server.core.errors import AuthenticationError

from .conftest import BASE_URL, form_of, make_credentials, token_payload


class TestPasswordGrant:
    """Tests for username/password authentication."""

    @pytest.mark.asyncio
    async def test_success_stores_credentials(self, session, api) -> None:
        api.add_token((200, {"access_token": "T", "token_type": "Bearer", "expires_in": 3600}))

        credentials = await session.auth.authenticate_with_password("u", "p")

        now = datetime.now(timezone.utc)
        assert credentials.access_token == "T"
        assert abs((credentials.expires_at - (now + timedelta(seconds=3600))).total_seconds()) < 5
        assert session.token_store.get() is credentials

        status = session.auth.current_status()
        assert status["authenticated"] is True
        assert status["isExpired"] is False

    @pytest.mark.asyncio
    async def test_request_is_form_encoded_without_bearer(self, session, api) -> None:
        api.add_token((200, token_payload()))
        session.token_store.set(make_credentials(access_token="OLD"))

        await session.auth.authenticate_with_password("alice", "pw")

        request = api.token_calls()[0]
        assert request.url == httpx.URL(f"{BASE_URL}/oauth/token")
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert "Authorization" not in request.headers
        assert form_of(request) == {
            "grant_type": "password",
            "username": "alice",
            "password": "pw",
            "client_id": "c1",
        }

    @pytest.mark.asyncio
    async def test_confidential_client_sends_secret(self, api) -> None:
        config = IconectConfig(base_url=BASE_URL, client_id="c1", client_secret="s3cret")
        session = build_session(config, transport=api.transport)
        api.add_token((200, token_payload()))
        try:
            await session.auth.authenticate_with_password("u", "p")
        finally:
            await session.close()

        assert form_of(api.token_calls()[0])["client_secret"] == "s3cret"

    @pytest.mark.asyncio
    async def test_rejected_grant(self, session, api) -> None:
        api.add_token((400, {"error": "invalid_grant", "error_description": "Bad credentials"}))

        with pytest.raises(AuthenticationError, match="Bad credentials"):
            await session.auth.authenticate_with_password("u", "wrong")

        assert session.token_store.get() is None

    @pytest.mark.asyncio
    async def test_malformed_token_response(self, session, api) -> None:
        api.add_token((200, {"token_type": "Bearer"}))

        with pytest.raises(AuthenticationError, match="malformed token response"):
            await session.auth.authenticate_with_password("u", "p")


class TestAuthorizationCodeGrant:
    """Tests for authorization code exchange."""

    @pytest.mark.asyncio
    async def test_with_verifier_and_redirect(self, session, api) -> None:
        api.add_token((200, token_payload()))

        await session.auth.authenticate_with_authorization_code(
            "code-1", code_verifier="verifier-1", redirect_uri="https://app.test/cb"
        )

        form = form_of(api.token_calls()[0])
        assert form["grant_type"] == "authorization_code"
        assert form["code"] == "code-1"
        assert form["code_verifier"] == "verifier-1"
        assert form["redirect_uri"] == "https://app.test/cb"

    @pytest.mark.asyncio
    async def test_without_optional_fields(self, session, api) -> None:
        api.add_token((200, token_payload()))

        await session.auth.authenticate_with_authorization_code("code-1")

        form = form_of(api.token_calls()[0])
        assert "code_verifier" not in form
        assert "redirect_uri" not in form


class TestRefresh:
    """Tests for the refresh grant and single-flight behaviour."""

    @pytest.mark.asyncio
    async def test_refresh_keeps_refresh_token_when_omitted(self, session, api) -> None:
        api.add_token((200, token_payload(access_token="T2", refresh_token=None)))
        session.token_store.set(make_credentials(refresh_token="R1"))

        credentials = await session.auth.ensure_fresh_token()

        assert form_of(api.token_calls()[0])["refresh_token"] == "R1"
        assert credentials.access_token == "T2"
        assert credentials.refresh_token == "R1"

    @pytest.mark.asyncio
    async def test_no_refresh_token_available(self, session, api) -> None:
        session.token_store.set(make_credentials(refresh_token=None))

        with pytest.raises(AuthenticationError, match="No refresh token available"):
            await session.auth.ensure_fresh_token()

        assert api.token_calls() == []

    @pytest.mark.asyncio
    async def test_concurrent_refreshes_share_one_request(self, session, api) -> None:
        async def slow_token(request):
            await asyncio.sleep(0.05)
            return httpx.Response(200, json=token_payload(access_token="T2", refresh_token="R2"))

        api.add_token(slow_token)
        session.token_store.set(make_credentials(refresh_token="R1"))

        results = await asyncio.gather(*(session.auth.ensure_fresh_token() for _ in range(5)))

        assert len(api.token_calls()) == 1
        assert all(result is results[0] for result in results)
        assert session.token_store.get() is results[0]

    @pytest.mark.asyncio
    async def test_concurrent_refreshes_share_failure(self, session, api) -> None:
        async def slow_rejection(request):
            await asyncio.sleep(0.05)
            return httpx.Response(400, json={"error": "invalid_grant"})

        api.add_token(slow_rejection)
        session.token_store.set(make_credentials(refresh_token="R1"))

        results = await asyncio.gather(
            *(session.auth.ensure_fresh_token() for _ in range(3)), return_exceptions=True
        )

        assert len(api.token_calls()) == 1
        assert all(isinstance(result, AuthenticationError) for result in results)
        assert session.token_store.get() is None

    @pytest.mark.asyncio
    async def test_concurrent_unauthorized_requests_refresh_once(self, session, api) -> None:
        async def slow_token(request):
            await asyncio.sleep(0.05)
            return httpx.Response(200, json=token_payload(access_token="T2"))

        def projects(request):
            if request.headers.get("Authorization") == "Bearer T2":
                return httpx.Response(200, json={"items": []})
            return httpx.Response(401, json={"message": "expired"})

        api.add_token(slow_token)
        api.add("GET", "/v1/projects", projects)
        session.token_store.set(make_credentials(access_token="T1", refresh_token="R1"))

        results = await asyncio.gather(*(session.http_client.get("/projects") for _ in range(3)))

        assert results == [{"items": []}] * 3
        assert len(api.token_calls()) == 1

    @pytest.mark.asyncio
    async def test_slot_cleared_after_completion(self, session, api) -> None:
        api.add_token((200, token_payload(access_token="T2", refresh_token="R2")))
        session.token_store.set(make_credentials(refresh_token="R1"))

        await session.auth.ensure_fresh_token()
        await asyncio.sleep(0)
        assert session.auth._refresh_operation is None

        await session.auth.ensure_fresh_token()
        assert len(api.token_calls()) == 2
        assert form_of(api.token_calls()[1])["refresh_token"] == "R2"

    @pytest.mark.asyncio
    async def test_slot_cleared_after_failure(self, session, api) -> None:
        api.add_token((400, {"error": "invalid_grant"}), (200, token_payload(access_token="T3")))

        with pytest.raises(AuthenticationError):
            await session.auth.refresh("R1")
        await asyncio.sleep(0)
        assert session.auth._refresh_operation is None

        credentials = await session.auth.refresh("R1")
        assert credentials.access_token == "T3"


class TestAuthorizationUrl:
    """Tests for authorize URL construction."""

    @pytest.mark.asyncio
    async def test_minimal(self, session) -> None:
        url = session.auth.build_authorization_url("https://app.test/cb")

        parts = urlsplit(url)
        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == f"{BASE_URL}/oauth/authorize"
        assert parse_qsl(parts.query) == [
            ("response_type", "code"),
            ("client_id", "c1"),
            ("redirect_uri", "https://app.test/cb"),
        ]

    @pytest.mark.asyncio
    async def test_with_pkce_state_and_scope(self, session) -> None:
        url = session.auth.build_authorization_url(
            "https://app.test/cb", code_challenge="abc", state="xyz", scope="read write"
        )

        params = dict(parse_qsl(urlsplit(url).query))
        assert params["state"] == "xyz"
        assert params["scope"] == "read write"
        assert params["code_challenge"] == "abc"
        assert params["code_challenge_method"] == "S256"


class TestStatusAndLogout:
    """Tests for status reporting and logout."""

    @pytest.mark.asyncio
    async def test_logout_clears_store(self, session) -> None:
        session.token_store.set(make_credentials())

        session.auth.logout()

        assert session.token_store.get() is None
        assert session.auth.current_status() == {"authenticated": False}

    @pytest.mark.asyncio
    async def test_status_reports_expired_token(self, session) -> None:
        session.token_store.set(make_credentials(expires_in=-60))

        status = session.auth.current_status()

        assert status["authenticated"] is True
        assert status["isExpired"] is True

    @pytest.mark.asyncio
    async def test_status_includes_jwt_subject(self, session) -> None:
        token = jwt.encode({"sub": "user-42"}, "a-signing-key-long-enough-for-hs256!", algorithm="HS256")
        session.token_store.set(make_credentials(access_token=token))

        assert session.auth.current_status()["subject"] == "user-42"

    @pytest.mark.asyncio
    async def test_status_without_jwt(self, session) -> None:
        session.token_store.set(make_credentials(access_token="opaque-token"))

        status = session.auth.current_status()

        assert "subject" not in status
        assert "opaque-token" not in str(status)
