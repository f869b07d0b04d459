"""Tests for credential sets and the token store."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from iconect_mcp_server.core.tokens import CredentialSet, TokenResponse, TokenStore

from .conftest import make_credentials


class TestTokenResponse:
    """Tests for token endpoint response parsing."""

    def test_token_type_defaults_to_bearer(self) -> None:
        response = TokenResponse.model_validate({"access_token": "T", "expires_in": 60})
        assert response.token_type == "Bearer"
        assert response.refresh_token is None

    @pytest.mark.parametrize("payload", [
        {"expires_in": 60},
        {"access_token": "", "expires_in": 60},
        {"access_token": "T"},
        {"access_token": "T", "expires_in": -1},
    ])
    def test_rejects_malformed_payload(self, payload) -> None:
        with pytest.raises(PydanticValidationError):
            TokenResponse.model_validate(payload)


class TestCredentialSet:
    """Tests for CredentialSet construction and expiry checks."""

    def test_expiry_computed_from_expires_in(self) -> None:
        before = datetime.now(timezone.utc)
        credentials = CredentialSet.from_token_response(
            TokenResponse(access_token="T", expires_in=3600)
        )
        after = datetime.now(timezone.utc)

        assert before + timedelta(seconds=3600) <= credentials.expires_at <= after + timedelta(seconds=3600)

    def test_keeps_previous_refresh_token_when_omitted(self) -> None:
        credentials = CredentialSet.from_token_response(
            TokenResponse(access_token="T2", expires_in=60), previous_refresh_token="R1"
        )
        assert credentials.refresh_token == "R1"

    def test_new_refresh_token_wins(self) -> None:
        credentials = CredentialSet.from_token_response(
            TokenResponse(access_token="T2", expires_in=60, refresh_token="R2"), previous_refresh_token="R1"
        )
        assert credentials.refresh_token == "R2"

    def test_skew_buffer(self) -> None:
        credentials = make_credentials(expires_in=10)

        # Not yet expired, but too close to expiry to attach.
        assert not credentials.is_expired()
        assert not credentials.is_usable()

    def test_usable_well_before_expiry(self) -> None:
        credentials = make_credentials(expires_in=3600)
        assert credentials.is_usable()
        assert credentials.authorization_header == "Bearer T1"

    def test_summary_excludes_tokens(self) -> None:
        credentials = make_credentials(access_token="secret-access", refresh_token="secret-refresh")
        summary = credentials.summary()

        assert summary["tokenType"] == "Bearer"
        assert summary["hasRefreshToken"] is True
        assert "secret-access" not in str(summary)
        assert "secret-refresh" not in str(summary)


class TestTokenStore:
    """Tests for the in-memory token store."""

    def test_starts_empty(self) -> None:
        store = TokenStore()
        assert store.get() is None
        assert not store.has_credentials()

    def test_set_replaces_and_clear_empties(self) -> None:
        store = TokenStore()
        first = make_credentials(access_token="A")
        second = make_credentials(access_token="B")

        store.set(first)
        store.set(second)
        assert store.get() is second

        store.clear()
        assert store.get() is None
