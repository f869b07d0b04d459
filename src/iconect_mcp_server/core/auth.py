#!/usr/bin/env python3
"""
Iconect MCP Server - Authentication Module

OAuth 2.0 password, authorization code and refresh grants against
{baseUrl}/oauth/token, plus authorization URL construction. The token store
is written only from here and from the HTTP client's failed-refresh path.
"""

import asyncio
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import jwt
from pydantic import ValidationError as PydanticValidationError

from .config import IconectConfig
from .errors import AuthenticationError, IconectError
from .http_client import IconectHttpClient
from .tokens import CredentialSet, TokenResponse, TokenStore

FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


class IconectAuth:
    """Token lifecycle manager for the Iconect API."""

    def __init__(self, config: IconectConfig, http_client: IconectHttpClient, token_store: TokenStore):
        self.config = config
        self.http_client = http_client
        self.token_store = token_store
        self.logger = logging.getLogger(__name__)

        # Single-flight refresh: the guard serializes check-and-set of the slot,
        # it is never held across the network call.
        self._refresh_guard = asyncio.Lock()
        self._refresh_operation: Optional[asyncio.Future] = None

    async def authenticate_with_password(self, username: str, password: str) -> CredentialSet:
        """Exchange username/password for a credential set."""
        self.logger.info(f"Attempting password authentication for user: {username}")

        form = {"grant_type": "password", "username": username, "password": password}
        try:
            credentials = await self._request_token(form)
        except (IconectError, PydanticValidationError) as e:
            self.logger.error(f"Password authentication failed for user {username}: {_reason(e)}")
            raise AuthenticationError(f"Password authentication failed: {_reason(e)}") from e

        self.token_store.set(credentials)
        self.logger.info(f"Password authentication successful for user: {username}")
        return credentials

    async def authenticate_with_authorization_code(
        self,
        code: str,
        code_verifier: Optional[str] = None,
        redirect_uri: Optional[str] = None,
    ) -> CredentialSet:
        """Exchange an authorization code (optionally PKCE-bound) for a credential set."""
        self.logger.info("Attempting authorization code authentication")

        form = {"grant_type": "authorization_code", "code": code}
        if code_verifier:
            form["code_verifier"] = code_verifier
        if redirect_uri:
            form["redirect_uri"] = redirect_uri

        try:
            credentials = await self._request_token(form)
        except (IconectError, PydanticValidationError) as e:
            self.logger.error(f"Authorization code authentication failed: {_reason(e)}")
            raise AuthenticationError(f"Authorization code authentication failed: {_reason(e)}") from e

        self.token_store.set(credentials)
        self.logger.info("Authorization code authentication successful")
        return credentials

    async def ensure_fresh_token(self) -> CredentialSet:
        """Refresh using the stored refresh token, joining any refresh in flight."""
        operation = self._refresh_operation
        if operation is not None:
            return await asyncio.shield(operation)

        credentials = self.token_store.get()
        if credentials is None or not credentials.has_refresh_token():
            raise AuthenticationError("No refresh token available")
        return await self.refresh(credentials.refresh_token)

    async def refresh(self, refresh_token: str) -> CredentialSet:
        """Run the refresh grant. At most one refresh is in flight at a time;
        callers arriving while one is outstanding await its outcome."""
        async with self._refresh_guard:
            operation = self._refresh_operation
            if operation is None:
                operation = asyncio.ensure_future(self._perform_refresh(refresh_token))
                operation.add_done_callback(self._clear_refresh_operation)
                self._refresh_operation = operation
            else:
                self.logger.debug("Token refresh already in progress, awaiting it")

        # Shielded so one cancelled caller does not cancel the shared refresh.
        return await asyncio.shield(operation)

    def _clear_refresh_operation(self, operation: asyncio.Future) -> None:
        if self._refresh_operation is operation:
            self._refresh_operation = None

    async def _perform_refresh(self, refresh_token: str) -> CredentialSet:
        self.logger.info("Attempting token refresh")

        form = {"grant_type": "refresh_token", "refresh_token": refresh_token}
        try:
            credentials = await self._request_token(form, previous_refresh_token=refresh_token)
        except (IconectError, PydanticValidationError) as e:
            self.token_store.clear()
            self.logger.error(f"Token refresh failed, credentials cleared: {_reason(e)}")
            raise AuthenticationError(f"Token refresh failed: {_reason(e)}") from e

        self.token_store.set(credentials)
        self.logger.info("Token refresh successful")
        return credentials

    async def _request_token(
        self, form: Dict[str, str], previous_refresh_token: Optional[str] = None
    ) -> CredentialSet:
        form = dict(form)
        form["client_id"] = self.config.client_id
        if self.config.has_client_secret():
            form["client_secret"] = self.config.client_secret

        payload = await self.http_client.send(
            "POST",
            self.config.token_url,
            data=form,
            headers=FORM_HEADERS,
            authenticate=False,
        )
        token_response = TokenResponse.model_validate(payload)
        return CredentialSet.from_token_response(token_response, previous_refresh_token)

    def build_authorization_url(
        self,
        redirect_uri: str,
        code_challenge: Optional[str] = None,
        state: Optional[str] = None,
        scope: Optional[str] = None,
    ) -> str:
        """Build the browser-facing authorize URL. No network call."""
        params = {
            "response_type": "code",
            "client_id": self.config.client_id,
            "redirect_uri": redirect_uri,
        }
        if state:
            params["state"] = state
        if scope:
            params["scope"] = scope
        if code_challenge:
            params["code_challenge"] = code_challenge
            params["code_challenge_method"] = "S256"

        return f"{self.config.authorize_url}?{urlencode(params)}"

    def logout(self) -> None:
        self.logger.info("Logging out, clearing stored credentials")
        self.token_store.clear()

    def current_status(self) -> Dict[str, Any]:
        """Authentication status. isExpired uses the raw expiry, no skew buffer."""
        credentials = self.token_store.get()
        if credentials is None:
            return {"authenticated": False}

        status = {"authenticated": True, "isExpired": credentials.is_expired()}
        status.update(credentials.summary())

        claims = self.introspect_token()
        if claims and claims.get("sub"):
            status["subject"] = claims["sub"]
        return status

    def introspect_token(self) -> Optional[Dict[str, Any]]:
        """Decode the access token's claims without verification, if it is a JWT."""
        credentials = self.token_store.get()
        if credentials is None:
            return None
        try:
            return jwt.decode(credentials.access_token, options={"verify_signature": False})
        except jwt.PyJWTError:
            return None


def _reason(error: Exception) -> str:
    if isinstance(error, IconectError):
        return error.message
    if isinstance(error, PydanticValidationError):
        return "malformed token response"
    return str(error)
