#!/usr/bin/env python3
"""
Authentication Tools for Iconect MCP Server

Provides the OAuth operations: password and authorization code grants, token
refresh, authorization URL generation, logout and status.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from ...core.auth import IconectAuth
from ...core.envelope import success_envelope
from ...core.logging_utils import get_tool_logger
from ...core.pkce import generate_pkce_pair, generate_state
from ...core.registry import CommandDescriptor, CommandInput, EmptyInput

tool_logger = get_tool_logger("auth")


class AuthPasswordInput(CommandInput):
    username: str = Field(..., min_length=1, description="Username for authentication")
    password: str = Field(..., min_length=1, description="Password for authentication")


class AuthCodeInput(CommandInput):
    auth_code: str = Field(..., min_length=1, alias="authCode", description="Authorization code received from OAuth flow")
    code_verifier: Optional[str] = Field(default=None, alias="codeVerifier", description="PKCE code verifier (optional)")
    redirect_uri: Optional[str] = Field(
        default=None, alias="redirectUri",
        description="Redirect URI used in the authorization request (optional)",
    )


class RefreshTokenInput(CommandInput):
    refresh_token: Optional[str] = Field(
        default=None, min_length=1, alias="refreshToken",
        description="Refresh token to use (default: the stored refresh token)",
    )


class GenerateAuthUrlInput(CommandInput):
    redirect_uri: str = Field(..., min_length=1, alias="redirectUri", description="Redirect URI for OAuth callback")
    code_challenge: Optional[str] = Field(default=None, alias="codeChallenge", description="PKCE code challenge (optional)")
    state: Optional[str] = Field(default=None, description="State parameter for CSRF protection (optional)")
    scope: Optional[str] = Field(default=None, description="Space-separated scopes to request (optional)")
    use_pkce: bool = Field(
        default=False, alias="usePkce",
        description="Generate a PKCE verifier/challenge pair when no codeChallenge is given",
    )


class AuthTools:
    """Auth commands backed by the session's IconectAuth."""

    def __init__(self, auth: IconectAuth):
        self.auth = auth

    def get_commands(self) -> List[CommandDescriptor]:
        return [
            CommandDescriptor(
                name="iconect_auth_password",
                description="Authenticate with Iconect using username and password credentials",
                input_model=AuthPasswordInput,
                handler=self.auth_password,
            ),
            CommandDescriptor(
                name="iconect_auth_code",
                description="Authenticate with Iconect using an OAuth 2.0 authorization code",
                input_model=AuthCodeInput,
                handler=self.auth_code,
            ),
            CommandDescriptor(
                name="iconect_refresh_token",
                description="Refresh the current access token using a refresh token",
                input_model=RefreshTokenInput,
                handler=self.refresh_token,
            ),
            CommandDescriptor(
                name="iconect_generate_auth_url",
                description="Generate OAuth 2.0 authorization URL for authentication",
                input_model=GenerateAuthUrlInput,
                handler=self.generate_auth_url,
            ),
            CommandDescriptor(
                name="iconect_logout",
                description="Logout and clear authentication tokens",
                input_model=EmptyInput,
                handler=self.logout,
            ),
            CommandDescriptor(
                name="iconect_get_auth_status",
                description="Get current authentication status and token information",
                input_model=EmptyInput,
                handler=self.get_auth_status,
            ),
        ]

    async def auth_password(self, params: AuthPasswordInput) -> Dict[str, Any]:
        tool_logger.info(f"Processing password authentication request for user: {params.username}")
        credentials = await self.auth.authenticate_with_password(params.username, params.password)
        return success_envelope("Authentication successful", credentials.summary())

    async def auth_code(self, params: AuthCodeInput) -> Dict[str, Any]:
        tool_logger.info("Processing authorization code authentication request")
        credentials = await self.auth.authenticate_with_authorization_code(
            params.auth_code, params.code_verifier, params.redirect_uri
        )
        return success_envelope("Authentication successful", credentials.summary())

    async def refresh_token(self, params: RefreshTokenInput) -> Dict[str, Any]:
        tool_logger.info("Processing token refresh request")
        if params.refresh_token:
            credentials = await self.auth.refresh(params.refresh_token)
        else:
            credentials = await self.auth.ensure_fresh_token()
        return success_envelope("Token refresh successful", credentials.summary())

    async def generate_auth_url(self, params: GenerateAuthUrlInput) -> Dict[str, Any]:
        tool_logger.info(f"Generating authorization URL for redirect URI: {params.redirect_uri}")

        code_challenge = params.code_challenge
        state = params.state
        code_verifier = None
        if params.use_pkce and not code_challenge:
            pair = generate_pkce_pair()
            code_challenge = pair.challenge
            code_verifier = pair.verifier
            state = state or generate_state()

        auth_url = self.auth.build_authorization_url(params.redirect_uri, code_challenge, state, params.scope)

        data: Dict[str, Any] = {
            "authUrl": auth_url,
            "redirectUri": params.redirect_uri,
            "state": state,
            "usePKCE": bool(code_challenge),
        }
        if code_verifier:
            # Needed later by iconect_auth_code
            data["codeVerifier"] = code_verifier
        return success_envelope("Authorization URL generated", data)

    async def logout(self, params: EmptyInput) -> Dict[str, Any]:
        tool_logger.info("Processing logout request")
        self.auth.logout()
        return success_envelope("Logout successful", {})

    async def get_auth_status(self, params: EmptyInput) -> Dict[str, Any]:
        status = self.auth.current_status()
        message = "Authentication status retrieved" if status["authenticated"] else "Not authenticated"
        return success_envelope(message, status)
