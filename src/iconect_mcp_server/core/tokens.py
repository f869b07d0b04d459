#!/usr/bin/env python3
"""
Iconect MCP Server - Token Store

Credential set data structures and the in-memory holder shared by the HTTP
client and the auth service.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field

# Safety margin applied before attaching a token to an outgoing request
TOKEN_SKEW_SECONDS = 30


class TokenResponse(BaseModel):
    """Body returned by the token endpoint."""

    access_token: str = Field(..., min_length=1)
    token_type: str = Field(default="Bearer")
    expires_in: int = Field(..., ge=0)
    refresh_token: Optional[str] = None
    scope: Optional[str] = None


@dataclass(frozen=True)
class CredentialSet:
    """OAuth credentials as held by the token store.

    Attributes:
        access_token: The access token string
        token_type: Token type used as the Authorization scheme (typically "Bearer")
        expires_at: When the access token expires (UTC)
        refresh_token: Optional refresh token for obtaining new access tokens
        scope: Space-separated list of granted scopes
    """

    access_token: str
    token_type: str
    expires_at: datetime
    refresh_token: Optional[str] = None
    scope: Optional[str] = None

    @classmethod
    def from_token_response(
        cls, response: TokenResponse, previous_refresh_token: Optional[str] = None
    ) -> "CredentialSet":
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=response.expires_in)
        return cls(
            access_token=response.access_token,
            token_type=response.token_type or "Bearer",
            expires_at=expires_at,
            refresh_token=response.refresh_token or previous_refresh_token,
            scope=response.scope,
        )

    def is_expired(self, buffer_seconds: int = 0) -> bool:
        """True once now is within buffer_seconds of expires_at."""
        now = datetime.now(timezone.utc)
        return now >= self.expires_at - timedelta(seconds=buffer_seconds)

    def is_usable(self) -> bool:
        """Whether the token may still be attached to a request."""
        return not self.is_expired(TOKEN_SKEW_SECONDS)

    def has_refresh_token(self) -> bool:
        return bool(self.refresh_token)

    @property
    def authorization_header(self) -> str:
        return f"{self.token_type} {self.access_token}"

    def summary(self) -> dict:
        """Token metadata safe to hand back to a caller."""
        return {
            "tokenType": self.token_type,
            "expiresAt": self.expires_at.isoformat(),
            "scope": self.scope,
            "hasRefreshToken": self.has_refresh_token(),
        }


class TokenStore:
    """Holds the current credential set. Replaced wholesale, never mutated."""

    def __init__(self):
        self._lock = threading.Lock()
        self._credentials: Optional[CredentialSet] = None

    def get(self) -> Optional[CredentialSet]:
        with self._lock:
            return self._credentials

    def set(self, credentials: CredentialSet) -> None:
        with self._lock:
            self._credentials = credentials

    def clear(self) -> None:
        with self._lock:
            self._credentials = None

    def has_credentials(self) -> bool:
        return self.get() is not None
