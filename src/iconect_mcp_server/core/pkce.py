#!/usr/bin/env python3
"""
Iconect MCP Server - PKCE Helpers

Secrets for the browser leg of the Iconect authorization code flow.
iconect_generate_auth_url puts the S256 challenge and a state value on the
authorize URL and hands the verifier back to the caller, who presents it
again through iconect_auth_code when redeeming the code (RFC 7636 section 4.5).
"""

import base64
import hashlib
import secrets
import string
from dataclasses import dataclass

# RFC 7636 section 4.1 bounds on the verifier length
MIN_VERIFIER_LENGTH = 43
MAX_VERIFIER_LENGTH = 128
DEFAULT_VERIFIER_LENGTH = 64

# "unreserved" from RFC 3986 section 2.3
UNRESERVED_CHARS = string.ascii_uppercase + string.ascii_lowercase + string.digits + "-._~"

STATE_BYTES = 16


@dataclass
class PKCEPair:
    """A verifier kept by the caller and the challenge published on the authorize URL.

    Only S256 is produced; the plain method would leak the verifier itself.
    """

    verifier: str
    challenge: str
    method: str = "S256"


def generate_code_verifier(length: int = DEFAULT_VERIFIER_LENGTH) -> str:
    """Draw a high-entropy code verifier (RFC 7636 section 4.1).

    Each character is picked independently with the secrets module from the
    66 unreserved URI characters, so the result needs no escaping in a form
    body.

    Args:
        length: Number of characters, 43 to 128 inclusive

    Raises:
        ValueError: when length falls outside the RFC bounds
    """
    if not MIN_VERIFIER_LENGTH <= length <= MAX_VERIFIER_LENGTH:
        raise ValueError(
            f"Code verifier length must be between {MIN_VERIFIER_LENGTH} "
            f"and {MAX_VERIFIER_LENGTH}, got {length}"
        )
    return "".join(secrets.choice(UNRESERVED_CHARS) for _ in range(length))


def generate_code_challenge(verifier: str) -> str:
    """S256 transform of a verifier (RFC 7636 section 4.2).

    The SHA-256 digest of the ASCII verifier, base64url encoded with the
    trailing "=" padding removed as RFC 7636 appendix A requires.
    """
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def generate_pkce_pair(length: int = DEFAULT_VERIFIER_LENGTH) -> PKCEPair:
    verifier = generate_code_verifier(length)
    return PKCEPair(verifier, generate_code_challenge(verifier))


def generate_state() -> str:
    """Opaque value binding the redirect to the request that started it.

    RFC 6749 section 10.12 asks clients to send one so a forged redirect can
    be rejected. 16 random bytes, hex encoded to 32 characters.
    """
    return secrets.token_hex(STATE_BYTES)
