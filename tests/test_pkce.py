"""Tests for PKCE helpers."""

import re

import pytest

from iconect_mcp_server.core.pkce import (
    UNRESERVED_CHARS,
    generate_code_challenge,
    generate_code_verifier,
    generate_pkce_pair,
    generate_state,
)


class TestCodeVerifier:
    """Tests for code verifier generation."""

    def test_default_length_and_alphabet(self) -> None:
        verifier = generate_code_verifier()

        assert len(verifier) == 64
        assert set(verifier) <= set(UNRESERVED_CHARS)

    @pytest.mark.parametrize("length", [43, 128])
    def test_boundary_lengths(self, length) -> None:
        assert len(generate_code_verifier(length)) == length

    @pytest.mark.parametrize("length", [42, 129])
    def test_out_of_range_length(self, length) -> None:
        with pytest.raises(ValueError):
            generate_code_verifier(length)

    def test_verifiers_differ(self) -> None:
        assert generate_code_verifier() != generate_code_verifier()


class TestCodeChallenge:
    """Tests for S256 challenge derivation."""

    def test_rfc7636_vector(self) -> None:
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        assert generate_code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"

    def test_pair_is_consistent(self) -> None:
        pair = generate_pkce_pair()

        assert pair.method == "S256"
        assert pair.challenge == generate_code_challenge(pair.verifier)
        assert "=" not in pair.challenge


def test_state_is_hex() -> None:
    assert re.fullmatch(r"[0-9a-f]{32}", generate_state())
