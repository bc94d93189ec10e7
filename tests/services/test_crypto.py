"""Tests for key handling and login challenges."""

from __future__ import annotations

import pytest

from player_dna.core.security import verify_signature
from player_dna.core.settings import settings
from player_dna.services.crypto import CryptoService

NOW = 1_700_000_000


def test_generated_key_pair_signs_verifiably() -> None:
    private_hex, public_hex = CryptoService.generate_key_pair()
    assert CryptoService.public_key_hex(private_hex) == public_hex

    signature = CryptoService.sign_message_hex(private_hex, b"hello")
    assert verify_signature(public_hex, b"hello", signature)
    assert not verify_signature(public_hex, b"hello!", signature)


def test_nacl_seed_is_accepted_as_private_key(oracle) -> None:
    assert CryptoService.public_key_hex(oracle.private_key_hex) == oracle.address


def test_invalid_private_key_hex() -> None:
    with pytest.raises(ValueError):
        CryptoService.public_key_hex("zz")


def test_challenge_round_trip(player) -> None:
    challenge = CryptoService.issue_auth_challenge(player.address, NOW)
    raw, nonce_hex = CryptoService.validate_auth_challenge(player.address, challenge, NOW + 1)
    assert len(raw) == 56
    assert raw[:16].hex() == nonce_hex


def test_challenge_is_bound_to_address(player, outsider) -> None:
    challenge = CryptoService.issue_auth_challenge(player.address, NOW)
    with pytest.raises(ValueError, match="mismatch"):
        CryptoService.validate_auth_challenge(outsider.address, challenge, NOW)


def test_challenge_expires(player) -> None:
    challenge = CryptoService.issue_auth_challenge(player.address, NOW)
    late = NOW + settings.auth_challenge_ttl_seconds + 1
    with pytest.raises(ValueError, match="expired"):
        CryptoService.validate_auth_challenge(player.address, challenge, late)


def test_challenge_with_bad_size(player) -> None:
    with pytest.raises(ValueError, match="size"):
        CryptoService.validate_auth_challenge(player.address, "AAAA", NOW)
