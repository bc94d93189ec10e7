"""Cryptographic services for the registry."""

from __future__ import annotations

import base64
import secrets

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from player_dna.core.settings import settings
from player_dna.utils.hash import blake3_digest

CHALLENGE_NONCE_BYTES = 16
CHALLENGE_TIMESTAMP_BYTES = 8
CHALLENGE_MAC_BYTES = 32
CHALLENGE_PAYLOAD_BYTES = CHALLENGE_NONCE_BYTES + CHALLENGE_TIMESTAMP_BYTES + CHALLENGE_MAC_BYTES


class CryptoService:
    """Service handling key material, signing and login challenges."""

    @staticmethod
    def _encode_base64(data: bytes) -> str:
        return base64.urlsafe_b64encode(data).decode().rstrip("=")

    @staticmethod
    def _decode_base64(data: str) -> bytes:
        """Decode a URL-safe base64 string, accepting omitted padding."""
        padding = "=" * (-len(data) % 4)
        try:
            return base64.urlsafe_b64decode(data + padding)
        except Exception as err:
            raise ValueError(f"Invalid base64 encoding: {err}") from err

    @staticmethod
    def generate_key_pair() -> tuple[str, str]:
        """Generate a new Ed25519 key pair.

        Returns:
            Tuple of (private_key_hex, public_key_hex)
        """
        private_key = Ed25519PrivateKey.generate()
        private_hex = private_key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        ).hex()
        return private_hex, CryptoService.public_key_hex(private_hex)

    @staticmethod
    def public_key_hex(private_key_hex: str) -> str:
        """Return the hex public key (the address) for a hex private key."""
        try:
            private_key = Ed25519PrivateKey.from_private_bytes(bytes.fromhex(private_key_hex))
        except ValueError as err:
            raise ValueError(f"Invalid private key hex: {err}") from err
        return private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        ).hex()

    @staticmethod
    def sign_message_hex(private_key_hex: str, message: bytes) -> bytes:
        """Sign a message with a hex-encoded Ed25519 private key.

        Args:
            private_key_hex: Hex-encoded Ed25519 private key
            message: Message to sign

        Returns:
            Raw signature bytes
        """
        try:
            private_key = Ed25519PrivateKey.from_private_bytes(bytes.fromhex(private_key_hex))
        except ValueError as err:
            raise ValueError(f"Invalid private key hex: {err}") from err
        return private_key.sign(message)

    @staticmethod
    def _challenge_mac(address: str, nonce: bytes, issued_at: bytes) -> bytes:
        secret: bytes = str(settings.secret_key).encode()
        return blake3_digest(b"|".join((b"login", address.encode(), nonce, issued_at, secret)))

    @staticmethod
    def issue_auth_challenge(address: str, now: int) -> str:
        """Generate a MAC-protected login challenge for ``address``.

        Returns:
            URL-safe base64 challenge the client must sign.
        """
        nonce = secrets.token_bytes(CHALLENGE_NONCE_BYTES)
        issued_at = now.to_bytes(CHALLENGE_TIMESTAMP_BYTES, "big")
        mac = CryptoService._challenge_mac(address, nonce, issued_at)
        return CryptoService._encode_base64(nonce + issued_at + mac)

    @staticmethod
    def validate_auth_challenge(address: str, challenge_b64: str, now: int) -> tuple[bytes, str]:
        """Validate a previously issued login challenge.

        Returns:
            Tuple of (raw challenge bytes, nonce hex)

        Raises:
            ValueError: If the challenge is malformed, forged or expired
        """
        challenge = CryptoService._decode_base64(challenge_b64)
        if len(challenge) != CHALLENGE_PAYLOAD_BYTES:
            raise ValueError("Invalid challenge payload size")

        nonce = challenge[:CHALLENGE_NONCE_BYTES]
        issued_at = challenge[CHALLENGE_NONCE_BYTES:CHALLENGE_NONCE_BYTES + CHALLENGE_TIMESTAMP_BYTES]
        supplied_mac = challenge[CHALLENGE_NONCE_BYTES + CHALLENGE_TIMESTAMP_BYTES:]

        expected_mac = CryptoService._challenge_mac(address, nonce, issued_at)
        if not secrets.compare_digest(supplied_mac, expected_mac):
            raise ValueError("Challenge signature mismatch")

        issued = int.from_bytes(issued_at, "big")
        if now - issued > settings.auth_challenge_ttl_seconds or issued > now:
            raise ValueError("Challenge has expired")

        return challenge, nonce.hex()
