"""Signature and token utilities built on Ed25519 and JWT primitives."""
from __future__ import annotations

import binascii
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from player_dna.core.settings import settings

ADDRESS_HEX_LENGTH = 64  # 32-byte Ed25519 public key


def normalize_address(address: str) -> str:
    """Return the canonical lowercase hex form of an address.

    Raises:
        ValueError: If the address is not a hex-encoded 32-byte public key.
    """
    cleaned = address.strip().lower()
    if cleaned.startswith("0x"):
        cleaned = cleaned[2:]
    if len(cleaned) != ADDRESS_HEX_LENGTH:
        raise ValueError("Addresses must be 32-byte hex-encoded Ed25519 public keys")
    try:
        bytes.fromhex(cleaned)
    except ValueError as err:
        raise ValueError(f"Invalid hex encoding: {err}") from err
    return cleaned


def verify_signature(pubkey_hex: str, message: bytes, signature: bytes) -> bool:
    """Verify an Ed25519 signature.

    Args:
        pubkey_hex: Hex-encoded 32-byte public key.
        message: Exact bytes that were signed.
        signature: Raw 64-byte signature.

    Returns:
        True if the signature is valid for `message` under `pubkey_hex`; False otherwise.
    """
    try:
        pubkey = VerifyKey(binascii.unhexlify(pubkey_hex))
        pubkey.verify(message, signature)
        return True
    except (BadSignatureError, binascii.Error, ValueError, TypeError):
        return False


def create_access_token(address: str, expires_minutes: int | None = None) -> str:
    """Issue a signed JWT whose subject is the caller address."""
    minutes = settings.access_token_expire_minutes if expires_minutes is None else expires_minutes
    expire = datetime.now(UTC) + timedelta(minutes=minutes)
    payload = {"sub": address, "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str:
    """Return the address encoded in an access token.

    Raises:
        ValueError: If the token is invalid, expired or lacks a subject.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise ValueError("Could not validate credentials") from err
    subject = payload.get("sub")
    if not isinstance(subject, str):
        raise ValueError("Could not validate credentials")
    return subject
