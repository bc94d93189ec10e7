"""Decryption oracle gateway.

The gateway hands ciphertext handles to the external oracle (by queueing an
``OracleRequest`` row that the relay picks up) and verifies the proofs that
come back with each callback. A proof is an Ed25519 signature by the oracle
key over :func:`decryption_message`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from functools import lru_cache
from typing import Final, Protocol

from sqlalchemy.orm import Session

from player_dna.core.security import verify_signature
from player_dna.core.settings import settings
from player_dna.models import OracleRequest
from player_dna.models.decryption import ORACLE_REQUEST_FULFILLED, ORACLE_REQUEST_PENDING
from player_dna.services.crypto import CryptoService
from player_dna.services.fhe import UINT32_MAX

logger = logging.getLogger(__name__)

CLEARTEXT_BYTES: Final[int] = 32
MESSAGE_DOMAIN: Final[bytes] = b"player-dna/decryption/v1"


def encode_cleartext(value: int) -> bytes:
    """Encode a decrypted value as a 32-byte big-endian unsigned integer."""
    return value.to_bytes(CLEARTEXT_BYTES, "big", signed=False)


def decode_cleartext(payload: bytes) -> int:
    """Decode a cleartext payload produced by :func:`encode_cleartext`.

    Raises:
        ValueError: If the payload is not exactly 32 bytes or the value lies
            outside the backend's uint32 plaintext range.
    """
    if len(payload) != CLEARTEXT_BYTES:
        raise ValueError(f"Cleartext payload must be {CLEARTEXT_BYTES} bytes")
    value = int.from_bytes(payload, "big", signed=False)
    if value > UINT32_MAX:
        raise ValueError(f"Cleartext value {value} exceeds the uint32 range")
    return value


def decryption_message(
    request_id: int,
    identity: str,
    handles: Sequence[str],
    cleartext: bytes,
) -> bytes:
    """Return the canonical bytes the oracle signs for a callback."""
    return b"|".join(
        (
            MESSAGE_DOMAIN,
            str(request_id).encode(),
            identity.encode(),
            json.dumps(list(handles)).encode(),
            cleartext.hex().encode(),
        )
    )


class OracleGateway(Protocol):
    """Boundary to the external decryption oracle."""

    def submit(self, db: Session, handles: Sequence[str], now: int) -> int:
        """Ask the oracle to decrypt ``handles``; return the correlation id."""
        ...

    def verify_proof(
        self, db: Session, request_id: int, identity: str, cleartext: bytes, proof: bytes
    ) -> bool:
        """Return True if ``proof`` attests ``cleartext`` for ``request_id``."""
        ...

    def mark_fulfilled(self, db: Session, request_id: int) -> None:
        ...


class SignedOracleGateway:
    """Gateway whose proofs are Ed25519 signatures by a known oracle key."""

    def __init__(self, oracle_public_key: str | None) -> None:
        self.oracle_public_key = oracle_public_key

    def submit(self, db: Session, handles: Sequence[str], now: int) -> int:
        request = OracleRequest(
            handles=json.dumps(list(handles)),
            status=ORACLE_REQUEST_PENDING,
            created_at=now,
        )
        db.add(request)
        db.flush()
        logger.info("Queued oracle request %d for %d handle(s)", request.id, len(handles))
        return int(request.id)

    def verify_proof(
        self, db: Session, request_id: int, identity: str, cleartext: bytes, proof: bytes
    ) -> bool:
        if not self.oracle_public_key:
            logger.warning("No oracle public key configured; rejecting proof for %d", request_id)
            return False

        request = db.get(OracleRequest, request_id)
        if request is None:
            return False

        message = decryption_message(request_id, identity, request_handles(request), cleartext)
        return verify_signature(self.oracle_public_key, message, proof)

    def mark_fulfilled(self, db: Session, request_id: int) -> None:
        request = db.get(OracleRequest, request_id)
        if request is not None:
            request.status = ORACLE_REQUEST_FULFILLED


def request_handles(request: OracleRequest) -> list[str]:
    """Return the handles an oracle request asked to decrypt."""
    return list(json.loads(request.handles))


def oracle_public_key_hex() -> str | None:
    """Return the configured oracle key, deriving it from the signing key if needed."""
    if settings.oracle_public_key:
        return settings.oracle_public_key.lower()
    if settings.oracle_signing_key:
        return CryptoService.public_key_hex(settings.oracle_signing_key)
    return None


@lru_cache
def get_oracle_gateway() -> OracleGateway:
    """Return the process-wide oracle gateway."""
    return SignedOracleGateway(oracle_public_key_hex())
