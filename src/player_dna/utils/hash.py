"""BLAKE3 hashing helpers and the decryption state-hash construction."""

from __future__ import annotations

from collections.abc import Iterable

from blake3 import blake3

STATE_HASH_DOMAIN = b"player-dna/state-hash/v1"


def blake3_digest(data: bytes) -> bytes:
    """Return the byte digest of the supplied data."""
    return blake3(data).digest()


def blake3_hexdigest(data: bytes) -> str:
    """Return the hexadecimal digest of the supplied data."""
    return blake3(data).hexdigest()


def compute_state_hash(handles: Iterable[str], identity: str) -> str:
    """Bind a set of ciphertext handles to the registry identity.

    The handles are treated as a set: duplicates collapse and order does not
    matter. Each component is length-prefixed so that no two distinct inputs
    share an encoding.
    """
    hasher = blake3(STATE_HASH_DOMAIN)
    for handle in sorted(set(handles)):
        encoded = handle.encode("utf-8")
        hasher.update(len(encoded).to_bytes(4, "big"))
        hasher.update(encoded)
    encoded_identity = identity.encode("utf-8")
    hasher.update(len(encoded_identity).to_bytes(4, "big"))
    hasher.update(encoded_identity)
    return hasher.hexdigest()
