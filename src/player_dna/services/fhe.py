"""Homomorphic compute capability.

The registry never sees plaintext: it only moves opaque ciphertext handles
around and asks the backend to derive new handles from existing ones. The
backend is injected so that a real FHE engine and the deterministic emulation
used in development and tests are interchangeable.
"""

from __future__ import annotations

import base64
import binascii
from functools import lru_cache
from typing import Final, Protocol

from player_dna.services.errors import InvalidCiphertextError

UINT32_MAX: Final[int] = 2**32 - 1
MAX_HANDLE_LENGTH: Final[int] = 4096


class HomomorphicBackend(Protocol):
    """Narrow interface to the encryption engine."""

    def import_ciphertext(self, handle: str) -> str:
        """Validate an externally produced handle and return its canonical form."""
        ...

    def zero(self) -> str:
        """Return a handle encrypting the neutral value 0."""
        ...

    def derive(self, skill_handle: str, play_count_handle: str) -> str:
        """Compute the result handle from a skill score and a play count.

        Must be pure and total: every pair of valid handles yields a handle.
        """
        ...

    def decrypt(self, handle: str) -> int:
        """Decrypt a handle. Only the oracle side is allowed to call this."""
        ...


class EmulatedBackend:
    """Deterministic stand-in for an FHE engine.

    Handles have the form ``FHE-<base64 of the decimal value>``, the same
    encoding the web client uses for its mock ciphertexts. Values are
    unsigned 32-bit integers. The derived result is the average skill per
    play, ``skill // plays``, with 0 when no plays were recorded.
    """

    PREFIX: Final[str] = "FHE-"

    def encrypt(self, value: int) -> str:
        if not 0 <= value <= UINT32_MAX:
            raise InvalidCiphertextError(f"Value {value} is outside the uint32 range")
        encoded = base64.b64encode(str(value).encode("ascii")).decode("ascii")
        return f"{self.PREFIX}{encoded}"

    def _value(self, handle: str) -> int:
        if len(handle) > MAX_HANDLE_LENGTH or not handle.startswith(self.PREFIX):
            raise InvalidCiphertextError("Malformed ciphertext handle")
        try:
            text = base64.b64decode(handle[len(self.PREFIX):], validate=True).decode("ascii")
        except (binascii.Error, UnicodeDecodeError) as err:
            raise InvalidCiphertextError("Malformed ciphertext handle") from err
        if not text.isdigit():
            raise InvalidCiphertextError("Malformed ciphertext handle")
        value = int(text)
        if value > UINT32_MAX:
            raise InvalidCiphertextError("Ciphertext value exceeds the uint32 range")
        return value

    def import_ciphertext(self, handle: str) -> str:
        return self.encrypt(self._value(handle.strip()))

    def zero(self) -> str:
        return self.encrypt(0)

    def derive(self, skill_handle: str, play_count_handle: str) -> str:
        skill = self._value(skill_handle)
        plays = self._value(play_count_handle)
        if plays == 0:
            return self.zero()
        return self.encrypt(skill // plays)

    def decrypt(self, handle: str) -> int:
        return self._value(handle)


@lru_cache
def get_backend() -> HomomorphicBackend:
    """Return the process-wide homomorphic backend."""
    return EmulatedBackend()
