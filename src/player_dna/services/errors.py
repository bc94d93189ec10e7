"""Domain errors raised by registry operations.

Every error aborts the operation that raised it; the registry rolls back the
unit of work so no partial effect survives. ``status_code`` is the HTTP status
the API layer reports for the error.
"""

from __future__ import annotations


class RegistryError(RuntimeError):
    """Base exception for all registry failures."""

    status_code = 400

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__doc__ or self.__class__.__name__)


class NotOwnerError(RegistryError):
    """Caller is not the registry owner."""

    status_code = 403


class NotProviderError(RegistryError):
    """Caller is not an authorized data provider."""

    status_code = 403


class PausedError(RegistryError):
    """Registry is paused."""

    status_code = 423


class CooldownActiveError(RegistryError):
    """Action attempted before its cooldown elapsed."""

    status_code = 429

    def __init__(self, message: str | None = None, *, retry_at: int | None = None) -> None:
        super().__init__(message)
        self.retry_at = retry_at


class BatchNotActiveError(RegistryError):
    """Target batch is not active."""

    status_code = 409


class InvalidBatchError(RegistryError):
    """Batch id is outside the allocated range."""

    status_code = 404


class ReplayAttemptError(RegistryError):
    """Decryption callback for an unknown or already processed request."""

    status_code = 409


class StateMismatchError(RegistryError):
    """Recomputed state hash does not match the one recorded at request time."""

    status_code = 409


class InvalidProofError(RegistryError):
    """Oracle proof failed verification."""

    status_code = 400


class InvalidCiphertextError(RegistryError):
    """Ciphertext handle rejected by the homomorphic backend."""

    status_code = 422


class UnknownRequestError(RegistryError):
    """No decryption request exists with the given id."""

    status_code = 404


class RegistryNotInitializedError(RegistryError):
    """Registry state has not been bootstrapped yet."""

    status_code = 503
