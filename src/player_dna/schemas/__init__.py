"""Pydantic schemas for request/response validation."""

from .admin import (
    CooldownUpdate,
    OwnershipTransfer,
    ProviderChange,
    ProviderUpdate,
    RegistryStateResponse,
)
from .auth import ChallengeRequest, ChallengeResponse, LoginRequest, LoginResponse
from .batch import BatchResponse, RecordResponse
from .decryption import (
    DecryptionCallback,
    DecryptionContextResponse,
    DecryptionRequest,
    DecryptionRequestResponse,
)
from .event import EventResponse
from .submission import SubmissionRequest, SubmissionResponse

__all__ = [
    "BatchResponse",
    "ChallengeRequest",
    "ChallengeResponse",
    "CooldownUpdate",
    "DecryptionCallback",
    "DecryptionContextResponse",
    "DecryptionRequest",
    "DecryptionRequestResponse",
    "EventResponse",
    "LoginRequest",
    "LoginResponse",
    "OwnershipTransfer",
    "ProviderChange",
    "ProviderUpdate",
    "RecordResponse",
    "RegistryStateResponse",
    "SubmissionRequest",
    "SubmissionResponse",
]
