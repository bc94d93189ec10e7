"""SQLAlchemy models for the Player DNA registry."""

from .batch import Batch
from .cooldown import ActionCooldown, ActionKind
from .decryption import DecryptionContext, OracleRequest
from .event import EventRecord
from .provider import Provider
from .record import EncryptedRecord
from .registry_state import RegistryState
from .replay_protection import UsedChallenge

__all__ = [
    "ActionCooldown", "ActionKind",
    "Batch",
    "DecryptionContext", "OracleRequest",
    "EncryptedRecord",
    "EventRecord",
    "Provider",
    "RegistryState",
    "UsedChallenge",
]
