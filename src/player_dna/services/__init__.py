"""Business logic services for the Player DNA registry."""

from .crypto import CryptoService
from .errors import RegistryError
from .fhe import EmulatedBackend, HomomorphicBackend
from .oracle import OracleGateway, SignedOracleGateway
from .registry import Registry, RegistryConfig
from .replay import ReplayProtectionService

__all__ = [
    "CryptoService",
    "EmulatedBackend",
    "HomomorphicBackend",
    "OracleGateway",
    "Registry",
    "RegistryConfig",
    "RegistryError",
    "ReplayProtectionService",
    "SignedOracleGateway",
]
