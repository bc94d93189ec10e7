"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .auth import router as auth_router
from .batches import router as batches_router
from .decryption import router as decryption_router
from .events import router as events_router
from .submissions import router as submissions_router
from .system import router as system_router

__all__ = [
    "admin_router",
    "auth_router",
    "batches_router",
    "decryption_router",
    "events_router",
    "submissions_router",
    "system_router",
]
