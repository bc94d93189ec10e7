"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    auth_router,
    batches_router,
    decryption_router,
    events_router,
    submissions_router,
    system_router,
)

__all__ = [
    "admin_router",
    "auth_router",
    "batches_router",
    "decryption_router",
    "events_router",
    "submissions_router",
    "system_router",
]
