"""System and transparency endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from player_dna.core.settings import settings
from player_dna.services.oracle import oracle_public_key_hex
from player_dna.services.oracle_relay import relay_enabled
from player_dna.services.player_types import PLAYER_TYPES, UNRANKED

from ..dependencies import RegistryDep

router = APIRouter(prefix="/system", tags=["system", "transparency"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "jwt_algorithm": settings.jwt_algorithm,
            "access_token_expire_minutes": settings.access_token_expire_minutes,
            "debug": settings.debug,
        },
        "registry": {
            "identity": settings.registry_identity,
            "player_type_bucket_width": settings.player_type_bucket_width,
            "player_types": [UNRANKED, *PLAYER_TYPES],
        },
        "oracle": {
            "public_key": oracle_public_key_hex(),
            "relay_enabled": relay_enabled(),
        },
    }


@router.get("/status")
async def get_status(registry: RegistryDep) -> dict[str, object]:
    """Return the live registry state, or ``initialized: false`` before bootstrap."""
    if not registry.is_initialized():
        return {"initialized": False}

    state = registry.state()
    current_batch_id = int(state.current_batch_id)
    return {
        "initialized": True,
        "identity": state.identity,
        "owner": state.owner,
        "paused": bool(state.paused),
        "current_batch_id": current_batch_id,
        "current_batch_active": registry.is_batch_active(current_batch_id),
        "cooldowns": {
            "submission_seconds": state.submission_cooldown_seconds,
            "decryption_request_seconds": state.decryption_cooldown_seconds,
        },
        "providers": registry.providers(),
        "pending_requests": len(registry.pending_contexts()),
    }
