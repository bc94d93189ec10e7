"""Owner-only administration endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from player_dna.core.security import normalize_address
from player_dna.schemas.admin import (
    CooldownUpdate,
    OwnershipTransfer,
    ProviderChange,
    ProviderUpdate,
    RegistryStateResponse,
)

from ..dependencies import CurrentCallerDep, RegistryDep

router = APIRouter(prefix="/admin", tags=["administration"])


@router.post("/ownership", response_model=RegistryStateResponse)
async def transfer_ownership(
    payload: OwnershipTransfer,
    registry: RegistryDep,
    caller: CurrentCallerDep,
) -> RegistryStateResponse:
    state = registry.transfer_ownership(caller, payload.new_owner)
    return RegistryStateResponse.model_validate(state)


@router.post("/providers", response_model=ProviderChange)
async def add_provider(
    payload: ProviderUpdate,
    registry: RegistryDep,
    caller: CurrentCallerDep,
) -> ProviderChange:
    changed = registry.add_provider(caller, payload.address)
    return ProviderChange(address=payload.address, changed=changed)


@router.delete("/providers/{address}", response_model=ProviderChange)
async def remove_provider(
    address: str,
    registry: RegistryDep,
    caller: CurrentCallerDep,
) -> ProviderChange:
    try:
        address = normalize_address(address)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(err),
        ) from err
    changed = registry.remove_provider(caller, address)
    return ProviderChange(address=address, changed=changed)


@router.put("/cooldowns", response_model=RegistryStateResponse)
async def set_cooldown(
    payload: CooldownUpdate,
    registry: RegistryDep,
    caller: CurrentCallerDep,
) -> RegistryStateResponse:
    state = registry.set_cooldown(caller, payload.action, payload.seconds)
    return RegistryStateResponse.model_validate(state)


@router.post("/pause", response_model=RegistryStateResponse)
async def pause(registry: RegistryDep, caller: CurrentCallerDep) -> RegistryStateResponse:
    """Block submissions and decryption requests until unpaused."""
    return RegistryStateResponse.model_validate(registry.pause(caller))


@router.post("/unpause", response_model=RegistryStateResponse)
async def unpause(registry: RegistryDep, caller: CurrentCallerDep) -> RegistryStateResponse:
    return RegistryStateResponse.model_validate(registry.unpause(caller))
