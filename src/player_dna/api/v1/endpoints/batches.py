"""Batch lifecycle and record lookup endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from player_dna.core.security import normalize_address
from player_dna.schemas.batch import BatchResponse, RecordResponse

from ..dependencies import CurrentCallerDep, RegistryDep

router = APIRouter(prefix="/batches", tags=["batches"])


@router.get("/current", response_model=BatchResponse)
async def get_current_batch(registry: RegistryDep) -> BatchResponse:
    batch = registry.get_batch(registry.current_batch_id())
    return BatchResponse.model_validate(batch)


@router.post("", response_model=BatchResponse, status_code=status.HTTP_201_CREATED)
async def open_batch(registry: RegistryDep, caller: CurrentCallerDep) -> BatchResponse:
    """Open a new batch, closing the current one if it is still active."""
    return BatchResponse.model_validate(registry.open_batch(caller))


@router.post("/current/close", response_model=BatchResponse)
async def close_current_batch(registry: RegistryDep, caller: CurrentCallerDep) -> BatchResponse:
    return BatchResponse.model_validate(registry.close_batch(caller))


@router.get("/{batch_id}", response_model=BatchResponse)
async def get_batch(batch_id: int, registry: RegistryDep) -> BatchResponse:
    return BatchResponse.model_validate(registry.get_batch(batch_id))


@router.get("/{batch_id}/records/{player}", response_model=RecordResponse)
async def get_record(batch_id: int, player: str, registry: RegistryDep) -> RecordResponse:
    """Return the encrypted handles stored for ``player`` in ``batch_id``."""
    try:
        player = normalize_address(player)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(err),
        ) from err
    registry.get_batch(batch_id)
    skill_handle, play_count_handle = registry.get_record(batch_id, player)
    return RecordResponse(
        batch_id=batch_id,
        player=player,
        skill_handle=skill_handle,
        play_count_handle=play_count_handle,
    )
