"""Decryption request and oracle callback endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Path, status

from player_dna.core.settings import settings
from player_dna.models import DecryptionContext
from player_dna.models.decryption import MAX_REQUEST_ID
from player_dna.schemas.decryption import (
    DecryptionCallback,
    DecryptionContextResponse,
    DecryptionRequest,
    DecryptionRequestResponse,
)
from player_dna.services.player_types import classify_player_type

from ..dependencies import CurrentCallerDep, RegistryDep

router = APIRouter(prefix="/decryption", tags=["decryption"])


def _context_response(context: DecryptionContext) -> DecryptionContextResponse:
    response = DecryptionContextResponse.model_validate(context)
    if context.result_value is not None:
        response.player_type = classify_player_type(
            int(context.result_value), settings.player_type_bucket_width
        )
    return response


@router.post(
    "/requests",
    response_model=DecryptionRequestResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def request_decryption(
    payload: DecryptionRequest,
    registry: RegistryDep,
    caller: CurrentCallerDep,
) -> DecryptionRequestResponse:
    """Queue the derived result for ``player`` with the decryption oracle."""
    request_id = registry.request_decryption(caller, payload.batch_id, payload.player)
    return DecryptionRequestResponse(request_id=request_id)


@router.get("/requests/{request_id}", response_model=DecryptionContextResponse)
async def get_request(
    request_id: Annotated[int, Path(ge=1, le=MAX_REQUEST_ID)],
    registry: RegistryDep,
) -> DecryptionContextResponse:
    return _context_response(registry.get_context(request_id))


@router.post("/callback", response_model=DecryptionContextResponse)
async def oracle_callback(
    payload: DecryptionCallback,
    registry: RegistryDep,
) -> DecryptionContextResponse:
    """Deliver the oracle's answer. Anyone may call; the proof is checked."""
    context = registry.handle_callback(
        payload.request_id,
        bytes.fromhex(payload.cleartext),
        bytes.fromhex(payload.proof),
    )
    return _context_response(context)
