"""Encrypted skill data submissions."""

from __future__ import annotations

from fastapi import APIRouter, status

from player_dna.schemas.submission import SubmissionRequest, SubmissionResponse

from ..dependencies import CurrentCallerDep, RegistryDep

router = APIRouter(prefix="/submissions", tags=["submissions"])


@router.post("", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit_skill_data(
    payload: SubmissionRequest,
    registry: RegistryDep,
    caller: CurrentCallerDep,
) -> SubmissionResponse:
    """Store encrypted metrics for a player in the current batch.

    A second submission for the same player in the same batch replaces the first.
    """
    record = registry.submit_encrypted_skill_data(
        caller,
        payload.player,
        payload.skill_handle,
        payload.play_count_handle,
    )
    return SubmissionResponse.model_validate(record)
