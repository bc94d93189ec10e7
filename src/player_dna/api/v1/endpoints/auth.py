"""Authentication endpoints for the registry API."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from player_dna.core.security import create_access_token, verify_signature
from player_dna.core.settings import settings
from player_dna.db.time import unix_now
from player_dna.schemas.auth import (
    ChallengeRequest,
    ChallengeResponse,
    LoginRequest,
    LoginResponse,
)
from player_dna.services.crypto import CryptoService
from player_dna.services.replay import ReplayProtectionService

from ..dependencies import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])
crypto_service = CryptoService()


def get_replay_service_dep(db: SessionDep) -> ReplayProtectionService:
    return ReplayProtectionService(db)


ReplayServiceDep = Annotated[ReplayProtectionService, Depends(get_replay_service_dep)]


def _decode_hex(field: str, data: str) -> bytes:
    try:
        return bytes.fromhex(data.removeprefix("0x"))
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid hex encoding for {field}",
        ) from err


@router.post(
    "/challenge",
    summary="Issue a login challenge",
    response_model=ChallengeResponse,
)
async def issue_challenge(payload: ChallengeRequest) -> ChallengeResponse:
    """Provide clients with a MAC-protected challenge to sign."""
    challenge = crypto_service.issue_auth_challenge(payload.address, unix_now())
    return ChallengeResponse(
        challenge=challenge,
        expires_in=settings.auth_challenge_ttl_seconds,
    )


@router.post(
    "/login",
    summary="Authenticate with Ed25519 key",
    status_code=status.HTTP_200_OK,
    response_model=LoginResponse,
)
async def login(
    payload: LoginRequest,
    replay_service: ReplayServiceDep,
) -> LoginResponse:
    """Authenticate by providing a signed challenge response."""
    now = unix_now()
    try:
        challenge_bytes, nonce_hex = crypto_service.validate_auth_challenge(
            payload.address, payload.challenge, now
        )
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(err),
        ) from err

    if replay_service.is_replay(payload.address, nonce_hex):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Challenge has already been used",
        )

    signature = _decode_hex("signature", payload.signature)
    if not verify_signature(payload.address, challenge_bytes, signature):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed: invalid signature",
        )

    if not replay_service.register_replay(payload.address, nonce_hex, now):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Challenge has already been used",
        )

    logger.info("Issued access token for %s", payload.address)
    return LoginResponse(
        access_token=create_access_token(payload.address),
        token_type="bearer",
        address=payload.address,
    )
