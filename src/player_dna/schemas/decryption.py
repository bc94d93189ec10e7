"""Schemas for the decryption request/callback flow."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from player_dna.models.decryption import MAX_REQUEST_ID

from .common import validate_address


def _hex_bytes(value: str) -> str:
    cleaned = value.strip().lower()
    if cleaned.startswith("0x"):
        cleaned = cleaned[2:]
    bytes.fromhex(cleaned)
    return cleaned


class DecryptionRequest(BaseModel):
    batch_id: int = Field(..., ge=0)
    player: str = Field(..., description="Player address")

    @field_validator("player")
    @classmethod
    def _player(cls, value: str) -> str:
        return validate_address(value)


class DecryptionRequestResponse(BaseModel):
    request_id: int


class DecryptionCallback(BaseModel):
    """Oracle answer for a pending request."""

    request_id: int = Field(..., ge=1, le=MAX_REQUEST_ID)
    cleartext: str = Field(..., description="Hex-encoded 32-byte big-endian cleartext")
    proof: str = Field(..., description="Hex-encoded oracle signature")

    @field_validator("cleartext", "proof")
    @classmethod
    def _hex(cls, value: str) -> str:
        return _hex_bytes(value)


class DecryptionContextResponse(BaseModel):
    request_id: int
    batch_id: int
    player: str
    result_handle: str
    state_hash: str
    processed: bool
    result_value: int | None = None
    player_type: str | None = None
    requested_at: int
    completed_at: int | None = None

    model_config = ConfigDict(from_attributes=True)
