"""Schemas for encrypted skill submissions."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import validate_address


class SubmissionRequest(BaseModel):
    """Encrypted metrics for one player in the current batch."""

    player: str = Field(..., description="Player address")
    skill_handle: str = Field(..., min_length=1, description="Encrypted skill score")
    play_count_handle: str = Field(..., min_length=1, description="Encrypted play count")

    @field_validator("player")
    @classmethod
    def _player(cls, value: str) -> str:
        return validate_address(value)


class SubmissionResponse(BaseModel):
    batch_id: int
    player: str
    skill_handle: str
    play_count_handle: str
    submitted_by: str
    submitted_at: int

    model_config = ConfigDict(from_attributes=True)
