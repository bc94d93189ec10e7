"""Batch and record schemas."""

from pydantic import BaseModel, ConfigDict


class BatchResponse(BaseModel):
    id: int
    active: bool
    start_time: int
    end_time: int

    model_config = ConfigDict(from_attributes=True)


class RecordResponse(BaseModel):
    """Encrypted handles stored for a player; both are null when nothing was submitted."""

    batch_id: int
    player: str
    skill_handle: str | None
    play_count_handle: str | None
