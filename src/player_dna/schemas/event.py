"""Event stream schemas."""

from typing import Any

from pydantic import BaseModel


class EventResponse(BaseModel):
    sequence: int
    event_type: str
    batch_id: int | None
    caller: str | None
    timestamp: int
    data: dict[str, Any]
