"""Event stream endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from player_dna.schemas.event import EventResponse
from player_dna.services.events import MAX_PAGE_SIZE, decode_payload

from ..dependencies import RegistryDep

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=list[EventResponse])
async def list_events(
    registry: RegistryDep,
    after: Annotated[int, Query(ge=0, description="Return events with a larger sequence")] = 0,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = 100,
) -> list[EventResponse]:
    """Return events in emission order, starting after the ``after`` cursor."""
    return [
        EventResponse(
            sequence=event.sequence,
            event_type=event.event_type,
            batch_id=event.batch_id,
            caller=event.caller,
            timestamp=event.timestamp,
            data=decode_payload(event),
        )
        for event in registry.list_events(after=after, limit=limit)
    ]
