"""Event log emitting the durable stream of registry state transitions."""

from __future__ import annotations

import json
import logging
from typing import Any, Final

from sqlalchemy.orm import Session

from player_dna.models import EventRecord

logger = logging.getLogger(__name__)

REGISTRY_INITIALIZED: Final[str] = "RegistryInitialized"
OWNERSHIP_TRANSFERRED: Final[str] = "OwnershipTransferred"
PROVIDER_ADDED: Final[str] = "ProviderAdded"
PROVIDER_REMOVED: Final[str] = "ProviderRemoved"
COOLDOWN_UPDATED: Final[str] = "CooldownUpdated"
PAUSED: Final[str] = "Paused"
UNPAUSED: Final[str] = "Unpaused"
BATCH_OPENED: Final[str] = "BatchOpened"
BATCH_CLOSED: Final[str] = "BatchClosed"
SKILL_DATA_SUBMITTED: Final[str] = "SkillDataSubmitted"
DECRYPTION_REQUESTED: Final[str] = "DecryptionRequested"
DECRYPTION_COMPLETED: Final[str] = "DecryptionCompleted"

MAX_PAGE_SIZE: Final[int] = 500


class EventLog:
    """Append-only writer and reader for the ``event_log`` table.

    Events are written inside the caller's unit of work, so a rolled-back
    operation leaves no event behind.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def emit(
        self,
        event_type: str,
        *,
        timestamp: int,
        caller: str | None = None,
        batch_id: int | None = None,
        **payload: Any,
    ) -> EventRecord:
        record = EventRecord(
            event_type=event_type,
            batch_id=batch_id,
            caller=caller,
            timestamp=timestamp,
            payload=json.dumps(payload, sort_keys=True),
        )
        self._db.add(record)
        logger.debug("Queued %s event (batch=%s, caller=%s)", event_type, batch_id, caller)
        return record

    def list_events(self, after: int = 0, limit: int = 100) -> list[EventRecord]:
        """Return events with ``sequence > after`` in log order."""
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        return (
            self._db.query(EventRecord)
            .filter(EventRecord.sequence > after)
            .order_by(EventRecord.sequence)
            .limit(limit)
            .all()
        )

    def all_events(self) -> list[EventRecord]:
        return self._db.query(EventRecord).order_by(EventRecord.sequence).all()


def decode_payload(record: EventRecord) -> dict[str, Any]:
    """Return the event arguments stored on a record."""
    return json.loads(record.payload)
