"""Batch lifecycle state machine."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from player_dna.models import Batch, RegistryState
from player_dna.services import events as ev
from player_dna.services.errors import BatchNotActiveError, InvalidBatchError
from player_dna.services.events import EventLog

logger = logging.getLogger(__name__)


class BatchLifecycle:
    """Tracks the current batch and its ``Open -> Closed`` transition.

    Opening a new batch while the current one is still active closes the
    current one first, so at most one batch is ever active.
    """

    def __init__(self, db: Session, state: RegistryState, events: EventLog) -> None:
        self._db = db
        self._state = state
        self._events = events

    def current_batch_id(self) -> int:
        return int(self._state.current_batch_id)

    def get(self, batch_id: int) -> Batch | None:
        return self._db.get(Batch, batch_id)

    def require_batch(self, batch_id: int) -> Batch:
        """Return the batch or raise if ``batch_id`` is outside ``[1, current]``."""
        if batch_id < 1 or batch_id > self.current_batch_id():
            raise InvalidBatchError(f"Batch {batch_id} does not exist")
        batch = self.get(batch_id)
        if batch is None:  # pragma: no cover - ids are allocated densely
            raise InvalidBatchError(f"Batch {batch_id} does not exist")
        return batch

    def is_batch_active(self, batch_id: int) -> bool:
        batch = self.get(batch_id)
        return bool(batch is not None and batch.active)

    def require_active(self, batch_id: int) -> Batch:
        batch = self.require_batch(batch_id)
        if not batch.active:
            raise BatchNotActiveError(f"Batch {batch_id} is closed")
        return batch

    def current_batch(self) -> Batch:
        return self.require_batch(self.current_batch_id())

    def open_batch(self, now: int, caller: str | None = None) -> Batch:
        if self.current_batch_id() > 0:
            current = self.current_batch()
            if current.active:
                self._close(current, now, caller)

        batch = Batch(
            id=self.current_batch_id() + 1,
            active=True,
            start_time=now,
            end_time=0,
        )
        self._db.add(batch)
        self._state.current_batch_id = batch.id
        self._db.flush()
        self._events.emit(
            ev.BATCH_OPENED,
            timestamp=now,
            caller=caller,
            batch_id=batch.id,
            start_time=now,
        )
        logger.info("Opened batch %d", batch.id)
        return batch

    def close_batch(self, now: int, caller: str | None = None) -> Batch:
        current = self.current_batch()
        if not current.active:
            raise BatchNotActiveError(f"Batch {current.id} is already closed")
        self._close(current, now, caller)
        return current

    def _close(self, batch: Batch, now: int, caller: str | None) -> None:
        batch.active = False
        batch.end_time = now
        self._events.emit(
            ev.BATCH_CLOSED,
            timestamp=now,
            caller=caller,
            batch_id=batch.id,
            end_time=now,
        )
        logger.info("Closed batch %d", batch.id)
