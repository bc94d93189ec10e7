"""Per (batch, player) storage of ciphertext handle pairs."""

from __future__ import annotations

from sqlalchemy.orm import Session

from player_dna.models import EncryptedRecord


class EncryptedRecordStore:
    """Last-write-wins store of ``(skill_handle, play_count_handle)`` pairs."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def put(
        self,
        batch_id: int,
        player: str,
        skill_handle: str,
        play_count_handle: str,
        *,
        submitted_by: str,
        submitted_at: int,
    ) -> EncryptedRecord:
        record = self._db.get(EncryptedRecord, (batch_id, player))
        if record is None:
            record = EncryptedRecord(batch_id=batch_id, player=player)
            self._db.add(record)
        record.skill_handle = skill_handle
        record.play_count_handle = play_count_handle
        record.submitted_by = submitted_by
        record.submitted_at = submitted_at
        return record

    def get(self, batch_id: int, player: str) -> tuple[str | None, str | None]:
        """Return the stored handles, or ``(None, None)`` if nothing was submitted.

        Callers substitute the backend's encrypted zero for missing handles.
        """
        record = self._db.get(EncryptedRecord, (batch_id, player))
        if record is None:
            return None, None
        return record.skill_handle, record.play_count_handle

    def get_record(self, batch_id: int, player: str) -> EncryptedRecord | None:
        return self._db.get(EncryptedRecord, (batch_id, player))

    def list_batch(self, batch_id: int) -> list[EncryptedRecord]:
        return (
            self._db.query(EncryptedRecord)
            .filter(EncryptedRecord.batch_id == batch_id)
            .order_by(EncryptedRecord.player)
            .all()
        )
