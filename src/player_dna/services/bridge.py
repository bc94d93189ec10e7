"""Decryption bridge between the registry and the external oracle.

A decryption request derives a result ciphertext from a player's record,
binds it to the registry identity with a state hash, queues it with the
oracle and records a pending :class:`DecryptionContext` keyed by the
correlation id. The oracle answers later, in an unrelated call, with the
cleartext and a proof. The context table is what lets that callback find its
batch and guarantees that each request is completed at most once.
"""

from __future__ import annotations

import logging
import secrets

from sqlalchemy import update
from sqlalchemy.orm import Session

from player_dna.models import DecryptionContext
from player_dna.models.decryption import MAX_REQUEST_ID
from player_dna.services import events as ev
from player_dna.services.errors import (
    InvalidProofError,
    ReplayAttemptError,
    StateMismatchError,
)
from player_dna.services.events import EventLog
from player_dna.services.fhe import HomomorphicBackend
from player_dna.services.oracle import OracleGateway, decode_cleartext
from player_dna.services.player_types import classify_player_type
from player_dna.services.records import EncryptedRecordStore
from player_dna.utils.hash import compute_state_hash

logger = logging.getLogger(__name__)


class DecryptionBridge:
    """Issues correlated decryption requests and applies their callbacks once."""

    def __init__(
        self,
        db: Session,
        *,
        records: EncryptedRecordStore,
        backend: HomomorphicBackend,
        gateway: OracleGateway,
        events: EventLog,
        identity: str,
        bucket_width: int,
    ) -> None:
        self._db = db
        self._records = records
        self._backend = backend
        self._gateway = gateway
        self._events = events
        self._identity = identity
        self._bucket_width = bucket_width

    def get_context(self, request_id: int) -> DecryptionContext | None:
        if not 0 < request_id <= MAX_REQUEST_ID:
            return None
        return self._db.get(DecryptionContext, request_id)

    def pending_contexts(self) -> list[DecryptionContext]:
        return (
            self._db.query(DecryptionContext)
            .filter(DecryptionContext.processed.is_(False))
            .order_by(DecryptionContext.request_id)
            .all()
        )

    def request_decryption(
        self, batch_id: int, player: str, *, caller: str, now: int
    ) -> DecryptionContext:
        """Derive the result handle for ``player`` and hand it to the oracle.

        Batch, access and cooldown gates are the caller's responsibility.
        """
        skill_handle, play_count_handle = self._records.get(batch_id, player)
        if skill_handle is None:
            skill_handle = self._backend.zero()
        if play_count_handle is None:
            play_count_handle = self._backend.zero()

        result_handle = self._backend.derive(skill_handle, play_count_handle)
        state_hash = compute_state_hash([result_handle], self._identity)
        request_id = self._gateway.submit(self._db, [result_handle], now)

        context = DecryptionContext(
            request_id=request_id,
            batch_id=batch_id,
            player=player,
            result_handle=result_handle,
            state_hash=state_hash,
            processed=False,
            requested_by=caller,
            requested_at=now,
        )
        self._db.add(context)
        self._events.emit(
            ev.DECRYPTION_REQUESTED,
            timestamp=now,
            caller=caller,
            batch_id=batch_id,
            request_id=request_id,
            player=player,
            result_handle=result_handle,
            state_hash=state_hash,
        )
        logger.info("Decryption request %d opened for batch %d", request_id, batch_id)
        return context

    def handle_callback(
        self,
        request_id: int,
        cleartext: bytes,
        proof: bytes,
        *,
        caller: str | None,
        now: int,
    ) -> DecryptionContext:
        """Verify an oracle callback and complete its context.

        All checks run before any state is touched, so a rejected callback
        leaves the context pending. The pending flag is flipped with a
        conditional UPDATE, so of two sessions racing on the same request only
        one completes it.
        """
        context = self.get_context(request_id)
        if context is None:
            logger.warning("Callback for unknown decryption request %d", request_id)
            raise ReplayAttemptError(f"No pending decryption request {request_id}")
        if context.processed:
            logger.warning("Replayed callback for decryption request %d", request_id)
            raise ReplayAttemptError(f"Decryption request {request_id} was already processed")

        expected_hash = compute_state_hash([context.result_handle], self._identity)
        if not secrets.compare_digest(expected_hash, context.state_hash):
            raise StateMismatchError(f"State hash mismatch for decryption request {request_id}")

        if not self._gateway.verify_proof(self._db, request_id, self._identity, cleartext, proof):
            logger.warning("Rejected callback for request %d: invalid proof", request_id)
            raise InvalidProofError(f"Invalid decryption proof for request {request_id}")

        try:
            value = decode_cleartext(cleartext)
        except ValueError as err:
            raise InvalidProofError(str(err)) from err

        player_type = classify_player_type(value, self._bucket_width)
        result = self._db.execute(
            update(DecryptionContext)
            .where(
                DecryptionContext.request_id == request_id,
                DecryptionContext.processed.is_(False),
            )
            .values(processed=True, result_value=value, completed_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning("Concurrent callback already completed request %d", request_id)
            raise ReplayAttemptError(f"Decryption request {request_id} was already processed")
        self._db.refresh(context)
        self._gateway.mark_fulfilled(self._db, request_id)
        self._events.emit(
            ev.DECRYPTION_COMPLETED,
            timestamp=now,
            caller=caller,
            batch_id=context.batch_id,
            request_id=request_id,
            player=context.player,
            value=value,
            player_type=player_type,
        )
        logger.info(
            "Decryption request %d completed for batch %d: %s",
            request_id,
            context.batch_id,
            player_type,
        )
        return context
