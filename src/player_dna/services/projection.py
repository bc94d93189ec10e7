"""Rebuild registry state from the event stream.

Any observer holding the event log can reconstruct the registry without
reading its tables. :func:`project_events` folds the stream into a
:class:`RegistrySnapshot`; :func:`snapshot_from_db` reads the same shape
directly from the tables so the two can be compared.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from player_dna.models import (
    ActionCooldown,
    ActionKind,
    Batch,
    DecryptionContext,
    EncryptedRecord,
    EventRecord,
    Provider,
    RegistryState,
)
from player_dna.models.registry_state import REGISTRY_STATE_ID
from player_dna.services import events as ev
from player_dna.services.events import decode_payload


@dataclass
class BatchView:
    active: bool
    start_time: int
    end_time: int


@dataclass
class ContextView:
    batch_id: int
    player: str
    state_hash: str
    processed: bool
    result_value: int | None


@dataclass
class RegistrySnapshot:
    """Plain-data view of the full persisted registry state."""

    identity: str = ""
    owner: str = ""
    paused: bool = False
    current_batch_id: int = 0
    submission_cooldown_seconds: int = 0
    decryption_cooldown_seconds: int = 0
    providers: set[str] = field(default_factory=set)
    batches: dict[int, BatchView] = field(default_factory=dict)
    records: dict[tuple[int, str], tuple[str, str]] = field(default_factory=dict)
    contexts: dict[int, ContextView] = field(default_factory=dict)
    cooldowns: dict[tuple[str, str], int] = field(default_factory=dict)


def _apply(snapshot: RegistrySnapshot, event: EventRecord, data: dict[str, Any]) -> None:
    kind = event.event_type
    if kind == ev.REGISTRY_INITIALIZED:
        snapshot.identity = data["identity"]
        snapshot.owner = data["owner"]
        snapshot.providers = set(data["providers"])
        snapshot.submission_cooldown_seconds = data["submission_cooldown_seconds"]
        snapshot.decryption_cooldown_seconds = data["decryption_cooldown_seconds"]
    elif kind == ev.OWNERSHIP_TRANSFERRED:
        snapshot.owner = data["new_owner"]
    elif kind == ev.PROVIDER_ADDED:
        snapshot.providers.add(data["provider"])
    elif kind == ev.PROVIDER_REMOVED:
        snapshot.providers.discard(data["provider"])
    elif kind == ev.COOLDOWN_UPDATED:
        if data["action"] == ActionKind.SUBMISSION.value:
            snapshot.submission_cooldown_seconds = data["seconds"]
        else:
            snapshot.decryption_cooldown_seconds = data["seconds"]
    elif kind == ev.PAUSED:
        snapshot.paused = True
    elif kind == ev.UNPAUSED:
        snapshot.paused = False
    elif kind == ev.BATCH_OPENED:
        snapshot.batches[event.batch_id] = BatchView(True, data["start_time"], 0)
        snapshot.current_batch_id = event.batch_id
    elif kind == ev.BATCH_CLOSED:
        batch = snapshot.batches[event.batch_id]
        batch.active = False
        batch.end_time = data["end_time"]
    elif kind == ev.SKILL_DATA_SUBMITTED:
        snapshot.records[(event.batch_id, data["player"])] = (
            data["skill_handle"],
            data["play_count_handle"],
        )
        snapshot.cooldowns[(event.caller, ActionKind.SUBMISSION.value)] = event.timestamp
    elif kind == ev.DECRYPTION_REQUESTED:
        snapshot.contexts[data["request_id"]] = ContextView(
            batch_id=event.batch_id,
            player=data["player"],
            state_hash=data["state_hash"],
            processed=False,
            result_value=None,
        )
        snapshot.cooldowns[(event.caller, ActionKind.DECRYPTION_REQUEST.value)] = event.timestamp
    elif kind == ev.DECRYPTION_COMPLETED:
        context = snapshot.contexts[data["request_id"]]
        context.processed = True
        context.result_value = data["value"]
    else:
        raise ValueError(f"Unknown event type {kind!r}")


def project_events(events: Iterable[EventRecord]) -> RegistrySnapshot:
    """Fold an ordered event stream into a snapshot."""
    snapshot = RegistrySnapshot()
    for event in events:
        _apply(snapshot, event, decode_payload(event))
    return snapshot


def snapshot_from_db(db: Session) -> RegistrySnapshot:
    """Read the current registry state straight from the tables."""
    state = db.get(RegistryState, REGISTRY_STATE_ID)
    if state is None:
        return RegistrySnapshot()

    return RegistrySnapshot(
        identity=state.identity,
        owner=state.owner,
        paused=bool(state.paused),
        current_batch_id=int(state.current_batch_id),
        submission_cooldown_seconds=int(state.submission_cooldown_seconds),
        decryption_cooldown_seconds=int(state.decryption_cooldown_seconds),
        providers={row.address for row in db.query(Provider).all()},
        batches={
            int(b.id): BatchView(bool(b.active), int(b.start_time), int(b.end_time))
            for b in db.query(Batch).all()
        },
        records={
            (int(r.batch_id), r.player): (r.skill_handle, r.play_count_handle)
            for r in db.query(EncryptedRecord).all()
        },
        contexts={
            int(c.request_id): ContextView(
                batch_id=int(c.batch_id),
                player=c.player,
                state_hash=c.state_hash,
                processed=bool(c.processed),
                result_value=None if c.result_value is None else int(c.result_value),
            )
            for c in db.query(DecryptionContext).all()
        },
        cooldowns={
            (row.address, row.action): int(row.last_action_at)
            for row in db.query(ActionCooldown).all()
        },
    )
