"""Rebuilding registry state from the event stream."""

from __future__ import annotations

import pytest

from player_dna.models import ActionKind, EventRecord
from player_dna.services.errors import NotOwnerError
from player_dna.services.projection import project_events, snapshot_from_db


def test_projection_matches_tables(
    registry, db_session, owner, provider, other_provider, outsider, player, backend, oracle_callback, clock
) -> None:
    registry.submit_encrypted_skill_data(
        provider.address, player.address, backend.encrypt(45), backend.encrypt(3)
    )
    completed = registry.request_decryption(provider.address, 1, player.address)
    registry.handle_callback(completed, *oracle_callback(completed, 15))

    clock.advance(10)
    registry.add_provider(owner.address, outsider.address)
    registry.remove_provider(owner.address, other_provider.address)
    registry.set_cooldown(owner.address, ActionKind.SUBMISSION, 5)
    registry.open_batch(owner.address)
    registry.submit_encrypted_skill_data(
        outsider.address, player.address, backend.encrypt(7), backend.encrypt(7)
    )
    registry.request_decryption(outsider.address, 2, player.address)
    registry.close_batch(owner.address)
    registry.pause(owner.address)
    registry.transfer_ownership(owner.address, provider.address)

    # Rejected calls leave no trace in either view.
    with pytest.raises(NotOwnerError):
        registry.unpause(owner.address)

    projected = project_events(registry.all_events())
    assert projected == snapshot_from_db(db_session)
    assert projected.owner == provider.address
    assert projected.paused is True
    assert projected.providers == {provider.address, outsider.address}
    assert projected.contexts[completed].result_value == 15
    assert projected.batches[1].active is False
    assert projected.batches[2].active is False


def test_unknown_event_type_is_rejected() -> None:
    bogus = EventRecord(sequence=1, event_type="Bogus", timestamp=0, payload="{}")
    with pytest.raises(ValueError):
        project_events([bogus])


def test_empty_database_snapshot(db_session) -> None:
    assert snapshot_from_db(db_session) == project_events([])
