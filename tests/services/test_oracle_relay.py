"""Tests for the development oracle relay."""

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from player_dna.core.settings import settings
from player_dna.models import OracleRequest
from player_dna.models.decryption import ORACLE_REQUEST_FULFILLED, ORACLE_REQUEST_PENDING
from player_dna.services import oracle_relay
from player_dna.services.oracle_relay import OracleRelay


@pytest.fixture()
def relay(oracle, backend, gateway, clock) -> OracleRelay:
    return OracleRelay(oracle.private_key_hex, backend=backend, gateway=gateway, clock=clock)


def test_relay_address_is_oracle_key(relay, oracle) -> None:
    assert relay.address == oracle.address


def test_process_pending_fulfills_requests(registry, relay, provider, other_provider, player, backend, db_session) -> None:
    registry.submit_encrypted_skill_data(
        provider.address, player.address, backend.encrypt(200), backend.encrypt(4)
    )
    first = registry.request_decryption(provider.address, 1, player.address)
    second = registry.request_decryption(other_provider.address, 1, player.address)

    assert relay.process_pending(db_session) == 2
    assert registry.get_context(first).result_value == 50
    assert registry.get_context(second).result_value == 50
    assert db_session.get(OracleRequest, first).status == ORACLE_REQUEST_FULFILLED
    assert registry.pending_contexts() == []

    assert relay.process_pending(db_session) == 0


def test_process_pending_respects_limit(registry, relay, provider, other_provider, player, db_session) -> None:
    registry.request_decryption(provider.address, 1, player.address)
    registry.request_decryption(other_provider.address, 1, player.address)

    assert relay.process_pending(db_session, limit=1) == 1
    assert len(registry.pending_contexts()) == 1


def test_relay_with_untrusted_key_leaves_requests_pending(
    registry, outsider, backend, gateway, clock, provider, player, db_session
) -> None:
    rogue = OracleRelay(outsider.private_key_hex, backend=backend, gateway=gateway, clock=clock)
    request_id = registry.request_decryption(provider.address, 1, player.address)

    assert rogue.process_pending(db_session) == 0
    assert registry.get_context(request_id).processed is False
    assert db_session.get(OracleRequest, request_id).status == ORACLE_REQUEST_PENDING


def test_get_oracle_relay_requires_signing_key(mocker) -> None:
    mocker.patch.object(settings, "oracle_signing_key", None)
    assert oracle_relay.relay_enabled() is False
    with pytest.raises(RuntimeError):
        oracle_relay.get_oracle_relay()


async def _wait_for(predicate, attempts: int = 100) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0.01)


@pytest.mark.asyncio
async def test_relay_loop_runs_until_stopped(relay, mocker) -> None:
    process_once = mocker.patch.object(relay, "_process_once", return_value=0)

    await relay.start()
    await _wait_for(lambda: process_once.call_count > 0)
    await relay.stop()

    assert process_once.call_count >= 1
    assert relay._task is None


@pytest.mark.asyncio
async def test_relay_loop_survives_processing_errors(relay, mocker) -> None:
    mocker.patch.object(settings, "oracle_relay_interval_seconds", 0.1)
    failures = iter([ValueError("bad payload"), OSError("db down")])

    def _flaky() -> int:
        for error in failures:
            raise error
        return 1

    process_once = mocker.patch.object(relay, "_process_once", side_effect=_flaky)

    await relay.start()
    await _wait_for(lambda: process_once.call_count >= 3, attempts=200)
    await relay.stop()

    assert process_once.call_count >= 3


@pytest.mark.asyncio
async def test_relay_loop_survives_database_errors(relay, mocker) -> None:
    mocker.patch.object(settings, "oracle_relay_interval_seconds", 0.1)
    locked = OperationalError("UPDATE decryption_context", {}, Exception("database is locked"))
    failures = iter([locked, locked])

    def _locked_then_ok() -> int:
        for error in failures:
            raise error
        return 0

    process_once = mocker.patch.object(relay, "_process_once", side_effect=_locked_then_ok)

    await relay.start()
    await _wait_for(lambda: process_once.call_count >= 3, attempts=200)
    assert relay._task is not None and not relay._task.done()
    await relay.stop()

    assert process_once.call_count >= 3
