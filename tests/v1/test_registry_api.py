"""End-to-end tests for batches, submissions and the decryption flow over HTTP."""

from __future__ import annotations

from fastapi import status

from player_dna.models import ActionKind


def _submit(client, headers, player, skill: str, plays: str):
    return client.post(
        "/api/v1/submissions",
        json={"player": player.address, "skill_handle": skill, "play_count_handle": plays},
        headers=headers,
    )


def test_submission_and_record_lookup(client, registry, provider, player, backend, auth_headers) -> None:
    response = _submit(client, auth_headers(provider), player, backend.encrypt(90), backend.encrypt(3))
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["batch_id"] == 1
    assert data["submitted_by"] == provider.address

    response = client.get(f"/api/v1/batches/1/records/{player.address}")
    assert response.json() == {
        "batch_id": 1,
        "player": player.address,
        "skill_handle": backend.encrypt(90),
        "play_count_handle": backend.encrypt(3),
    }


def test_record_lookup_for_absent_player(client, registry, player) -> None:
    response = client.get(f"/api/v1/batches/1/records/{player.address}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["skill_handle"] is None

    response = client.get(f"/api/v1/batches/7/records/{player.address}")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_submission_errors_map_to_status_codes(
    client, registry, owner, provider, outsider, player, backend, auth_headers
) -> None:
    skill, plays = backend.encrypt(10), backend.encrypt(1)

    response = _submit(client, auth_headers(outsider), player, skill, plays)
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = _submit(client, auth_headers(provider), player, "garbage", plays)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["error"] == "InvalidCiphertextError"

    assert _submit(client, auth_headers(provider), player, skill, plays).status_code == 201
    response = _submit(client, auth_headers(provider), player, skill, plays)
    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    last = registry.last_action(provider.address, ActionKind.SUBMISSION)
    assert response.json()["retry_at"] == last + 30

    client.post("/api/v1/batches/current/close", headers=auth_headers(owner))
    response = _submit(client, auth_headers(provider), player, skill, plays)
    assert response.status_code == status.HTTP_409_CONFLICT

    client.post("/api/v1/admin/pause", headers=auth_headers(owner))
    response = _submit(client, auth_headers(provider), player, skill, plays)
    assert response.status_code == status.HTTP_423_LOCKED


def test_batch_endpoints(client, registry, owner, auth_headers) -> None:
    current = client.get("/api/v1/batches/current").json()
    assert current["id"] == 1
    assert current["active"] is True

    response = client.post("/api/v1/batches", headers=auth_headers(owner))
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["id"] == 2

    assert client.get("/api/v1/batches/1").json()["active"] is False
    assert client.get("/api/v1/batches/3").status_code == status.HTTP_404_NOT_FOUND

    closed = client.post("/api/v1/batches/current/close", headers=auth_headers(owner))
    assert closed.json()["id"] == 2
    assert closed.json()["active"] is False


def test_decryption_round_trip(
    client, registry, owner, provider, player, backend, auth_headers, oracle_callback
) -> None:
    _submit(client, auth_headers(provider), player, backend.encrypt(100), backend.encrypt(2))
    response = client.post(
        "/api/v1/decryption/requests",
        json={"batch_id": 1, "player": player.address},
        headers=auth_headers(provider),
    )
    assert response.status_code == status.HTTP_202_ACCEPTED
    request_id = response.json()["request_id"]

    pending = client.get(f"/api/v1/decryption/requests/{request_id}").json()
    assert pending["processed"] is False
    assert pending["player_type"] is None

    client.post("/api/v1/batches/current/close", headers=auth_headers(owner))

    cleartext, proof = oracle_callback(request_id, 50)
    body = {"request_id": request_id, "cleartext": cleartext.hex(), "proof": proof.hex()}
    response = client.post("/api/v1/decryption/callback", json=body)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["processed"] is True
    assert data["result_value"] == 50
    assert data["player_type"] == "Speed Demon"

    replay = client.post("/api/v1/decryption/callback", json=body)
    assert replay.status_code == status.HTTP_409_CONFLICT
    assert replay.json()["error"] == "ReplayAttemptError"


def test_callback_with_bad_proof(client, registry, provider, player, outsider, auth_headers, oracle_callback) -> None:
    response = client.post(
        "/api/v1/decryption/requests",
        json={"batch_id": 1, "player": player.address},
        headers=auth_headers(provider),
    )
    request_id = response.json()["request_id"]

    cleartext, proof = oracle_callback(request_id, 0, signer=outsider)
    response = client.post(
        "/api/v1/decryption/callback",
        json={"request_id": request_id, "cleartext": cleartext.hex(), "proof": proof.hex()},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert client.get(f"/api/v1/decryption/requests/{request_id}").json()["processed"] is False

    response = client.post(
        "/api/v1/decryption/callback",
        json={"request_id": request_id, "cleartext": "zz", "proof": proof.hex()},
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_decryption_request_errors(client, registry, provider, player, auth_headers) -> None:
    response = client.post(
        "/api/v1/decryption/requests",
        json={"batch_id": 5, "player": player.address},
        headers=auth_headers(provider),
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND

    assert client.get("/api/v1/decryption/requests/42").status_code == status.HTTP_404_NOT_FOUND


def test_oversized_request_ids_are_rejected(client, registry, oracle_callback, provider, player, auth_headers) -> None:
    response = client.post(
        "/api/v1/decryption/requests",
        json={"batch_id": 1, "player": player.address},
        headers=auth_headers(provider),
    )
    cleartext, proof = oracle_callback(response.json()["request_id"], 0)

    response = client.post(
        "/api/v1/decryption/callback",
        json={"request_id": 2**70, "cleartext": cleartext.hex(), "proof": proof.hex()},
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert client.get(f"/api/v1/decryption/requests/{2**70}").status_code == (
        status.HTTP_422_UNPROCESSABLE_ENTITY
    )


def test_events_stream(client, registry, owner, auth_headers) -> None:
    client.post("/api/v1/admin/pause", headers=auth_headers(owner))

    events = client.get("/api/v1/events").json()
    assert [e["event_type"] for e in events] == ["RegistryInitialized", "BatchOpened", "Paused"]
    assert events[1]["batch_id"] == 1
    assert events[0]["data"]["owner"] == owner.address

    after = client.get("/api/v1/events", params={"after": events[1]["sequence"]}).json()
    assert [e["event_type"] for e in after] == ["Paused"]

    assert client.get("/api/v1/events", params={"limit": 0}).status_code == 422
