"""Tests for authentication endpoints."""

from __future__ import annotations

import base64

from fastapi import status

from player_dna.core.security import decode_access_token


def _decode_b64(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _issue_challenge(client, address: str) -> str:
    response = client.post("/api/v1/auth/challenge", json={"address": address})
    assert response.status_code == status.HTTP_200_OK
    return response.json()["challenge"]


def _login_payload(identity, challenge: str) -> dict[str, str]:
    return {
        "address": identity.address,
        "challenge": challenge,
        "signature": identity.sign(_decode_b64(challenge)).hex(),
    }


def test_login_issues_token_for_address(client, owner) -> None:
    challenge = _issue_challenge(client, owner.address)
    response = client.post("/api/v1/auth/login", json=_login_payload(owner, challenge))

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["address"] == owner.address
    assert decode_access_token(data["access_token"]) == owner.address


def test_login_accepts_prefixed_uppercase_address(client, owner) -> None:
    challenge = _issue_challenge(client, "0x" + owner.address.upper())
    payload = _login_payload(owner, challenge)
    payload["address"] = "0x" + owner.address.upper()
    response = client.post("/api/v1/auth/login", json=payload)
    assert response.status_code == status.HTTP_200_OK


def test_challenge_cannot_be_reused(client, owner) -> None:
    challenge = _issue_challenge(client, owner.address)
    payload = _login_payload(owner, challenge)
    assert client.post("/api/v1/auth/login", json=payload).status_code == status.HTTP_200_OK

    response = client.post("/api/v1/auth/login", json=payload)
    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS


def test_login_rejects_signature_from_other_key(client, owner, outsider) -> None:
    challenge = _issue_challenge(client, owner.address)
    payload = _login_payload(owner, challenge)
    payload["signature"] = outsider.sign(_decode_b64(challenge)).hex()

    response = client.post("/api/v1/auth/login", json=payload)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_login_rejects_challenge_for_other_address(client, owner, outsider) -> None:
    challenge = _issue_challenge(client, outsider.address)
    response = client.post("/api/v1/auth/login", json=_login_payload(owner, challenge))
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_login_rejects_non_hex_signature(client, owner) -> None:
    challenge = _issue_challenge(client, owner.address)
    payload = _login_payload(owner, challenge)
    payload["signature"] = "not-hex"
    response = client.post("/api/v1/auth/login", json=payload)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_challenge_rejects_malformed_address(client) -> None:
    response = client.post("/api/v1/auth/challenge", json={"address": "abc"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_protected_endpoint_requires_valid_token(client, registry) -> None:
    missing = client.post("/api/v1/admin/pause")
    assert missing.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)

    invalid = client.post("/api/v1/admin/pause", headers={"Authorization": "Bearer nope"})
    assert invalid.status_code == status.HTTP_401_UNAUTHORIZED
