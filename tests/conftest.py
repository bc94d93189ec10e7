# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from dataclasses import dataclass

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from nacl.signing import SigningKey
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-player-dna")
os.environ["DATABASE_URL"] = "sqlite://"
# Tests bootstrap the registry themselves; keep app startup inert.
os.environ["REGISTRY_OWNER"] = ""
os.environ["ORACLE_RELAY_ENABLED"] = "false"

from player_dna.api.v1.dependencies import get_registry
from player_dna.core.security import create_access_token
from player_dna.core.settings import Settings
from player_dna.db.session import Base
from player_dna.db.session import get_db as app_get_session
from player_dna.main import app as fastapi_app
from player_dna.models import OracleRequest
from player_dna.services.fhe import EmulatedBackend
from player_dna.services.oracle import (
    SignedOracleGateway,
    decryption_message,
    encode_cleartext,
    request_handles,
)
from player_dna.services.registry import Registry, RegistryConfig

TEST_DB_URL = "sqlite://"
TEST_IDENTITY = "player-dna-test"
START_TIME = 1_700_000_000
SUBMISSION_COOLDOWN = 30
DECRYPTION_COOLDOWN = 60


class FakeClock:
    """Deterministic unix clock; tests move it forward explicitly."""

    def __init__(self, now: int = START_TIME) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now


@dataclass
class Identity:
    signing_key: SigningKey

    @property
    def address(self) -> str:
        return self.signing_key.verify_key.encode().hex()

    @property
    def private_key_hex(self) -> str:
        return self.signing_key.encode().hex()

    def sign(self, message: bytes) -> bytes:
        return self.signing_key.sign(message).signature


def _generate_identity() -> Identity:
    return Identity(SigningKey.generate())


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def file_session_factory(tmp_path) -> Iterator[sessionmaker[Session]]:
    """Sessions on a file-backed database, each with its own connection."""
    file_engine = create_engine(
        f"sqlite:///{tmp_path / 'registry.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=file_engine)
    try:
        yield sessionmaker(bind=file_engine, autocommit=False, autoflush=False)
    finally:
        file_engine.dispose()


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def owner() -> Identity:
    return _generate_identity()


@pytest.fixture()
def provider() -> Identity:
    return _generate_identity()


@pytest.fixture()
def other_provider() -> Identity:
    return _generate_identity()


@pytest.fixture()
def outsider() -> Identity:
    return _generate_identity()


@pytest.fixture()
def player() -> Identity:
    return _generate_identity()


@pytest.fixture()
def oracle() -> Identity:
    return _generate_identity()


@pytest.fixture()
def backend() -> EmulatedBackend:
    return EmulatedBackend()


@pytest.fixture()
def gateway(oracle: Identity) -> SignedOracleGateway:
    return SignedOracleGateway(oracle.address)


@pytest.fixture()
def registry_config(owner: Identity, provider: Identity, other_provider: Identity) -> RegistryConfig:
    return RegistryConfig(
        owner=owner.address,
        identity=TEST_IDENTITY,
        providers=(provider.address, other_provider.address),
        submission_cooldown_seconds=SUBMISSION_COOLDOWN,
        decryption_cooldown_seconds=DECRYPTION_COOLDOWN,
    )


@pytest.fixture()
def make_registry(
    backend: EmulatedBackend,
    gateway: SignedOracleGateway,
    clock: FakeClock,
) -> Callable[[Session], Registry]:
    def _make(session: Session) -> Registry:
        return Registry(session, backend=backend, gateway=gateway, clock=clock, bucket_width=15)

    return _make


@pytest.fixture()
def uninitialized_registry(
    db_session: Session, make_registry: Callable[[Session], Registry]
) -> Registry:
    return make_registry(db_session)


@pytest.fixture()
def registry(uninitialized_registry: Registry, registry_config: RegistryConfig) -> Registry:
    """Registry initialized with an owner, two providers and batch #1 open."""
    uninitialized_registry.initialize(registry_config)
    return uninitialized_registry


@pytest.fixture()
def oracle_callback(
    db_session: Session, oracle: Identity
) -> Callable[..., tuple[bytes, bytes]]:
    """Build ``(cleartext, proof)`` for a request as the oracle would."""

    def _build(
        request_id: int,
        value: int,
        *,
        signer: Identity | None = None,
        identity: str = TEST_IDENTITY,
    ) -> tuple[bytes, bytes]:
        request = db_session.get(OracleRequest, request_id)
        assert request is not None
        cleartext = encode_cleartext(value)
        message = decryption_message(request_id, identity, request_handles(request), cleartext)
        return cleartext, (signer or oracle).sign(message)

    return _build


@pytest.fixture()
def auth_headers() -> Callable[[Identity], dict[str, str]]:
    """Return bearer headers for an identity."""

    def _headers(identity: Identity) -> dict[str, str]:
        token = create_access_token(identity.address)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    make_registry: Callable[[Session], Registry],
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    def _get_registry_override() -> Registry:
        return make_registry(db_session)

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_registry] = _get_registry_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_registry, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def test_settings_factory() -> Callable[..., Settings]:
    """Build isolated Settings instances from alias keyword overrides."""

    def _build(**overrides: object) -> Settings:
        values: dict[str, object] = {"SECRET_KEY": "test-secret-key-for-player-dna"}
        values.update(overrides)
        return Settings(**values)

    return _build
