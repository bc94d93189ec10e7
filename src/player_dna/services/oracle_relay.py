"""Background oracle relay for development deployments.

The relay plays the role of the external decryption oracle: it reads pending
oracle requests, decrypts their handles with the backend, signs the result
with the oracle key and delivers the callback to the registry. Production
deployments point ``ORACLE_PUBLIC_KEY`` at a real oracle and leave the relay
disabled.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from contextlib import AbstractContextManager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from player_dna.core.settings import settings
from player_dna.db.session import session_scope
from player_dna.db.time import Clock, unix_now
from player_dna.models import DecryptionContext, OracleRequest, RegistryState
from player_dna.models.decryption import ORACLE_REQUEST_PENDING
from player_dna.models.registry_state import REGISTRY_STATE_ID
from player_dna.services.crypto import CryptoService
from player_dna.services.errors import RegistryError
from player_dna.services.fhe import HomomorphicBackend, get_backend
from player_dna.services.oracle import (
    OracleGateway,
    decryption_message,
    encode_cleartext,
    request_handles,
)
from player_dna.services.registry import Registry

logger = logging.getLogger(__name__)


class OracleRelay:
    """Periodically fulfills pending oracle requests.

    Each request is delivered through :meth:`Registry.handle_callback`, so the
    relay gets exactly the same verification as any external oracle.
    """

    def __init__(
        self,
        signing_key_hex: str,
        *,
        backend: HomomorphicBackend | None = None,
        gateway: OracleGateway | None = None,
        clock: Clock = unix_now,
        session_factory: Callable[[], AbstractContextManager[Session]] = session_scope,
    ) -> None:
        self._signing_key_hex = signing_key_hex
        self.address = CryptoService.public_key_hex(signing_key_hex)
        self._backend = backend or get_backend()
        self._gateway = gateway
        self._clock = clock
        self._session_factory = session_factory
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    def build_callback(self, request: OracleRequest, identity: str) -> tuple[bytes, bytes]:
        """Decrypt a request and return ``(cleartext, proof)``."""
        handles = request_handles(request)
        # One derived handle per request.
        cleartext = encode_cleartext(self._backend.decrypt(handles[0]))
        message = decryption_message(int(request.id), identity, handles, cleartext)
        proof = CryptoService.sign_message_hex(self._signing_key_hex, message)
        return cleartext, proof

    def fulfill(self, db: Session, request: OracleRequest) -> DecryptionContext:
        state = db.get(RegistryState, REGISTRY_STATE_ID)
        if state is None:
            raise RegistryError("Registry has not been initialized")
        cleartext, proof = self.build_callback(request, state.identity)
        registry = Registry(db, backend=self._backend, gateway=self._gateway, clock=self._clock)
        return registry.handle_callback(int(request.id), cleartext, proof, caller=self.address)

    def process_pending(self, db: Session, limit: int | None = None) -> int:
        """Deliver callbacks for up to ``limit`` pending requests; return how many completed."""
        limit = limit or settings.oracle_relay_batch_size
        pending = (
            db.query(OracleRequest)
            .filter(OracleRequest.status == ORACLE_REQUEST_PENDING)
            .order_by(OracleRequest.id)
            .limit(limit)
            .all()
        )
        logger.debug("Found %d pending oracle requests", len(pending))

        completed = 0
        for request in pending:
            request_id = int(request.id)
            try:
                self.fulfill(db, request)
            except RegistryError as e:
                logger.warning("Oracle relay could not fulfill request %d: %s", request_id, e)
                continue
            completed += 1
        return completed

    async def start(self) -> None:
        """Start the background relay loop."""
        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background relay loop."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None

    def _process_once(self) -> int:
        with self._session_factory() as db:
            return self.process_pending(db)

    async def _run(self) -> None:
        interval = max(0.1, float(settings.oracle_relay_interval_seconds))

        while not self._stopping.is_set():
            try:
                completed = await asyncio.to_thread(self._process_once)
                if completed:
                    logger.info("Oracle relay completed %d request(s)", completed)
            except SQLAlchemyError as e:
                logger.warning("Oracle relay encountered database error: %s", e)
            except (OSError, ConnectionError, TimeoutError) as e:
                logger.warning("Oracle relay encountered I/O error: %s", e)
            except (ValueError, TypeError, KeyError) as e:
                logger.error("Oracle relay encountered data processing error: %s", e, exc_info=True)

            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=interval)
            except TimeoutError:
                continue


def relay_enabled() -> bool:
    return bool(settings.oracle_relay_enabled and settings.oracle_signing_key)


def get_oracle_relay() -> OracleRelay:
    """Build the relay from settings."""
    if not settings.oracle_signing_key:
        raise RuntimeError("ORACLE_SIGNING_KEY must be set to run the oracle relay")
    return OracleRelay(settings.oracle_signing_key)
