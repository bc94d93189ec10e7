"""Top-level registry orchestrating every public operation.

Each public method is one unit of work: gates are checked, components mutate
the session, and the session is committed. Any exception rolls the whole
operation back, cooldown updates and queued events included.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from player_dna.core.security import normalize_address
from player_dna.core.settings import Settings, settings
from player_dna.db.time import Clock, unix_now
from player_dna.models import (
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
from player_dna.services.access import AccessControl
from player_dna.services.batches import BatchLifecycle
from player_dna.services.bridge import DecryptionBridge
from player_dna.services.cooldown import CooldownThrottle
from player_dna.services.errors import UnknownRequestError
from player_dna.services.events import EventLog
from player_dna.services.fhe import HomomorphicBackend, get_backend
from player_dna.services.oracle import OracleGateway, get_oracle_gateway
from player_dna.services.records import EncryptedRecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistryConfig:
    """Initial configuration applied when the registry is first bootstrapped."""

    owner: str
    identity: str
    providers: tuple[str, ...] = field(default_factory=tuple)
    submission_cooldown_seconds: int = 0
    decryption_cooldown_seconds: int = 0

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> RegistryConfig:
        source = source or settings
        if not source.registry_owner:
            raise ValueError("REGISTRY_OWNER must be set to bootstrap the registry")
        return cls(
            owner=normalize_address(source.registry_owner),
            identity=source.registry_identity,
            providers=tuple(normalize_address(p) for p in source.registry_providers),
            submission_cooldown_seconds=source.submission_cooldown_seconds,
            decryption_cooldown_seconds=source.decryption_cooldown_seconds,
        )


class Registry:
    """Encrypted skill registry bound to one database session.

    Player, owner and provider addresses are normalized on the way in.
    """

    def __init__(
        self,
        db: Session,
        *,
        backend: HomomorphicBackend | None = None,
        gateway: OracleGateway | None = None,
        clock: Clock = unix_now,
        bucket_width: int | None = None,
    ) -> None:
        self._db = db
        self._backend = backend or get_backend()
        self._gateway = gateway or get_oracle_gateway()
        self._clock = clock
        self._bucket_width = bucket_width or settings.player_type_bucket_width
        self._events = EventLog(db)
        self._access = AccessControl(db, self._events)
        self._cooldowns = CooldownThrottle(db)
        self._records = EncryptedRecordStore(db)

    @contextmanager
    def _unit_of_work(self) -> Iterator[None]:
        try:
            yield
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise

    def _batches(self, state: RegistryState | None = None) -> BatchLifecycle:
        return BatchLifecycle(self._db, state or self._access.state(), self._events)

    def _bridge(self, state: RegistryState | None = None) -> DecryptionBridge:
        state = state or self._access.state()
        return DecryptionBridge(
            self._db,
            records=self._records,
            backend=self._backend,
            gateway=self._gateway,
            events=self._events,
            identity=state.identity,
            bucket_width=self._bucket_width,
        )

    # --- Bootstrap ----------------------------------------------------------------
    def is_initialized(self) -> bool:
        return self._db.get(RegistryState, REGISTRY_STATE_ID) is not None

    def initialize(self, config: RegistryConfig) -> RegistryState:
        """Create the registry state, seed providers and open batch #1.

        Idempotent: an already initialized registry is returned unchanged.
        """
        existing = self._db.get(RegistryState, REGISTRY_STATE_ID)
        if existing is not None:
            return existing

        now = self._clock()
        with self._unit_of_work():
            state = RegistryState(
                id=REGISTRY_STATE_ID,
                identity=config.identity,
                owner=config.owner,
                paused=False,
                current_batch_id=0,
                submission_cooldown_seconds=config.submission_cooldown_seconds,
                decryption_cooldown_seconds=config.decryption_cooldown_seconds,
                initialized_at=now,
            )
            self._db.add(state)
            providers = sorted(set(config.providers))
            for address in providers:
                self._db.add(Provider(address=address, added_at=now))
            self._events.emit(
                ev.REGISTRY_INITIALIZED,
                timestamp=now,
                caller=config.owner,
                identity=config.identity,
                owner=config.owner,
                providers=providers,
                submission_cooldown_seconds=config.submission_cooldown_seconds,
                decryption_cooldown_seconds=config.decryption_cooldown_seconds,
            )
            self._db.flush()
            self._batches(state).open_batch(now, config.owner)
        logger.info("Registry %s initialized with owner %s", config.identity, config.owner)
        return state

    # --- Administration -----------------------------------------------------------
    def transfer_ownership(self, caller: str, new_owner: str) -> RegistryState:
        new_owner = normalize_address(new_owner)
        with self._unit_of_work():
            state = self._access.transfer_ownership(caller, new_owner, self._clock())
        return state

    def add_provider(self, caller: str, address: str) -> bool:
        address = normalize_address(address)
        with self._unit_of_work():
            added = self._access.add_provider(caller, address, self._clock())
        return added

    def remove_provider(self, caller: str, address: str) -> bool:
        address = normalize_address(address)
        with self._unit_of_work():
            removed = self._access.remove_provider(caller, address, self._clock())
        return removed

    def set_cooldown(self, caller: str, kind: ActionKind, seconds: int) -> RegistryState:
        with self._unit_of_work():
            state = self._access.set_cooldown(caller, kind, seconds, self._clock())
        return state

    def pause(self, caller: str) -> RegistryState:
        with self._unit_of_work():
            state = self._access.pause(caller, self._clock())
        return state

    def unpause(self, caller: str) -> RegistryState:
        with self._unit_of_work():
            state = self._access.unpause(caller, self._clock())
        return state

    def open_batch(self, caller: str) -> Batch:
        with self._unit_of_work():
            state = self._access.require_owner(caller)
            batch = self._batches(state).open_batch(self._clock(), caller)
        return batch

    def close_batch(self, caller: str) -> Batch:
        with self._unit_of_work():
            state = self._access.require_owner(caller)
            batch = self._batches(state).close_batch(self._clock(), caller)
        return batch

    # --- Provider operations ------------------------------------------------------
    def submit_encrypted_skill_data(
        self,
        caller: str,
        player: str,
        skill_handle: str,
        play_count_handle: str,
    ) -> EncryptedRecord:
        """Store a player's encrypted metrics in the current batch."""
        player = normalize_address(player)
        now = self._clock()
        with self._unit_of_work():
            self._access.require_not_paused()
            self._access.require_provider(caller)
            skill = self._backend.import_ciphertext(skill_handle)
            plays = self._backend.import_ciphertext(play_count_handle)
            batches = self._batches()
            batch = batches.require_active(batches.current_batch_id())
            self._cooldowns.check_and_update(
                caller,
                ActionKind.SUBMISSION,
                now,
                self._access.cooldown_seconds(ActionKind.SUBMISSION),
            )
            record = self._records.put(
                batch.id,
                player,
                skill,
                plays,
                submitted_by=caller,
                submitted_at=now,
            )
            self._events.emit(
                ev.SKILL_DATA_SUBMITTED,
                timestamp=now,
                caller=caller,
                batch_id=batch.id,
                player=player,
                skill_handle=skill,
                play_count_handle=plays,
            )
        logger.info("Skill data submitted for %s in batch %d", player, record.batch_id)
        return record

    def request_decryption(self, caller: str, batch_id: int, player: str) -> int:
        """Open a decryption request and return its correlation id."""
        player = normalize_address(player)
        now = self._clock()
        with self._unit_of_work():
            self._access.require_not_paused()
            self._access.require_provider(caller)
            state = self._access.state()
            self._batches(state).require_active(batch_id)
            self._cooldowns.check_and_update(
                caller,
                ActionKind.DECRYPTION_REQUEST,
                now,
                self._access.cooldown_seconds(ActionKind.DECRYPTION_REQUEST),
            )
            context = self._bridge(state).request_decryption(
                batch_id, player, caller=caller, now=now
            )
            request_id = int(context.request_id)
        return request_id

    # --- Oracle callback ----------------------------------------------------------
    def handle_callback(
        self,
        request_id: int,
        cleartext: bytes,
        proof: bytes,
        caller: str | None = None,
    ) -> DecryptionContext:
        """Apply an oracle callback; not gated by batch state or the pause flag."""
        with self._unit_of_work():
            context = self._bridge().handle_callback(
                request_id, cleartext, proof, caller=caller, now=self._clock()
            )
        return context

    # --- Reads --------------------------------------------------------------------
    def state(self) -> RegistryState:
        return self._access.state()

    def providers(self) -> list[str]:
        return self._access.providers()

    def is_provider(self, address: str) -> bool:
        return self._access.is_provider(normalize_address(address))

    def current_batch_id(self) -> int:
        return self._batches().current_batch_id()

    def get_batch(self, batch_id: int) -> Batch:
        return self._batches().require_batch(batch_id)

    def is_batch_active(self, batch_id: int) -> bool:
        return self._batches().is_batch_active(batch_id)

    def get_record(self, batch_id: int, player: str) -> tuple[str | None, str | None]:
        return self._records.get(batch_id, normalize_address(player))

    def get_context(self, request_id: int) -> DecryptionContext:
        context = self._bridge().get_context(request_id)
        if context is None:
            raise UnknownRequestError(f"Decryption request {request_id} does not exist")
        return context

    def pending_contexts(self) -> list[DecryptionContext]:
        return self._bridge().pending_contexts()

    def last_action(self, address: str, kind: ActionKind) -> int | None:
        return self._cooldowns.last_action(address, kind)

    def list_events(self, after: int = 0, limit: int = 100) -> list[EventRecord]:
        return self._events.list_events(after=after, limit=limit)

    def all_events(self) -> list[EventRecord]:
        return self._events.all_events()
