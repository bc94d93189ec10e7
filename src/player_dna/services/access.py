"""Owner, provider allow-list and pause flag."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from player_dna.models import ActionKind, Provider, RegistryState
from player_dna.models.registry_state import REGISTRY_STATE_ID
from player_dna.services import events as ev
from player_dna.services.errors import (
    NotOwnerError,
    NotProviderError,
    PausedError,
    RegistryNotInitializedError,
)
from player_dna.services.events import EventLog

logger = logging.getLogger(__name__)


class AccessControl:
    """Access boundary consumed by every other registry component."""

    def __init__(self, db: Session, events: EventLog) -> None:
        self._db = db
        self._events = events

    # --- Reads --------------------------------------------------------------------
    def state(self) -> RegistryState:
        state = self._db.get(RegistryState, REGISTRY_STATE_ID)
        if state is None:
            raise RegistryNotInitializedError("Registry has not been initialized")
        return state

    def is_provider(self, address: str) -> bool:
        return self._db.get(Provider, address) is not None

    def providers(self) -> list[str]:
        return [row.address for row in self._db.query(Provider).order_by(Provider.address).all()]

    # --- Gates --------------------------------------------------------------------
    def require_owner(self, caller: str) -> RegistryState:
        state = self.state()
        if caller != state.owner:
            raise NotOwnerError(f"{caller} is not the registry owner")
        return state

    def require_provider(self, caller: str) -> None:
        if not self.is_provider(caller):
            raise NotProviderError(f"{caller} is not an authorized provider")

    def require_not_paused(self) -> None:
        if self.state().paused:
            raise PausedError("Registry is paused")

    # --- Owner-only mutations -----------------------------------------------------
    def transfer_ownership(self, caller: str, new_owner: str, now: int) -> RegistryState:
        state = self.require_owner(caller)
        previous = state.owner
        state.owner = new_owner
        self._events.emit(
            ev.OWNERSHIP_TRANSFERRED,
            timestamp=now,
            caller=caller,
            previous_owner=previous,
            new_owner=new_owner,
        )
        logger.info("Ownership transferred from %s to %s", previous, new_owner)
        return state

    def add_provider(self, caller: str, address: str, now: int) -> bool:
        """Authorize ``address``; returns False if it already was a provider."""
        self.require_owner(caller)
        if self.is_provider(address):
            return False
        self._db.add(Provider(address=address, added_at=now))
        self._events.emit(ev.PROVIDER_ADDED, timestamp=now, caller=caller, provider=address)
        logger.info("Provider %s added", address)
        return True

    def remove_provider(self, caller: str, address: str, now: int) -> bool:
        """Revoke ``address``; returns False if it was not a provider."""
        self.require_owner(caller)
        provider = self._db.get(Provider, address)
        if provider is None:
            return False
        self._db.delete(provider)
        self._events.emit(ev.PROVIDER_REMOVED, timestamp=now, caller=caller, provider=address)
        logger.info("Provider %s removed", address)
        return True

    def set_cooldown(self, caller: str, kind: ActionKind, seconds: int, now: int) -> RegistryState:
        state = self.require_owner(caller)
        if seconds < 0:
            raise ValueError("Cooldown seconds must be non-negative")
        if kind is ActionKind.SUBMISSION:
            state.submission_cooldown_seconds = seconds
        else:
            state.decryption_cooldown_seconds = seconds
        self._events.emit(
            ev.COOLDOWN_UPDATED,
            timestamp=now,
            caller=caller,
            action=kind.value,
            seconds=seconds,
        )
        return state

    def pause(self, caller: str, now: int) -> RegistryState:
        state = self.require_owner(caller)
        state.paused = True
        self._events.emit(ev.PAUSED, timestamp=now, caller=caller)
        logger.warning("Registry paused by %s", caller)
        return state

    def unpause(self, caller: str, now: int) -> RegistryState:
        state = self.require_owner(caller)
        state.paused = False
        self._events.emit(ev.UNPAUSED, timestamp=now, caller=caller)
        logger.info("Registry unpaused by %s", caller)
        return state

    def cooldown_seconds(self, kind: ActionKind) -> int:
        state = self.state()
        if kind is ActionKind.SUBMISSION:
            return int(state.submission_cooldown_seconds)
        return int(state.decryption_cooldown_seconds)
