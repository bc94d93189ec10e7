"""Per-address, per-action minimum interval gate."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from player_dna.models import ActionCooldown, ActionKind
from player_dna.services.errors import CooldownActiveError


class CooldownThrottle:
    """Check-and-update cooldown gate backed by the ``action_cooldown`` table.

    The check and the update happen in one call, inside the same unit of work
    as the action being guarded. Advancing the timestamp is a conditional
    UPDATE and the first insert runs in a savepoint, so concurrent sessions
    cannot both pass the gate for the same window.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def last_action(self, address: str, kind: ActionKind) -> int | None:
        row = self._db.get(ActionCooldown, (address, kind.value))
        return None if row is None else int(row.last_action_at)

    def _stored_last_action(self, address: str, kind: ActionKind) -> int | None:
        value = self._db.execute(
            select(ActionCooldown.last_action_at).where(
                ActionCooldown.address == address,
                ActionCooldown.action == kind.value,
            )
        ).scalar_one_or_none()
        return None if value is None else int(value)

    def _advance(self, address: str, kind: ActionKind, now: int, cooldown_seconds: int) -> bool:
        result = self._db.execute(
            update(ActionCooldown)
            .where(
                ActionCooldown.address == address,
                ActionCooldown.action == kind.value,
                ActionCooldown.last_action_at <= now - cooldown_seconds,
            )
            .values(last_action_at=now)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1

    def _insert_first(self, address: str, kind: ActionKind, now: int) -> bool:
        try:
            with self._db.begin_nested():
                self._db.add(ActionCooldown(address=address, action=kind.value, last_action_at=now))
        except IntegrityError:
            return False
        return True

    def check_and_update(
        self, address: str, kind: ActionKind, now: int, cooldown_seconds: int
    ) -> None:
        """Record ``now`` as the latest action or raise if the cooldown is active."""
        cooldown_seconds = int(cooldown_seconds)
        if self._advance(address, kind, now, cooldown_seconds):
            return

        last = self._stored_last_action(address, kind)
        if last is None:
            if self._insert_first(address, kind, now):
                return
            # Another session inserted the first row since the UPDATE above.
            if self._advance(address, kind, now, cooldown_seconds):
                return
            last = self._db.execute(
                select(ActionCooldown.last_action_at).where(
                    ActionCooldown.address == address,
                    ActionCooldown.action == kind.value,
                )
            ).scalar_one()

        retry_at = int(last) + cooldown_seconds
        raise CooldownActiveError(
            f"{kind.value} cooldown active for {address} until {retry_at}",
            retry_at=retry_at,
        )
