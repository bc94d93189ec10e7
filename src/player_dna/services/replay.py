"""Replay protection for login challenges."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from player_dna.models import UsedChallenge


class ReplayProtectionService:
    """Service preventing reuse of signed login challenges."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def is_replay(self, address: str, nonce_hex: str) -> bool:
        """Return True if the challenge nonce has already been redeemed by the caller."""
        return self._db.get(UsedChallenge, (address, nonce_hex)) is not None

    def register_replay(self, address: str, nonce_hex: str, now: int) -> bool:
        """Record a challenge nonce as used; return False if it already was."""
        if self.is_replay(address, nonce_hex):
            return False
        self._db.add(UsedChallenge(address=address, nonce_hex=nonce_hex, used_at=now))
        try:
            self._db.commit()
        except IntegrityError:
            self._db.rollback()
            return False
        return True
