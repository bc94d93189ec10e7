"""Singleton row carrying the registry's global configuration and flags."""

from sqlalchemy import BigInteger, Boolean, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from player_dna.db.session import Base

REGISTRY_STATE_ID = 1


class RegistryState(Base):
    """Owner, pause flag, current batch pointer and cooldown intervals."""

    __tablename__ = "registry_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=REGISTRY_STATE_ID)
    # Identity mixed into every state hash; fixed at initialization.
    identity: Mapped[str] = mapped_column(Text, nullable=False)
    owner: Mapped[str] = mapped_column(Text, nullable=False)
    paused: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    current_batch_id: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    submission_cooldown_seconds: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    decryption_cooldown_seconds: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    initialized_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
