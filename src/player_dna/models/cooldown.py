"""Per-address action timestamps backing the cooldown throttle."""

from enum import Enum

from sqlalchemy import BigInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from player_dna.db.session import Base


class ActionKind(str, Enum):
    """Throttled action families."""

    SUBMISSION = "submission"
    DECRYPTION_REQUEST = "decryption_request"


class ActionCooldown(Base):
    """Last time an address performed an action of a given kind."""

    __tablename__ = "action_cooldown"

    address: Mapped[str] = mapped_column(Text, primary_key=True)
    action: Mapped[str] = mapped_column(Text, primary_key=True)
    last_action_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
