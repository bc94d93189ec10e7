"""Models supporting replay protection for authentication challenges."""

from sqlalchemy import BigInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from player_dna.db.session import Base


class UsedChallenge(Base):
    """Record indicating that a login challenge has already been redeemed."""

    __tablename__ = "used_challenge"

    # (address, nonce_hex) -> existence means "already seen".
    address: Mapped[str] = mapped_column(Text, primary_key=True)
    nonce_hex: Mapped[str] = mapped_column(Text, primary_key=True)
    used_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
