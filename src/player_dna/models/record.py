"""Encrypted per-player skill records."""

from sqlalchemy import BigInteger, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from player_dna.db.session import Base


class EncryptedRecord(Base):
    """Pair of ciphertext handles submitted for a player within a batch.

    Handles are opaque references into the homomorphic backend. A later
    submission for the same (batch, player) overwrites the pair.
    """

    __tablename__ = "encrypted_record"

    batch_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("batch.id"),
        primary_key=True,
    )
    player: Mapped[str] = mapped_column(Text, primary_key=True)
    skill_handle: Mapped[str] = mapped_column(Text, nullable=False)
    play_count_handle: Mapped[str] = mapped_column(Text, nullable=False)
    submitted_by: Mapped[str] = mapped_column(Text, nullable=False)
    submitted_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
