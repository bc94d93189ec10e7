"""Models for the asynchronous decryption protocol."""

from sqlalchemy import VARCHAR, BigInteger, Boolean, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from player_dna.db.session import Base

ORACLE_REQUEST_PENDING = "pending"
ORACLE_REQUEST_FULFILLED = "fulfilled"

# Correlation ids are stored in a 32-bit INTEGER column.
MAX_REQUEST_ID = 2**31 - 1


class OracleRequest(Base):
    """Outbound decryption request handed to the oracle.

    The autoincrement id is the correlation id returned to the requester and
    echoed back by the oracle callback.
    """

    __tablename__ = "oracle_request"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # JSON array of the ciphertext handles the oracle is asked to decrypt.
    handles: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        VARCHAR(20), nullable=False, default=ORACLE_REQUEST_PENDING
    )  # 'pending', 'fulfilled'
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


class DecryptionContext(Base):
    """Correlation record linking a pending decryption to its eventual callback.

    Created once per request with ``processed=False`` and flipped to
    ``processed=True`` exactly once. Rows are kept forever for audit.
    """

    __tablename__ = "decryption_context"

    request_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("oracle_request.id"),
        primary_key=True,
        autoincrement=False,
    )
    batch_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("batch.id"), nullable=False)
    player: Mapped[str] = mapped_column(Text, nullable=False)
    # Retained so the state hash can be recomputed when the callback arrives.
    result_handle: Mapped[str] = mapped_column(Text, nullable=False)
    state_hash: Mapped[str] = mapped_column(Text, nullable=False)
    processed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    result_value: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    requested_by: Mapped[str] = mapped_column(Text, nullable=False)
    requested_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    completed_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
