"""Durable event stream of registry state transitions."""

from sqlalchemy import BigInteger, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from player_dna.db.session import Base


class EventRecord(Base):
    """One emitted event; ``sequence`` gives the total order of the log."""

    __tablename__ = "event_log"

    sequence: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_type: Mapped[str] = mapped_column(Text, nullable=False)  # e.g., 'BatchOpened'
    batch_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    caller: Mapped[str | None] = mapped_column(Text, nullable=True)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    # JSON object with the event arguments.
    payload: Mapped[str] = mapped_column(Text, nullable=False)
