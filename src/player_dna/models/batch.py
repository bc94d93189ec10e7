"""SQLAlchemy model for submission batches."""

from sqlalchemy import BigInteger, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from player_dna.db.session import Base


class Batch(Base):
    """Time-bounded epoch into which encrypted submissions are grouped.

    Ids are allocated sequentially starting at 1. A batch is created open
    (``active=True``, ``end_time=0``) and may be closed exactly once; it is
    never reopened or deleted.
    """

    __tablename__ = "batch"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    start_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    # 0 while the batch is open.
    end_time: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
