"""Allow-list of addresses permitted to submit data and request decryption."""

from sqlalchemy import BigInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from player_dna.db.session import Base


class Provider(Base):
    """Presence of a row means the address is an authorized data provider."""

    __tablename__ = "provider"

    address: Mapped[str] = mapped_column(Text, primary_key=True)
    added_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
