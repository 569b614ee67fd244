"""Durable cache entry database model."""

from sqlalchemy import BigInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class CacheEntry(Base):
    """One cached document, stored as JSON text.

    ``timestamp`` is epoch milliseconds of the last write. Freshness is
    decided by the reader, so no expiry is stored with the row.
    """

    __tablename__ = "cache_entries"

    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    payload: Mapped[str] = mapped_column(Text)
    timestamp: Mapped[int] = mapped_column(BigInteger, index=True)
