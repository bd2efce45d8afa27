"""SQLAlchemy ORM model for the price_snapshots table.

Used for type reference only — persistence.py uses raw text() SQL.
Alembic migration 004_create_price_snapshots is the authoritative DDL source.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.wg_common.database import Base


class PriceSnapshotORM(Base):
    __tablename__ = "price_snapshots"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    match_id: Mapped[str] = mapped_column(String(64), nullable=False)
    market_type: Mapped[str] = mapped_column(String(20), nullable=False)
    price_a: Mapped[int] = mapped_column(Integer, nullable=False)
    price_b: Mapped[int] = mapped_column(Integer, nullable=False)
    volume_a: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    volume_b: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    # NOTE: No updated_at — snapshots are never mutated
