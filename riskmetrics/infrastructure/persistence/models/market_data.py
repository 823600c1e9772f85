"""Market data layer ORM models: price_points, benchmark_levels, return_points."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import BigInteger, Date, DateTime, Double, ForeignKey, Index, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from riskmetrics.infrastructure.database import Base


class PricePoint(Base):
    """Daily closing price of an asset.

    Composite PK: (asset_id, price_date).  Loaded by the ingestion process.
    """

    __tablename__ = "price_points"

    asset_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("assets.asset_id", ondelete="CASCADE"), primary_key=True
    )
    price_date: Mapped[date] = mapped_column(Date, primary_key=True, nullable=False)
    price: Mapped[float] = mapped_column(Double, nullable=False)
    pulled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class BenchmarkLevel(Base):
    """Raw benchmark observation; several may be recorded per day."""

    __tablename__ = "benchmark_levels"
    __table_args__ = (
        UniqueConstraint("benchmark_name", "observed_at", name="uq_benchmark_levels_name_time"),
        Index("ix_benchmark_levels_name_time", "benchmark_name", "observed_at"),
    )

    level_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    benchmark_name: Mapped[str] = mapped_column(Text, nullable=False)
    observed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    level: Mapped[float] = mapped_column(Double, nullable=False)


class ReturnPoint(Base):
    """Daily log return derived from two consecutive-day prices.

    Composite PK: (asset_id, return_date).  The PK is the idempotency key for
    the returns job.
    """

    __tablename__ = "return_points"
    __table_args__ = (Index("ix_return_points_return_date", "return_date"),)

    asset_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("assets.asset_id", ondelete="CASCADE"), primary_key=True
    )
    return_date: Mapped[date] = mapped_column(Date, primary_key=True, nullable=False)
    log_return: Mapped[float] = mapped_column(Double, nullable=False)
    price_current: Mapped[float] = mapped_column(Double, nullable=False)
    price_previous: Mapped[float] = mapped_column(Double, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
