"""Windowed statistic ORM models, one table per metric family.

Every table has the composite PK (asset_id, stat_date, window_days), which
is the uniqueness key enforced at the storage boundary.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Double, ForeignKey, Integer, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from riskmetrics.infrastructure.database import Base


class WindowedStatisticColumns:
    """Key and bookkeeping columns shared by all windowed statistic tables."""

    asset_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("assets.asset_id", ondelete="CASCADE"), primary_key=True
    )
    stat_date: Mapped[date] = mapped_column(Date, primary_key=True, nullable=False)
    window_days: Mapped[int] = mapped_column(Integer, primary_key=True, nullable=False)
    num_observations: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class VolatilityStatistic(WindowedStatisticColumns, Base):
    __tablename__ = "volatility_statistics"

    mean_return: Mapped[float] = mapped_column(Double, nullable=False)
    daily_volatility: Mapped[float] = mapped_column(Double, nullable=False)
    annualized_volatility: Mapped[float] = mapped_column(Double, nullable=False)


class VaRStatistic(WindowedStatisticColumns, Base):
    __tablename__ = "var_statistics"

    var_95: Mapped[float] = mapped_column(Double, nullable=False)
    var_99: Mapped[float] = mapped_column(Double, nullable=False)
    cvar_95: Mapped[float] = mapped_column(Double, nullable=False)
    cvar_99: Mapped[float] = mapped_column(Double, nullable=False)
    mean_return: Mapped[float] = mapped_column(Double, nullable=False)
    std_dev: Mapped[float] = mapped_column(Double, nullable=False)
    min_return: Mapped[float] = mapped_column(Double, nullable=False)
    max_return: Mapped[float] = mapped_column(Double, nullable=False)


class DistributionStatistic(WindowedStatisticColumns, Base):
    __tablename__ = "distribution_statistics"

    skewness: Mapped[float] = mapped_column(Double, nullable=False)
    kurtosis: Mapped[float] = mapped_column(Double, nullable=False)
    mean_return: Mapped[float] = mapped_column(Double, nullable=False)
    std_dev: Mapped[float] = mapped_column(Double, nullable=False)


class BetaStatistic(WindowedStatisticColumns, Base):
    __tablename__ = "beta_statistics"

    beta: Mapped[float] = mapped_column(Double, nullable=False)
    alpha: Mapped[float] = mapped_column(Double, nullable=False)
    r_squared: Mapped[float] = mapped_column(Double, nullable=False)
    correlation: Mapped[float] = mapped_column(Double, nullable=False)


class SMLStatistic(WindowedStatisticColumns, Base):
    __tablename__ = "sml_statistics"

    beta: Mapped[float] = mapped_column(Double, nullable=False)
    expected_return: Mapped[float] = mapped_column(Double, nullable=False)
    actual_return: Mapped[float] = mapped_column(Double, nullable=False)
    alpha: Mapped[float] = mapped_column(Double, nullable=False)
    is_overvalued: Mapped[bool] = mapped_column(Boolean, nullable=False)
    market_return: Mapped[float] = mapped_column(Double, nullable=False)
