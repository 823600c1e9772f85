"""Portfolio statistic ORM models: portfolio_statistics, portfolio_constituent_statistics."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from sqlalchemy import BigInteger, Date, DateTime, Double, ForeignKey, Integer, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from riskmetrics.infrastructure.database import Base


class PortfolioStatistic(Base):
    """Volatility snapshot of one portfolio configuration on one date.

    Unique on (portfolio_config_id, stat_date).
    """

    __tablename__ = "portfolio_statistics"
    __table_args__ = (
        UniqueConstraint(
            "portfolio_config_id", "stat_date", name="uq_portfolio_statistics_config_date"
        ),
    )

    portfolio_statistic_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    portfolio_config_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("portfolio_configs.portfolio_config_id", ondelete="CASCADE"),
        nullable=False,
    )
    stat_date: Mapped[date] = mapped_column(Date, nullable=False)
    window_days: Mapped[int] = mapped_column(Integer, nullable=False)
    daily_volatility: Mapped[float] = mapped_column(Double, nullable=False)
    annualized_volatility: Mapped[float] = mapped_column(Double, nullable=False)
    num_constituents: Mapped[int] = mapped_column(Integer, nullable=False)
    total_market_cap: Mapped[float] = mapped_column(Double, nullable=False)
    weighted_average_volatility: Mapped[float] = mapped_column(Double, nullable=False)
    diversification_benefit: Mapped[float] = mapped_column(Double, nullable=False)
    hhi: Mapped[float] = mapped_column(Double, nullable=False)
    effective_n: Mapped[float] = mapped_column(Double, nullable=False)
    calculation_duration_ms: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    constituents: Mapped[list["PortfolioConstituentStatistic"]] = relationship(
        back_populates="portfolio_statistic",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class PortfolioConstituentStatistic(Base):
    """One constituent's weight, volatility and risk contribution in a snapshot.

    Composite PK: (portfolio_statistic_id, asset_id).
    """

    __tablename__ = "portfolio_constituent_statistics"

    portfolio_statistic_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("portfolio_statistics.portfolio_statistic_id", ondelete="CASCADE"),
        primary_key=True,
    )
    asset_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("assets.asset_id", ondelete="CASCADE"), primary_key=True
    )
    weight: Mapped[float] = mapped_column(Double, nullable=False)
    market_cap: Mapped[float] = mapped_column(Double, nullable=False)
    daily_volatility: Mapped[float] = mapped_column(Double, nullable=False)
    annualized_volatility: Mapped[float] = mapped_column(Double, nullable=False)
    mcr: Mapped[float] = mapped_column(Double, nullable=False)
    crc: Mapped[float] = mapped_column(Double, nullable=False)
    prc: Mapped[float] = mapped_column(Double, nullable=False)

    portfolio_statistic: Mapped["PortfolioStatistic"] = relationship(back_populates="constituents")
