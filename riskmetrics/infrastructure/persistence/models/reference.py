"""Reference layer ORM models: assets, portfolio_configs, portfolio_snapshot_constituents."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Double, ForeignKey, Index, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from riskmetrics.infrastructure.database import Base


class Asset(Base):
    """Priced asset.  symbol is unique (case-sensitive at the DB level)."""

    __tablename__ = "assets"
    __table_args__ = (UniqueConstraint("symbol", name="uq_assets_symbol"),)

    asset_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    symbol: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class PortfolioConfig(Base):
    """Market-cap weighted portfolio definition (e.g. a top-N index)."""

    __tablename__ = "portfolio_configs"
    __table_args__ = (UniqueConstraint("name", name="uq_portfolio_configs_name"),)

    portfolio_config_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="true")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    constituents: Mapped[list["PortfolioSnapshotConstituent"]] = relationship(
        back_populates="portfolio_config", cascade="all, delete-orphan"
    )


class PortfolioSnapshotConstituent(Base):
    """Membership of an asset in a portfolio on a snapshot date, with its market cap.

    Composite PK: (portfolio_config_id, snapshot_date, asset_id).
    """

    __tablename__ = "portfolio_snapshot_constituents"
    __table_args__ = (
        Index("ix_portfolio_snapshot_constituents_config_date", "portfolio_config_id", "snapshot_date"),
    )

    portfolio_config_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("portfolio_configs.portfolio_config_id", ondelete="CASCADE"),
        primary_key=True,
    )
    snapshot_date: Mapped[date] = mapped_column(Date, primary_key=True, nullable=False)
    asset_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("assets.asset_id", ondelete="CASCADE"), primary_key=True
    )
    market_cap: Mapped[float] = mapped_column(Double, nullable=False)

    portfolio_config: Mapped["PortfolioConfig"] = relationship(back_populates="constituents")
