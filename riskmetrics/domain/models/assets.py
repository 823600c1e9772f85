"""Reference data consumed by the engine: assets and portfolio configurations."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class Asset(BaseModel):
    """A priced asset.  symbol is unique across the system."""

    model_config = ConfigDict(frozen=True)

    asset_id: UUID
    symbol: str = Field(min_length=1)
    name: str


class PortfolioConfig(BaseModel):
    """A market-cap weighted portfolio definition (e.g. an index).

    Only active configurations are processed by the portfolio job.
    """

    model_config = ConfigDict(frozen=True)

    portfolio_config_id: UUID
    name: str
    is_active: bool = True


class ConstituentSnapshot(BaseModel):
    """One constituent of a portfolio on a snapshot date with its market cap."""

    model_config = ConfigDict(frozen=True)

    asset_id: UUID
    market_cap: float = Field(ge=0.0)
