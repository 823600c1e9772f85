"""Portfolio snapshot statistics.

A PortfolioStatistic summarises one market-cap weighted portfolio on one
date and owns one PortfolioConstituentStatistic per constituent that had
enough history to be included.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PortfolioConstituentStatistic(BaseModel):
    """Per-constituent weight, own volatility and risk contribution.

    mcr / crc / prc are marginal, component and percent contributions to
    portfolio daily volatility.
    """

    model_config = ConfigDict(frozen=True)

    asset_id: UUID
    weight: float = Field(ge=0.0, le=1.0)
    market_cap: float = Field(ge=0.0)
    daily_volatility: float = Field(ge=0.0)
    annualized_volatility: float = Field(ge=0.0)
    mcr: float = 0.0
    crc: float = 0.0
    prc: float = 0.0


class PortfolioStatistic(BaseModel):
    """Volatility snapshot for one portfolio configuration on one date.

    The natural key is (portfolio_config_id, stat_date).
    """

    model_config = ConfigDict(frozen=True)

    portfolio_config_id: UUID
    stat_date: date
    window_days: int = Field(gt=0)
    daily_volatility: float = Field(ge=0.0)
    annualized_volatility: float = Field(ge=0.0)
    num_constituents: int = Field(ge=0)
    total_market_cap: float = Field(ge=0.0)
    weighted_average_volatility: float = Field(ge=0.0)
    diversification_benefit: float
    hhi: float = Field(ge=0.0)
    effective_n: float = Field(ge=0.0)
    calculation_duration_ms: int | None = Field(default=None, ge=0)
    constituents: list[PortfolioConstituentStatistic] = Field(default_factory=list)

    @property
    def weight_sum(self) -> float:
        return sum(c.weight for c in self.constituents)
