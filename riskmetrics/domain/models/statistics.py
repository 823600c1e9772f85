"""Per-asset windowed statistics.

Every record is keyed by (asset_id, stat_date, window_days) within its
family.  window_days is the effective window actually used (it grows from
the family's minimum up to its target) and num_observations is the number
of return points consumed.  Records are append-only.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class WindowedStatistic(BaseModel):
    """Common key and bookkeeping fields of all windowed statistics."""

    model_config = ConfigDict(frozen=True)

    asset_id: UUID
    stat_date: date
    window_days: int = Field(gt=0)
    num_observations: int = Field(ge=0)

    @property
    def key(self) -> tuple[date, int]:
        """Uniqueness key within one asset and family."""
        return (self.stat_date, self.window_days)


class VolatilityStatistic(WindowedStatistic):
    """Population volatility of daily log returns.

    annualized_volatility = daily_volatility * sqrt(annualization_days).
    """

    mean_return: float
    daily_volatility: float = Field(ge=0.0)
    annualized_volatility: float = Field(ge=0.0)


class VaRStatistic(WindowedStatistic):
    """Historical value-at-risk and expected shortfall at 95 % and 99 %.

    Losses are reported as positive numbers.  std_dev is the sample standard
    deviation of the window.
    """

    var_95: float
    var_99: float
    cvar_95: float
    cvar_99: float
    mean_return: float
    std_dev: float = Field(ge=0.0)
    min_return: float
    max_return: float

    @model_validator(mode="after")
    def _tail_ordering(self) -> "VaRStatistic":
        if self.min_return > self.max_return:
            raise ValueError("min_return cannot exceed max_return")
        return self


class DistributionStatistic(WindowedStatistic):
    """Shape of the return distribution: sample skewness and excess kurtosis."""

    skewness: float
    kurtosis: float
    mean_return: float
    std_dev: float = Field(ge=0.0)


class BetaStatistic(WindowedStatistic):
    """OLS regression of asset returns on benchmark returns."""

    beta: float
    alpha: float
    r_squared: float = Field(ge=0.0)
    correlation: float


class SMLStatistic(WindowedStatistic):
    """Position of the asset relative to the security market line.

    expected_return is the CAPM return for beta; alpha is Jensen's alpha.
    All returns are annualized.
    """

    beta: float
    expected_return: float
    actual_return: float
    alpha: float
    is_overvalued: bool
    market_return: float
