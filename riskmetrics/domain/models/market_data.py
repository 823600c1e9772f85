"""Market data domain models.

PricePoint           — one daily closing price for one asset.
ReturnPoint          — a log return derived from two consecutive-day prices.
BenchmarkLevel       — one raw observation of the market benchmark.
BenchmarkReturnPoint — a daily log return of the benchmark.

All are immutable value objects keyed by their natural date key.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

_LOG_RETURN_TOL = 1e-9


class PricePoint(BaseModel):
    """Daily price observation for one asset.

    price is not constrained here: non-positive prices are a data-quality
    finding that the return builder counts as invalid, not a construction
    error.
    """

    model_config = ConfigDict(frozen=True)

    asset_id: UUID
    price_date: date
    price: float


class ReturnPoint(BaseModel):
    """Daily log return r_t = ln(P_t / P_{t-1}) for one asset.

    The natural key is (asset_id, return_date).  price_previous belongs to
    the calendar day immediately before return_date.
    """

    model_config = ConfigDict(frozen=True)

    asset_id: UUID
    return_date: date
    log_return: float
    price_current: float = Field(gt=0.0)
    price_previous: float = Field(gt=0.0)

    @model_validator(mode="after")
    def _log_return_matches_prices(self) -> "ReturnPoint":
        expected = math.log(self.price_current / self.price_previous)
        if not math.isclose(self.log_return, expected, rel_tol=_LOG_RETURN_TOL, abs_tol=1e-12):
            raise ValueError(
                f"log_return {self.log_return} does not match "
                f"ln({self.price_current} / {self.price_previous}) = {expected}"
            )
        return self

    @property
    def previous_date(self) -> date:
        return self.return_date - timedelta(days=1)

    @classmethod
    def from_prices(
        cls,
        asset_id: UUID,
        return_date: date,
        price_current: float,
        price_previous: float,
    ) -> "ReturnPoint":
        return cls(
            asset_id=asset_id,
            return_date=return_date,
            log_return=math.log(price_current / price_previous),
            price_current=price_current,
            price_previous=price_previous,
        )


class BenchmarkLevel(BaseModel):
    """Raw benchmark observation; several may exist per calendar day."""

    model_config = ConfigDict(frozen=True)

    observed_at: datetime
    level: float


class BenchmarkReturnPoint(BaseModel):
    """Daily benchmark log return between the last observations of two days."""

    model_config = ConfigDict(frozen=True)

    return_date: date
    log_return: float
    level_current: float = Field(gt=0.0)
    level_previous: float = Field(gt=0.0)
