"""Return series builder: daily log returns from price and benchmark levels.

Asset returns are persisted once per (asset_id, return_date); the builder
only emits points that are new and valid.  Benchmark returns are derived
on each run and never stored.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta

import numpy as np
import pandas as pd

from riskmetrics.domain.models.market_data import (
    BenchmarkLevel,
    BenchmarkReturnPoint,
    PricePoint,
    ReturnPoint,
)

logger = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)


@dataclass
class ReturnSeriesResult:
    """Outcome of building returns for one asset.

    points  — new, valid return points in ascending date order.
    skipped — pairs whose return_date already has a stored return.
    invalid — pairs (or prices) rejected by data-quality checks.
    """

    points: list[ReturnPoint] = field(default_factory=list)
    skipped: int = 0
    invalid: int = 0


class ReturnSeriesService:
    """Pure computation service turning price histories into log returns.

    The class is stateless; all inputs are passed per call.
    """

    def build_returns(
        self,
        prices: Sequence[PricePoint],
        existing_dates: Collection[date] = frozenset(),
    ) -> ReturnSeriesResult:
        """Build log returns r_t = ln(P_t / P_{t-1}) for one asset.

        A pair is rejected as invalid when the two prices are identical
        (a stale quote) or when their dates are not exactly one calendar
        day apart.  Non-positive prices are removed before pairing and
        counted as invalid.  Pairs whose later date is in existing_dates are
        counted as skipped and not recomputed.

        Fewer than two usable prices yields an empty result.
        """
        result = ReturnSeriesResult()
        ordered = sorted(prices, key=lambda p: p.price_date)

        usable: list[PricePoint] = []
        for point in ordered:
            if point.price > 0 and math.isfinite(point.price):
                usable.append(point)
            else:
                result.invalid += 1

        for previous, current in zip(usable, usable[1:]):
            if current.price_date in existing_dates:
                result.skipped += 1
                continue
            if current.price == previous.price:
                result.invalid += 1
                continue
            if current.price_date - previous.price_date != _ONE_DAY:
                result.invalid += 1
                continue
            result.points.append(
                ReturnPoint.from_prices(
                    asset_id=current.asset_id,
                    return_date=current.price_date,
                    price_current=current.price,
                    price_previous=previous.price,
                )
            )

        logger.debug(
            "built %d returns (skipped=%d invalid=%d) from %d prices",
            len(result.points),
            result.skipped,
            result.invalid,
            len(ordered),
        )
        return result

    def build_benchmark_returns(
        self,
        levels: Sequence[BenchmarkLevel],
        as_of: date | None = None,
    ) -> list[BenchmarkReturnPoint]:
        """Daily benchmark log returns from raw level observations.

        Levels are reduced to the last observation of each calendar day and
        non-positive levels are dropped.  Returns are taken between
        consecutive available days; a gap in the benchmark history does not
        invalidate the following return.

        When as_of is given, levels observed on or after that date are
        ignored: the day is still open and its last observation is not final.
        """
        daily = self.daily_levels(levels, as_of)
        if len(daily) < 2:
            return []

        returns = np.log(daily / daily.shift(1)).dropna()
        previous = daily.shift(1)
        return [
            BenchmarkReturnPoint(
                return_date=day,
                log_return=float(ret),
                level_current=float(daily[day]),
                level_previous=float(previous[day]),
            )
            for day, ret in returns.items()
        ]

    def daily_levels(self, levels: Sequence[BenchmarkLevel], as_of: date | None = None) -> pd.Series:
        """Last positive level per calendar day before as_of, indexed by date (ascending)."""
        if not levels:
            return pd.Series(dtype=float)
        frame = pd.DataFrame(
            {
                "observed_at": [lvl.observed_at for lvl in levels],
                "level": [lvl.level for lvl in levels],
            }
        )
        frame = frame[frame["level"] > 0].sort_values("observed_at", kind="stable")
        if frame.empty:
            return pd.Series(dtype=float)
        frame = frame.assign(day=[ts.date() for ts in frame["observed_at"]])
        if as_of is not None:
            frame = frame[frame["day"] < as_of]
        return frame.groupby("day", sort=True)["level"].last()
