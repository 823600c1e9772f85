"""Univariate statistics over a window of daily log returns.

Formulas:
  mean              r̄ = Σ r_i / n
  variance          Σ (r_i − r̄)² / (n − ddof)       ddof = 0 population, 1 sample
  daily volatility  σ_d = sqrt(population variance)
  annualized        σ_a = σ_d · sqrt(D)             D = annualization days (365)
  VaR(c)            −sorted(r)[floor((100 − c) / 100 · n)]
  CVaR(c)           −mean(sorted(r)[0 .. idx])      inclusive of the VaR index
  skewness          Fisher–Pearson, sample-bias corrected (n ≥ 3)
  excess kurtosis   sample-bias corrected, normal = 0 (n ≥ 4)
  annualized return Σ r_i / n · D

Insufficient observations and zero dispersion produce 0.0, never an
exception: callers store the neutral value or skip the record.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from scipy import stats

from riskmetrics.domain.models.enums import VarianceConvention

_MIN_SKEW_OBS = 3
_MIN_KURT_OBS = 4


@dataclass
class Histogram:
    """Equal-width histogram of a return window.

    edges has bins + 1 entries; counts has bins entries.
    """

    edges: list[float]
    counts: list[int]
    bin_width: float
    minimum: float
    maximum: float


@dataclass
class CurvePoint:
    x: float
    density: float


class UnivariateStatisticsService:
    """Pure computation service for single-series statistics.

    The class is stateless; the annualization factor and variance
    convention are passed per call.
    """

    def mean(self, values: Sequence[float]) -> float:
        if len(values) == 0:
            return 0.0
        return float(np.mean(values))

    def variance(self, values: Sequence[float], convention: VarianceConvention) -> float:
        """Variance under the given divisor convention; 0.0 when undefined."""
        ddof = convention.ddof
        if len(values) <= ddof:
            return 0.0
        return float(np.var(values, ddof=ddof))

    def std_dev(self, values: Sequence[float], convention: VarianceConvention) -> float:
        return math.sqrt(self.variance(values, convention))

    def daily_volatility(self, values: Sequence[float]) -> float:
        """Population standard deviation of daily returns."""
        return self.std_dev(values, VarianceConvention.POPULATION)

    def annualize(self, daily_volatility: float, annualization_days: int = 365) -> float:
        return daily_volatility * math.sqrt(annualization_days)

    def annualized_return(self, values: Sequence[float], annualization_days: int = 365) -> float:
        if len(values) == 0:
            return 0.0
        return float(np.sum(values)) / len(values) * annualization_days

    # ─────────────────────────────────────────────────────────────────── #
    # Tail risk                                                            #
    # ─────────────────────────────────────────────────────────────────── #

    def value_at_risk(self, values: Sequence[float], confidence: float) -> float:
        """Historical VaR at confidence (percent, e.g. 95), as a positive loss."""
        ordered = self._sorted_or_none(values)
        if ordered is None:
            return 0.0
        idx = self._tail_index(len(ordered), confidence)
        return -float(ordered[idx])

    def conditional_value_at_risk(self, values: Sequence[float], confidence: float) -> float:
        """Expected shortfall: mean loss over the tail up to and including the VaR index."""
        ordered = self._sorted_or_none(values)
        if ordered is None:
            return 0.0
        idx = self._tail_index(len(ordered), confidence)
        tail = ordered[: max(1, idx + 1)]
        return -float(np.mean(tail))

    @staticmethod
    def _sorted_or_none(values: Sequence[float]) -> np.ndarray | None:
        if len(values) < 2:
            return None
        return np.sort(np.asarray(values, dtype=float))

    @staticmethod
    def _tail_index(n: int, confidence: float) -> int:
        if not 0 < confidence < 100:
            raise ValueError(f"confidence must be in (0, 100), got {confidence}")
        return min(max(0, math.floor((100 - confidence) / 100 * n)), n - 1)

    # ─────────────────────────────────────────────────────────────────── #
    # Distribution shape                                                   #
    # ─────────────────────────────────────────────────────────────────── #

    def skewness(self, values: Sequence[float]) -> float:
        """Sample-bias-corrected skewness G1; 0.0 for n < 3 or constant data."""
        if len(values) < _MIN_SKEW_OBS or self._is_constant(values):
            return 0.0
        return float(stats.skew(np.asarray(values, dtype=float), bias=False))

    def kurtosis(self, values: Sequence[float]) -> float:
        """Sample-bias-corrected excess kurtosis G2; 0.0 for n < 4 or constant data."""
        if len(values) < _MIN_KURT_OBS or self._is_constant(values):
            return 0.0
        return float(stats.kurtosis(np.asarray(values, dtype=float), fisher=True, bias=False))

    @staticmethod
    def _is_constant(values: Sequence[float]) -> bool:
        return float(np.ptp(np.asarray(values, dtype=float))) == 0.0

    def histogram(self, values: Sequence[float], bins: int = 30) -> Histogram | None:
        """Equal-width histogram over [min, max]; None for an empty window.

        A constant window gets a unit-width range so every value lands in
        the first bin.
        """
        if bins <= 0:
            raise ValueError(f"bins must be positive, got {bins}")
        if len(values) == 0:
            return None
        arr = np.asarray(values, dtype=float)
        lo, hi = float(arr.min()), float(arr.max())
        span = hi - lo if hi > lo else 1.0
        counts, edges = np.histogram(arr, bins=bins, range=(lo, lo + span))
        return Histogram(
            edges=[float(e) for e in edges],
            counts=[int(c) for c in counts],
            bin_width=span / bins,
            minimum=lo,
            maximum=hi,
        )

    def normal_curve(
        self,
        mu: float,
        sigma: float,
        lo: float,
        hi: float,
        points: int = 100,
    ) -> list[CurvePoint]:
        """Normal density N(mu, sigma) sampled at evenly spaced points in [lo, hi]."""
        if sigma <= 0 or points < 2 or hi <= lo:
            return []
        xs = np.linspace(lo, hi, points)
        ys = stats.norm.pdf(xs, loc=mu, scale=sigma)
        return [CurvePoint(x=float(x), density=float(y)) for x, y in zip(xs, ys)]
