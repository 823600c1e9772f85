"""Market-sensitivity engine: beta / alpha, CAPM / SML and stress impact.

Formulas (sample moments, ddof = 1):
  beta        Cov(a, b) / Var(b)
  alpha       r̄_a − beta · r̄_b
  correlation Cov(a, b) / (σ_a · σ_b)
  R²          correlation²
  CAPM        E[R] = rf + beta · (R_m − rf)
  Jensen α    R_actual − E[R]

Asset and benchmark slices must be date-aligned before they reach the
engine; align() builds them from the two return series.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

import numpy as np

from riskmetrics.domain.models.market_data import BenchmarkReturnPoint, ReturnPoint
from riskmetrics.domain.models.stress import StressResult, StressScenario

_SML_MAX_BETA = 2.5
_SML_BETA_STEP = 0.1


# ─────────────────────────────────────────────────────────────────────────── #
# Output types                                                                 #
# ─────────────────────────────────────────────────────────────────────────── #


@dataclass
class AlignedReturns:
    """Asset and benchmark returns on the dates both series have, ascending."""

    dates: list[date]
    asset: list[float]
    benchmark: list[float]

    def __len__(self) -> int:
        return len(self.dates)


@dataclass
class BetaResult:
    beta: float
    alpha: float
    r_squared: float
    correlation: float
    num_observations: int


@dataclass
class SMLResult:
    """Position of one asset against the security market line.

    is_overvalued is True when the asset earned less than CAPM predicts
    for its beta (it plots below the line).
    """

    beta: float
    expected_return: float
    actual_return: float
    jensen_alpha: float
    is_overvalued: bool
    market_return: float


@dataclass
class SMLPoint:
    beta: float
    expected_return: float


# ─────────────────────────────────────────────────────────────────────────── #
# Service                                                                      #
# ─────────────────────────────────────────────────────────────────────────── #


class MarketSensitivityService:
    """Pure computation service relating an asset to the market benchmark.

    The class is stateless; thresholds and the risk-free rate are passed
    per call.
    """

    def align(
        self,
        asset_returns: Sequence[ReturnPoint],
        benchmark_returns: Sequence[BenchmarkReturnPoint],
    ) -> AlignedReturns:
        """Inner-join the two series on date."""
        bench_by_date = {p.return_date: p.log_return for p in benchmark_returns}
        aligned = AlignedReturns(dates=[], asset=[], benchmark=[])
        for point in sorted(asset_returns, key=lambda p: p.return_date):
            bench = bench_by_date.get(point.return_date)
            if bench is None:
                continue
            aligned.dates.append(point.return_date)
            aligned.asset.append(point.log_return)
            aligned.benchmark.append(bench)
        return aligned

    def beta(
        self,
        asset: Sequence[float],
        benchmark: Sequence[float],
        min_observations: int = 5,
    ) -> BetaResult | None:
        """Regress asset returns on benchmark returns.

        Returns None when fewer than min_observations aligned points are
        available.  A constant benchmark yields all-zero statistics.
        """
        if len(asset) != len(benchmark):
            raise ValueError(
                f"asset and benchmark lengths differ: {len(asset)} != {len(benchmark)}"
            )
        n = len(asset)
        if n < max(min_observations, 2):
            return None

        a = np.asarray(asset, dtype=float)
        b = np.asarray(benchmark, dtype=float)
        if np.ptp(b) == 0.0:
            return BetaResult(beta=0.0, alpha=0.0, r_squared=0.0, correlation=0.0, num_observations=n)

        cov = float(np.cov(a, b, ddof=1)[0, 1])
        var_b = float(np.var(b, ddof=1))
        beta = cov / var_b
        alpha = float(a.mean()) - beta * float(b.mean())

        correlation = 0.0
        if np.ptp(a) > 0.0:
            correlation = cov / (float(np.std(a, ddof=1)) * float(np.std(b, ddof=1)))

        return BetaResult(
            beta=beta,
            alpha=alpha,
            r_squared=correlation**2,
            correlation=correlation,
            num_observations=n,
        )

    def correlation(self, x: Sequence[float], y: Sequence[float]) -> float:
        """Pearson correlation of two aligned series; 0.0 when undefined."""
        if len(x) != len(y):
            raise ValueError(f"series lengths differ: {len(x)} != {len(y)}")
        if len(x) < 2:
            return 0.0
        a = np.asarray(x, dtype=float)
        b = np.asarray(y, dtype=float)
        if np.ptp(a) == 0.0 or np.ptp(b) == 0.0:
            return 0.0
        return float(np.corrcoef(a, b)[0, 1])

    # ─────────────────────────────────────────────────────────────────── #
    # CAPM / SML                                                           #
    # ─────────────────────────────────────────────────────────────────── #

    def expected_return(self, beta: float, market_return: float, risk_free_rate: float = 0.0) -> float:
        return risk_free_rate + beta * (market_return - risk_free_rate)

    def sml(
        self,
        beta: float,
        actual_return: float,
        market_return: float,
        risk_free_rate: float = 0.0,
    ) -> SMLResult:
        expected = self.expected_return(beta, market_return, risk_free_rate)
        return SMLResult(
            beta=beta,
            expected_return=expected,
            actual_return=actual_return,
            jensen_alpha=actual_return - expected,
            is_overvalued=actual_return < expected,
            market_return=market_return,
        )

    def sml_line(
        self,
        market_return: float,
        risk_free_rate: float = 0.0,
        max_beta: float = _SML_MAX_BETA,
        step: float = _SML_BETA_STEP,
    ) -> list[SMLPoint]:
        """Points of the security market line for beta in [0, max_beta]."""
        if step <= 0:
            raise ValueError(f"step must be positive, got {step}")
        count = int(round(max_beta / step))
        return [
            SMLPoint(
                beta=round(i * step, 10),
                expected_return=self.expected_return(round(i * step, 10), market_return, risk_free_rate),
            )
            for i in range(count + 1)
        ]

    # ─────────────────────────────────────────────────────────────────── #
    # Stress                                                               #
    # ─────────────────────────────────────────────────────────────────── #

    def stress_test(
        self,
        beta: float,
        current_price: float,
        scenarios: Sequence[StressScenario] | None = None,
    ) -> list[StressResult]:
        """Project the asset price under each market shock scaled by beta."""
        results = []
        for scenario in scenarios or StressScenario.defaults():
            impact = beta * scenario.market_shock
            new_price = current_price * (1 + impact)
            results.append(
                StressResult(
                    name=scenario.name,
                    market_shock=scenario.market_shock,
                    expected_impact=impact,
                    new_price=new_price,
                    price_change=new_price - current_price,
                )
            )
        return results
