"""Read-side access to risk statistics.

Stored statistics are preferred; when none exists for the requested window
the statistic is computed on the fly from stored returns and returned
without being persisted.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

from riskmetrics.domain.models.enums import MetricFamily
from riskmetrics.domain.models.portfolio import PortfolioStatistic
from riskmetrics.domain.models.statistics import BetaStatistic, WindowedStatistic
from riskmetrics.domain.models.stress import StressResult, StressScenario
from riskmetrics.domain.models.windows import EngineConfig
from riskmetrics.domain.services.lookup import LookupResult, resolve_statistic
from riskmetrics.domain.services.returns import ReturnSeriesService
from riskmetrics.domain.services.sensitivity import MarketSensitivityService, SMLPoint
from riskmetrics.domain.services.univariate import (
    CurvePoint,
    Histogram,
    UnivariateStatisticsService,
)
from riskmetrics.domain.services.windows import WindowSlice

from .families import FAMILY_DEFINITIONS
from .recompute import ScopeFactory

if TYPE_CHECKING:
    from riskmetrics.infrastructure.persistence.repositories import Repositories

logger = logging.getLogger(__name__)


def _check_window(window_days: int) -> None:
    if window_days <= 0:
        raise ValueError(f"window_days must be positive, got {window_days}")


def _window_or_default(window_days: int | None, default: int) -> int:
    if window_days is None:
        return default
    _check_window(window_days)
    return window_days


@dataclass
class ReturnDistribution:
    """Histogram of a return window with a fitted normal overlay."""

    histogram: Histogram | None
    normal_curve: list[CurvePoint]
    mean: float
    std_dev: float


class RiskReadService:
    """Two-tier lookups for single assets and portfolios."""

    def __init__(self, scope: ScopeFactory, config: EngineConfig) -> None:
        self._scope = scope
        self._config = config
        self._returns = ReturnSeriesService()
        self._univariate = UnivariateStatisticsService()
        self._sensitivity = MarketSensitivityService()

    async def get_statistic(
        self,
        family: MetricFamily,
        asset_id: UUID,
        window_days: int | None = None,
    ) -> LookupResult[WindowedStatistic]:
        """Latest stored statistic for the window (any window when None), else a transient one."""
        if window_days is not None:
            _check_window(window_days)
        async with self._scope() as repos:
            stored = await repos.statistics(family).get_latest(asset_id, window_days)

            async def compute() -> WindowedStatistic | None:
                return await self._compute_transient(repos, family, asset_id, window_days)

            return await resolve_statistic(stored, compute)

    async def _compute_transient(
        self,
        repos: Repositories,
        family: MetricFamily,
        asset_id: UUID,
        window_days: int | None,
    ) -> WindowedStatistic | None:
        definition = FAMILY_DEFINITIONS[family]
        policy = definition.policy(self._config)
        target = _window_or_default(window_days, policy.target_window)

        points = await repos.returns.get_returns(asset_id)
        bench: list[float] | None = None
        if definition.needs_benchmark:
            levels = await repos.benchmark.get_levels(self._config.benchmark_name)
            aligned = self._sensitivity.align(points, self._returns.build_benchmark_returns(levels))
            dates, values, bench = aligned.dates, aligned.asset, aligned.benchmark
            floor = self._config.min_beta_observations
        else:
            dates = [p.return_date for p in points]
            values = [p.log_return for p in points]
            floor = policy.minimum_window

        n = min(len(values), target)
        if n < floor:
            logger.debug("%s for %s: %d observations, need %d", family.value, asset_id, n, floor)
            return None

        window = WindowSlice(
            stat_date=dates[-1],
            window_days=n,
            start=len(values) - n,
            stop=len(values),
        )
        return definition.compute(
            asset_id,
            window,
            values[window.start : window.stop],
            bench[window.start : window.stop] if bench is not None else None,
            self._config,
        )

    async def get_stress_test(
        self,
        asset_id: UUID,
        window_days: int | None = None,
        scenarios: Sequence[StressScenario] | None = None,
    ) -> list[StressResult]:
        """Stress projections from the asset's beta and latest price; empty when either is missing."""
        lookup = await self.get_statistic(MetricFamily.BETA, asset_id, window_days)
        async with self._scope() as repos:
            price = await repos.prices.get_latest_price(asset_id)
        if not isinstance(lookup.value, BetaStatistic) or price is None:
            return []
        return self._sensitivity.stress_test(lookup.value.beta, price.price, scenarios)

    async def get_sml_line(self, window_days: int | None = None) -> list[SMLPoint]:
        """Security market line from the benchmark's annualized return over the window."""
        default = self._config.policy_for(MetricFamily.SML).target_window
        target = _window_or_default(window_days, default)
        async with self._scope() as repos:
            levels = await repos.benchmark.get_levels(self._config.benchmark_name)
        bench = [p.log_return for p in self._returns.build_benchmark_returns(levels)][-target:]
        market_return = self._univariate.annualized_return(bench, self._config.annualization_days)
        return self._sensitivity.sml_line(market_return, self._config.risk_free_rate)

    async def get_return_distribution(
        self,
        asset_id: UUID,
        window_days: int | None = None,
        bins: int = 30,
    ) -> ReturnDistribution:
        target = _window_or_default(
            window_days, self._config.policy_for(MetricFamily.DISTRIBUTION).target_window
        )
        async with self._scope() as repos:
            points = await repos.returns.get_returns(asset_id)
        values = [p.log_return for p in points][-target:]
        histogram = self._univariate.histogram(values, bins)
        mean = self._univariate.mean(values)
        std = self._univariate.daily_volatility(values)
        curve: list[CurvePoint] = []
        if histogram is not None:
            curve = self._univariate.normal_curve(mean, std, histogram.minimum, histogram.maximum)
        return ReturnDistribution(histogram=histogram, normal_curve=curve, mean=mean, std_dev=std)

    async def get_correlation(
        self,
        asset_a: UUID,
        asset_b: UUID,
        window_days: int | None = None,
    ) -> float | None:
        """Pearson correlation of two assets over their common return dates; None below two dates."""
        if window_days is not None:
            _check_window(window_days)
        async with self._scope() as repos:
            a = {p.return_date: p.log_return for p in await repos.returns.get_returns(asset_a)}
            b = {p.return_date: p.log_return for p in await repos.returns.get_returns(asset_b)}
        common = sorted(a.keys() & b.keys())
        if window_days is not None:
            common = common[-window_days:]
        if len(common) < 2:
            return None
        return self._sensitivity.correlation([a[d] for d in common], [b[d] for d in common])

    async def get_portfolio_latest(self, portfolio_config_id: UUID) -> PortfolioStatistic | None:
        async with self._scope() as repos:
            return await repos.portfolios.get_latest(portfolio_config_id)
