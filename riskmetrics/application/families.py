"""Metric-family configurations for the generic rolling recompute.

Each family is one compute function over a window slice plus the window
policy taken from EngineConfig.  The recompute loop, idempotency checks and
persistence are shared (see recompute.py).
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from uuid import UUID

from riskmetrics.domain.models.enums import MetricFamily, VarianceConvention
from riskmetrics.domain.models.statistics import (
    BetaStatistic,
    DistributionStatistic,
    SMLStatistic,
    VaRStatistic,
    VolatilityStatistic,
    WindowedStatistic,
)
from riskmetrics.domain.models.windows import EngineConfig, WindowPolicy
from riskmetrics.domain.services.sensitivity import MarketSensitivityService
from riskmetrics.domain.services.univariate import UnivariateStatisticsService
from riskmetrics.domain.services.windows import WindowSlice

ComputeFn = Callable[
    [UUID, WindowSlice, Sequence[float], Sequence[float] | None, EngineConfig],
    WindowedStatistic | None,
]

_univariate = UnivariateStatisticsService()
_sensitivity = MarketSensitivityService()


def compute_volatility(
    asset_id: UUID,
    window: WindowSlice,
    returns: Sequence[float],
    benchmark: Sequence[float] | None,
    config: EngineConfig,
) -> VolatilityStatistic:
    daily = _univariate.daily_volatility(returns)
    return VolatilityStatistic(
        asset_id=asset_id,
        stat_date=window.stat_date,
        window_days=window.window_days,
        num_observations=len(returns),
        mean_return=_univariate.mean(returns),
        daily_volatility=daily,
        annualized_volatility=_univariate.annualize(daily, config.annualization_days),
    )


def compute_var(
    asset_id: UUID,
    window: WindowSlice,
    returns: Sequence[float],
    benchmark: Sequence[float] | None,
    config: EngineConfig,
) -> VaRStatistic:
    return VaRStatistic(
        asset_id=asset_id,
        stat_date=window.stat_date,
        window_days=window.window_days,
        num_observations=len(returns),
        var_95=_univariate.value_at_risk(returns, 95),
        var_99=_univariate.value_at_risk(returns, 99),
        cvar_95=_univariate.conditional_value_at_risk(returns, 95),
        cvar_99=_univariate.conditional_value_at_risk(returns, 99),
        mean_return=_univariate.mean(returns),
        std_dev=_univariate.std_dev(returns, VarianceConvention.SAMPLE),
        min_return=float(min(returns)),
        max_return=float(max(returns)),
    )


def compute_distribution(
    asset_id: UUID,
    window: WindowSlice,
    returns: Sequence[float],
    benchmark: Sequence[float] | None,
    config: EngineConfig,
) -> DistributionStatistic:
    return DistributionStatistic(
        asset_id=asset_id,
        stat_date=window.stat_date,
        window_days=window.window_days,
        num_observations=len(returns),
        skewness=_univariate.skewness(returns),
        kurtosis=_univariate.kurtosis(returns),
        mean_return=_univariate.mean(returns),
        std_dev=_univariate.std_dev(returns, VarianceConvention.SAMPLE),
    )


def compute_beta(
    asset_id: UUID,
    window: WindowSlice,
    returns: Sequence[float],
    benchmark: Sequence[float] | None,
    config: EngineConfig,
) -> BetaStatistic | None:
    if benchmark is None:
        raise ValueError("beta requires benchmark returns")
    result = _sensitivity.beta(returns, benchmark, config.min_beta_observations)
    if result is None:
        return None
    return BetaStatistic(
        asset_id=asset_id,
        stat_date=window.stat_date,
        window_days=window.window_days,
        num_observations=result.num_observations,
        beta=result.beta,
        alpha=result.alpha,
        r_squared=result.r_squared,
        correlation=result.correlation,
    )


def compute_sml(
    asset_id: UUID,
    window: WindowSlice,
    returns: Sequence[float],
    benchmark: Sequence[float] | None,
    config: EngineConfig,
) -> SMLStatistic | None:
    if benchmark is None:
        raise ValueError("SML requires benchmark returns")
    beta = _sensitivity.beta(returns, benchmark, config.min_beta_observations)
    if beta is None:
        return None
    sml = _sensitivity.sml(
        beta=beta.beta,
        actual_return=_univariate.annualized_return(returns, config.annualization_days),
        market_return=_univariate.annualized_return(benchmark, config.annualization_days),
        risk_free_rate=config.risk_free_rate,
    )
    return SMLStatistic(
        asset_id=asset_id,
        stat_date=window.stat_date,
        window_days=window.window_days,
        num_observations=beta.num_observations,
        beta=sml.beta,
        expected_return=sml.expected_return,
        actual_return=sml.actual_return,
        alpha=sml.jensen_alpha,
        is_overvalued=sml.is_overvalued,
        market_return=sml.market_return,
    )


@dataclass(frozen=True)
class FamilyDefinition:
    """What varies between the per-asset rolling recompute jobs."""

    family: MetricFamily
    compute: ComputeFn

    @property
    def needs_benchmark(self) -> bool:
        return self.family.needs_benchmark

    def policy(self, config: EngineConfig) -> WindowPolicy:
        return config.policy_for(self.family)


FAMILY_DEFINITIONS: dict[MetricFamily, FamilyDefinition] = {
    MetricFamily.VOLATILITY: FamilyDefinition(MetricFamily.VOLATILITY, compute_volatility),
    MetricFamily.VAR: FamilyDefinition(MetricFamily.VAR, compute_var),
    MetricFamily.DISTRIBUTION: FamilyDefinition(MetricFamily.DISTRIBUTION, compute_distribution),
    MetricFamily.BETA: FamilyDefinition(MetricFamily.BETA, compute_beta),
    MetricFamily.SML: FamilyDefinition(MetricFamily.SML, compute_sml),
}
