"""Tests for riskmetrics/domain/models/statistics.py, portfolio.py, stress.py and runs.py."""

from datetime import date
from uuid import uuid4

import pytest
from pydantic import ValidationError

from riskmetrics.domain.models import (
    PortfolioConstituentStatistic,
    PortfolioStatistic,
    RunReport,
    StressScenario,
    VaRStatistic,
    VolatilityStatistic,
)


def _vol(**overrides):
    defaults = dict(
        asset_id=uuid4(),
        stat_date=date(2024, 1, 10),
        window_days=7,
        num_observations=7,
        mean_return=0.001,
        daily_volatility=0.02,
        annualized_volatility=0.38,
    )
    defaults.update(overrides)
    return VolatilityStatistic(**defaults)


def test_key_is_date_and_window():
    assert _vol().key == (date(2024, 1, 10), 7)


def test_negative_volatility_raises():
    with pytest.raises(ValidationError):
        _vol(daily_volatility=-0.01)


def test_zero_window_raises():
    with pytest.raises(ValidationError):
        _vol(window_days=0)


def test_var_statistic_rejects_min_above_max():
    with pytest.raises(ValidationError):
        VaRStatistic(
            asset_id=uuid4(),
            stat_date=date(2024, 1, 10),
            window_days=7,
            num_observations=7,
            var_95=0.05,
            var_99=0.07,
            cvar_95=0.06,
            cvar_99=0.07,
            mean_return=0.0,
            std_dev=0.02,
            min_return=0.03,
            max_return=-0.03,
        )


def test_portfolio_weight_sum():
    members = [
        PortfolioConstituentStatistic(
            asset_id=uuid4(), weight=w, market_cap=w * 100, daily_volatility=0.02, annualized_volatility=0.4
        )
        for w in (0.5, 0.3, 0.2)
    ]
    stat = PortfolioStatistic(
        portfolio_config_id=uuid4(),
        stat_date=date(2024, 1, 10),
        window_days=30,
        daily_volatility=0.015,
        annualized_volatility=0.29,
        num_constituents=3,
        total_market_cap=100.0,
        weighted_average_volatility=0.4,
        diversification_benefit=0.11,
        hhi=0.38,
        effective_n=2.63,
        constituents=members,
    )
    assert stat.weight_sum == pytest.approx(1.0)


def test_constituent_weight_above_one_raises():
    with pytest.raises(ValidationError):
        PortfolioConstituentStatistic(
            asset_id=uuid4(), weight=1.2, market_cap=1.0, daily_volatility=0.0, annualized_volatility=0.0
        )


def test_default_stress_scenarios():
    assert [(s.name, s.market_shock) for s in StressScenario.defaults()] == [
        ("Mild", -0.10),
        ("Moderate", -0.25),
        ("Severe", -0.50),
    ]


def test_run_report_add_accumulates():
    total = RunReport(job="var", computed=2, errored=1)
    total.add(RunReport(job="var", computed=3, skipped=4, invalid=1, insufficient=2))
    assert (total.computed, total.skipped, total.invalid, total.insufficient, total.errored) == (5, 4, 1, 2, 1)
    assert total.summary().startswith("var: computed=5")
