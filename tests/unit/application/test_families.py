"""Tests for riskmetrics/application/families.py."""

import math
from datetime import date
from uuid import uuid4

import pytest

from riskmetrics.application.families import (
    FAMILY_DEFINITIONS,
    compute_beta,
    compute_distribution,
    compute_sml,
    compute_var,
    compute_volatility,
)
from riskmetrics.domain.models import EngineConfig, MetricFamily
from riskmetrics.domain.services.windows import WindowSlice

RETURNS = [0.01, -0.02, 0.015, 0.005, -0.01, 0.02, -0.005, 0.012, -0.008, 0.003]
WINDOW = WindowSlice(stat_date=date(2024, 1, 10), window_days=10, start=0, stop=10)


@pytest.fixture
def config():
    return EngineConfig()


def test_every_family_has_a_definition():
    assert set(FAMILY_DEFINITIONS) == set(MetricFamily)
    for family, definition in FAMILY_DEFINITIONS.items():
        assert definition.family is family
        assert definition.needs_benchmark == family.needs_benchmark


def test_definition_policy_comes_from_config(config):
    assert FAMILY_DEFINITIONS[MetricFamily.VAR].policy(config).target_window == 365


def test_volatility_is_population_std(config):
    stat = compute_volatility(uuid4(), WINDOW, RETURNS, None, config)
    mean = sum(RETURNS) / len(RETURNS)
    expected = math.sqrt(sum((r - mean) ** 2 for r in RETURNS) / len(RETURNS))
    assert stat.daily_volatility == pytest.approx(expected)
    assert stat.annualized_volatility == pytest.approx(expected * math.sqrt(365))
    assert stat.key == (date(2024, 1, 10), 10)


def test_var_reports_losses_as_positive(config):
    stat = compute_var(uuid4(), WINDOW, RETURNS, None, config)
    # floor(0.05 * 10) = 0 -> worst return
    assert stat.var_95 == pytest.approx(0.02)
    assert stat.var_99 == pytest.approx(0.02)
    assert stat.cvar_95 >= stat.var_95 - 1e-12
    assert stat.min_return == pytest.approx(-0.02)
    assert stat.max_return == pytest.approx(0.02)


def test_distribution_of_constant_window_is_flat(config):
    stat = compute_distribution(uuid4(), WINDOW, [0.01] * 10, None, config)
    assert stat.skewness == 0.0
    assert stat.kurtosis == 0.0
    assert stat.std_dev == pytest.approx(0.0, abs=1e-12)


def test_beta_requires_benchmark(config):
    with pytest.raises(ValueError):
        compute_beta(uuid4(), WINDOW, RETURNS, None, config)


def test_beta_below_minimum_observations_is_none(config):
    short = WindowSlice(stat_date=date(2024, 1, 4), window_days=4, start=0, stop=4)
    assert compute_beta(uuid4(), short, RETURNS[:4], RETURNS[:4], config) is None


def test_beta_of_scaled_series(config):
    stat = compute_beta(uuid4(), WINDOW, [2 * r for r in RETURNS], RETURNS, config)
    assert stat.beta == pytest.approx(2.0)
    assert stat.correlation == pytest.approx(1.0)


def test_sml_flags_underperformer_as_overvalued(config):
    asset = [r - 0.001 for r in RETURNS]
    stat = compute_sml(uuid4(), WINDOW, asset, RETURNS, config)
    assert stat.beta == pytest.approx(1.0)
    assert stat.alpha < 0
    assert stat.is_overvalued is True
