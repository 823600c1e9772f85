"""Tests for riskmetrics/domain/services/univariate.py.

Reference values are computed by hand from the textbook formulas so the
tests double as documentation of the conventions in use.
"""

import math

import numpy as np
import pytest

from riskmetrics.domain.models.enums import VarianceConvention
from riskmetrics.domain.services.univariate import UnivariateStatisticsService

LADDER = [i / 100 for i in range(-10, 10)]  # -0.10 .. 0.09, n = 20
SAMPLE = [0.012, -0.034, 0.005, 0.021, -0.008, 0.043, -0.019, 0.002, 0.015, -0.027]


def _moments(values):
    x = np.asarray(values)
    d = x - x.mean()
    return len(x), float(np.mean(d**2)), float(np.mean(d**3)), float(np.mean(d**4))


def _g1(values):
    n, m2, m3, _ = _moments(values)
    return math.sqrt(n * (n - 1)) / (n - 2) * m3 / m2**1.5


def _g2(values):
    n, m2, _, m4 = _moments(values)
    g2 = m4 / m2**2 - 3
    return ((n + 1) * g2 + 6) * (n - 1) / ((n - 2) * (n - 3))


@pytest.fixture
def svc() -> UnivariateStatisticsService:
    return UnivariateStatisticsService()


# --- mean / variance / volatility ---

def test_mean_of_empty_is_zero(svc):
    assert svc.mean([]) == 0.0


def test_population_variance(svc):
    assert svc.variance([1, 2, 3, 4], VarianceConvention.POPULATION) == pytest.approx(1.25)


def test_sample_variance(svc):
    assert svc.variance([1, 2, 3, 4], VarianceConvention.SAMPLE) == pytest.approx(5 / 3)


def test_sample_variance_of_single_value_is_zero(svc):
    assert svc.variance([0.01], VarianceConvention.SAMPLE) == 0.0


def test_daily_volatility_uses_population_divisor(svc):
    assert svc.daily_volatility(SAMPLE) == pytest.approx(float(np.std(SAMPLE, ddof=0)))


def test_annualize_uses_square_root_of_days(svc):
    assert svc.annualize(0.02, 365) == pytest.approx(0.02 * math.sqrt(365))


def test_annualized_return(svc):
    assert svc.annualized_return([0.01, 0.03], 365) == pytest.approx(0.02 * 365)


def test_annualized_return_of_empty_is_zero(svc):
    assert svc.annualized_return([]) == 0.0


# --- VaR / CVaR ---

def test_var_95_picks_floor_index(svc):
    # idx = floor(0.05 * 20) = 1 -> second-worst return
    assert svc.value_at_risk(LADDER, 95) == pytest.approx(0.09)


def test_var_99_picks_worst_for_small_samples(svc):
    assert svc.value_at_risk(LADDER, 99) == pytest.approx(0.10)


def test_cvar_95_averages_tail_including_var_index(svc):
    assert svc.conditional_value_at_risk(LADDER, 95) == pytest.approx(0.095)


def test_cvar_is_at_least_var(svc):
    rng = np.random.default_rng(7)
    for _ in range(20):
        values = rng.normal(0, 0.03, size=int(rng.integers(7, 400))).tolist()
        for c in (95, 99):
            assert svc.conditional_value_at_risk(values, c) >= svc.value_at_risk(values, c) - 1e-15


def test_var_with_fewer_than_two_values_is_zero(svc):
    assert svc.value_at_risk([-0.05], 95) == 0.0
    assert svc.conditional_value_at_risk([], 99) == 0.0


def test_var_rejects_confidence_outside_range(svc):
    with pytest.raises(ValueError):
        svc.value_at_risk(LADDER, 100)


# --- skewness / kurtosis ---

def test_skewness_matches_bias_corrected_formula(svc):
    assert svc.skewness(SAMPLE) == pytest.approx(_g1(SAMPLE))


def test_kurtosis_matches_bias_corrected_excess_formula(svc):
    assert svc.kurtosis(SAMPLE) == pytest.approx(_g2(SAMPLE))


def test_skewness_needs_three_observations(svc):
    assert svc.skewness([0.01, 0.02]) == 0.0


def test_kurtosis_needs_four_observations(svc):
    assert svc.kurtosis([0.01, 0.02, -0.01]) == 0.0


def test_shape_statistics_of_constant_series_are_zero(svc):
    flat = [0.01] * 12
    assert svc.skewness(flat) == 0.0
    assert svc.kurtosis(flat) == 0.0


def test_symmetric_series_has_zero_skew(svc):
    assert svc.skewness([-0.02, -0.01, 0.0, 0.01, 0.02]) == pytest.approx(0.0, abs=1e-12)


# --- histogram / normal curve ---

def test_histogram_counts_and_edges(svc):
    hist = svc.histogram([0.0, 1.0, 2.0, 3.0], bins=3)
    assert hist.edges == pytest.approx([0.0, 1.0, 2.0, 3.0])
    assert hist.counts == [1, 1, 2]
    assert hist.bin_width == pytest.approx(1.0)


def test_histogram_of_constant_values_uses_unit_range(svc):
    hist = svc.histogram([0.5] * 4, bins=2)
    assert hist.counts == [4, 0]
    assert hist.bin_width == pytest.approx(0.5)


def test_histogram_of_empty_window_is_none(svc):
    assert svc.histogram([]) is None


def test_histogram_counts_sum_to_n(svc):
    assert sum(svc.histogram(SAMPLE, bins=30).counts) == len(SAMPLE)


def test_normal_curve_peaks_at_mean(svc):
    curve = svc.normal_curve(0.0, 0.02, -0.1, 0.1, points=101)
    assert len(curve) == 101
    peak = max(curve, key=lambda p: p.density)
    assert peak.x == pytest.approx(0.0, abs=1e-12)
    assert peak.density == pytest.approx(1 / (0.02 * math.sqrt(2 * math.pi)))


def test_normal_curve_with_zero_sigma_is_empty(svc):
    assert svc.normal_curve(0.0, 0.0, -1, 1) == []
