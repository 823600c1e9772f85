"""Tests for riskmetrics/application/recompute.py against the in-memory store."""

import math
import random
from datetime import date, datetime, time, timedelta, timezone

import pytest

from riskmetrics.application.recompute import FAMILY_ORDER, RecomputeService
from riskmetrics.domain.models import BenchmarkLevel, MetricFamily

START = date(2024, 1, 1)
PRICES = [100.0, 102.0, 101.0, 103.0, 104.0, 102.0, 105.0, 107.0, 106.0, 108.0, 110.0]
BENCH_RETURNS = [0.01, -0.02, 0.015, 0.005, -0.01, 0.02, -0.005, 0.012, -0.008, 0.003]


def _levels(returns, base=100.0):
    levels = [base]
    for r in returns:
        levels.append(levels[-1] * math.exp(r))
    return levels


@pytest.fixture
def service(store, engine_config):
    return RecomputeService(store.scope, engine_config)


# ------------------------------------------------------------------ #
# Returns                                                              #
# ------------------------------------------------------------------ #


async def test_returns_job_skips_stale_quote(store, service):
    asset = store.add_asset("ABC")
    store.add_prices(asset, START, [100.0, 105.0, 105.0, 110.0])

    report = await service.recompute_returns()

    assert (report.computed, report.invalid, report.errored) == (2, 1, 0)
    stored = store.returns[asset.asset_id]
    assert sorted(stored) == [START + timedelta(days=1), START + timedelta(days=3)]
    assert stored[START + timedelta(days=1)].log_return == pytest.approx(math.log(1.05))


async def test_returns_job_is_idempotent(store, service):
    asset = store.add_asset("ABC")
    store.add_prices(asset, START, [100.0, 105.0, 105.0, 110.0])
    await service.recompute_returns()

    second = await service.recompute_returns()

    assert second.computed == 0
    assert second.skipped == 2
    assert len(store.returns[asset.asset_id]) == 2


async def test_returns_job_ignores_asset_with_single_price(store, service):
    asset = store.add_asset("ONE")
    store.add_prices(asset, START, [100.0])

    report = await service.recompute_returns()

    assert report.computed == 0
    assert asset.asset_id not in store.returns


async def test_returns_force_rewrites_existing(store, service):
    asset = store.add_asset("ABC")
    store.add_prices(asset, START, PRICES)
    await service.recompute_returns()

    report = await service.recompute_returns(force=True)

    assert report.computed == 10
    assert report.skipped == 0


# ------------------------------------------------------------------ #
# Windowed families                                                    #
# ------------------------------------------------------------------ #


async def test_volatility_grows_window_from_minimum(store, service):
    asset = store.add_asset("ABC")
    store.add_prices(asset, START, PRICES)
    await service.recompute_returns()

    report = await service.recompute_family(MetricFamily.VOLATILITY)

    rows = store.statistic_repos[MetricFamily.VOLATILITY].rows
    assert report.computed == 4
    assert sorted(w for (_, _, w) in rows) == [7, 8, 9, 10]
    latest = max(rows.values(), key=lambda s: s.stat_date)
    assert latest.stat_date == START + timedelta(days=10)
    assert latest.num_observations == 10
    assert latest.annualized_volatility == pytest.approx(latest.daily_volatility * math.sqrt(365))


async def test_family_second_run_writes_nothing(store, service):
    asset = store.add_asset("ABC")
    store.add_returns(asset, START, [0.01, -0.02, 0.015, 0.005, -0.01, 0.02, -0.005, 0.012])
    await service.recompute_family(MetricFamily.VAR)

    second = await service.recompute_family(MetricFamily.VAR)

    assert second.computed == 0
    assert second.skipped == 2
    assert len(store.statistic_repos[MetricFamily.VAR].rows) == 2


async def test_family_force_overwrites(store, service):
    asset = store.add_asset("ABC")
    store.add_returns(asset, START, [0.01, -0.02, 0.015, 0.005, -0.01, 0.02, -0.005, 0.012])
    await service.recompute_family(MetricFamily.DISTRIBUTION)

    forced = await service.recompute_family(MetricFamily.DISTRIBUTION, force=True)

    assert forced.computed == 2
    assert forced.skipped == 0
    assert len(store.statistic_repos[MetricFamily.DISTRIBUTION].rows) == 2


async def test_asset_below_minimum_is_not_listed(store, service):
    asset = store.add_asset("NEW")
    store.add_returns(asset, START, [0.01, -0.02, 0.015])

    report = await service.recompute_family(MetricFamily.VOLATILITY)

    assert report.computed == 0
    assert store.statistic_repos[MetricFamily.VOLATILITY].rows == {}


async def test_failing_asset_is_counted_and_run_continues(store, service, caplog):
    good = store.add_asset("AAA")
    bad = store.add_asset("BBB")
    returns = [0.01, -0.02, 0.015, 0.005, -0.01, 0.02, -0.005]
    store.add_returns(good, START, returns)
    store.add_returns(bad, START, returns)
    store.failing_assets.add(bad.asset_id)

    report = await service.recompute_family(MetricFamily.VOLATILITY)

    assert report.errored == 1
    assert report.computed == 1
    assert "failed for BBB" in caplog.text


async def test_beta_against_benchmark(store, service, engine_config):
    asset = store.add_asset("ABC")
    store.add_benchmark(engine_config.benchmark_name, START, _levels(BENCH_RETURNS))
    store.add_returns(asset, START + timedelta(days=1), [1.5 * r for r in BENCH_RETURNS])

    report = await service.recompute_family(MetricFamily.BETA)

    rows = store.statistic_repos[MetricFamily.BETA].rows
    assert report.computed == 4
    for stat in rows.values():
        assert stat.beta == pytest.approx(1.5, rel=1e-6)
        assert stat.r_squared == pytest.approx(1.0, rel=1e-6)


async def test_sml_uses_annualized_returns(store, service, engine_config):
    asset = store.add_asset("ABC")
    store.add_benchmark(engine_config.benchmark_name, START, _levels(BENCH_RETURNS))
    store.add_returns(asset, START + timedelta(days=1), [1.5 * r for r in BENCH_RETURNS])

    await service.recompute_family(MetricFamily.SML)

    rows = store.statistic_repos[MetricFamily.SML].rows
    assert len(rows) == 4
    for stat in rows.values():
        assert stat.expected_return == pytest.approx(
            engine_config.risk_free_rate
            + stat.beta * (stat.market_return - engine_config.risk_free_rate)
        )
        assert stat.alpha == pytest.approx(stat.actual_return - stat.expected_return)


async def test_missing_benchmark_aborts_family_with_warning(store, service, caplog):
    asset = store.add_asset("ABC")
    store.add_returns(asset, START, BENCH_RETURNS)

    report = await service.recompute_family(MetricFamily.BETA)

    assert report.computed == 0
    assert store.statistic_repos[MetricFamily.BETA].rows == {}
    assert "benchmark" in caplog.text


async def test_non_overlapping_benchmark_counts_insufficient(store, service, engine_config):
    asset = store.add_asset("ABC")
    store.add_benchmark(engine_config.benchmark_name, START, _levels(BENCH_RETURNS))
    store.add_returns(asset, START + timedelta(days=100), BENCH_RETURNS)

    report = await service.recompute_family(MetricFamily.BETA)

    assert report.computed == 0
    assert report.insufficient == 1


# ------------------------------------------------------------------ #
# Portfolio                                                            #
# ------------------------------------------------------------------ #


def _seed_portfolio(store, members=10, days=30):
    caps = {}
    for i in range(members):
        asset = store.add_asset(f"C{i:02d}")
        rng = random.Random(i)
        store.add_returns(asset, START, [rng.gauss(0.0, 0.02) for _ in range(days)])
        caps[asset.asset_id] = float(i + 1)
    return store.add_portfolio("Top", START + timedelta(days=days - 1), caps)


async def test_portfolio_snapshot_written(store, service):
    config = _seed_portfolio(store)

    report = await service.recompute_portfolios()

    assert report.computed == 1
    stat = await store.portfolio_repo.get_latest(config.portfolio_config_id)
    assert stat.num_constituents == 10
    assert stat.window_days == 30
    assert stat.weight_sum == pytest.approx(1.0)
    assert stat.calculation_duration_ms is not None
    assert sum(c.prc for c in stat.constituents) == pytest.approx(1.0)


async def test_portfolio_second_run_skips_existing_date(store, service):
    _seed_portfolio(store)
    await service.recompute_portfolios()

    second = await service.recompute_portfolios()

    assert second.computed == 0
    assert second.skipped == 1


async def test_portfolio_with_too_few_constituents(store, service):
    _seed_portfolio(store, members=9)

    report = await service.recompute_portfolios()

    assert report.computed == 0
    assert report.insufficient == 1


async def test_inactive_portfolio_ignored(store, service):
    config = _seed_portfolio(store)
    store.configs[0] = config.model_copy(update={"is_active": False})

    report = await service.recompute_portfolios()

    assert report.computed == 0
    assert store.portfolio_repo.snapshots == {}


# ------------------------------------------------------------------ #
# Orchestration                                                        #
# ------------------------------------------------------------------ #


async def test_recompute_all_runs_every_job_in_order(store, service):
    asset = store.add_asset("ABC")
    store.add_prices(asset, START, PRICES)

    reports = await service.recompute_all()

    assert [r.job for r in reports] == ["returns"] + [f.value for f in FAMILY_ORDER] + ["portfolio"]
    assert reports[0].computed == 10
    assert reports[1].computed == 4


async def test_truncate_removes_derived_data_only(store, service):
    asset = store.add_asset("ABC")
    store.add_prices(asset, START, PRICES)
    await service.recompute_returns()
    await service.recompute_family(MetricFamily.VOLATILITY)

    removed = await service.truncate()

    assert removed["returns"] == 10
    assert removed["volatility"] == 4
    assert removed["portfolio"] == 0
    assert store.returns == {}
    assert len(store.prices[asset.asset_id]) == len(PRICES)


# ------------------------------------------------------------------ #
# Open trading day                                                     #
# ------------------------------------------------------------------ #


async def test_open_day_is_not_persisted_and_is_computed_once_closed(store, engine_config):
    today = START + timedelta(days=10)
    clock = {"today": today}
    service = RecomputeService(store.scope, engine_config, today=lambda: clock["today"])

    asset = store.add_asset("ABC")
    # full days START .. today-1 close at 23:00; today only has an early print
    store.add_benchmark(engine_config.benchmark_name, START, _levels(BENCH_RETURNS)[:-1])
    store.benchmark[engine_config.benchmark_name].append(
        BenchmarkLevel(
            observed_at=datetime.combine(today, time(0, 5), timezone.utc),
            level=_levels(BENCH_RETURNS)[-1] * 0.5,
        )
    )
    store.add_returns(asset, START + timedelta(days=1), [1.5 * r for r in BENCH_RETURNS])

    first = await service.recompute_family(MetricFamily.BETA)

    rows = store.statistic_repos[MetricFamily.BETA].rows
    assert first.computed == 3
    assert all(stat_date < today for (_, stat_date, _) in rows)

    # the day closes; the next run sees it as a finished day
    store.benchmark[engine_config.benchmark_name].append(
        BenchmarkLevel(
            observed_at=datetime.combine(today, time(23, 59), timezone.utc),
            level=_levels(BENCH_RETURNS)[-1],
        )
    )
    clock["today"] = today + timedelta(days=1)

    second = await service.recompute_family(MetricFamily.BETA)

    assert second.computed == 1
    assert second.skipped == 3
    closed = rows[(asset.asset_id, today, 10)]
    assert closed.beta == pytest.approx(1.5, rel=1e-6)


async def test_open_day_returns_excluded_from_volatility(store, engine_config):
    today = START + timedelta(days=7)
    service = RecomputeService(store.scope, engine_config, today=lambda: today)
    asset = store.add_asset("ABC")
    store.add_returns(asset, START, BENCH_RETURNS[:8])

    report = await service.recompute_family(MetricFamily.VOLATILITY)

    rows = store.statistic_repos[MetricFamily.VOLATILITY].rows
    assert report.computed == 1
    assert list(rows) == [(asset.asset_id, START + timedelta(days=6), 7)]
