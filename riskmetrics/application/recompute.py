"""Batch recompute jobs.

One job per metric family, plus the returns job that feeds them and the
portfolio job.  Every job is idempotent: existing keys are skipped unless
force is set, and the storage layer enforces uniqueness so two concurrent
runs cannot create duplicates.

Each asset (or portfolio snapshot) is processed in its own unit of work.
A failure is logged, counted and rolled back without affecting the
others; only failing to list the work items or load the benchmark aborts
a run.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from contextlib import AbstractAsyncContextManager
from datetime import date, datetime, timedelta, timezone
from typing import TYPE_CHECKING

from riskmetrics.domain.models.assets import Asset, PortfolioConfig
from riskmetrics.domain.models.enums import MetricFamily
from riskmetrics.domain.models.market_data import BenchmarkReturnPoint
from riskmetrics.domain.models.runs import RunReport
from riskmetrics.domain.models.windows import EngineConfig
from riskmetrics.domain.services.portfolio import ConstituentReturns, PortfolioRiskService
from riskmetrics.domain.services.returns import ReturnSeriesService
from riskmetrics.domain.services.sensitivity import MarketSensitivityService
from riskmetrics.domain.services.windows import RollingWindowScanner

from .families import FAMILY_DEFINITIONS, FamilyDefinition

if TYPE_CHECKING:
    from riskmetrics.infrastructure.persistence.repositories import Repositories

logger = logging.getLogger(__name__)

ScopeFactory = Callable[[], AbstractAsyncContextManager["Repositories"]]

FAMILY_ORDER = (
    MetricFamily.VOLATILITY,
    MetricFamily.VAR,
    MetricFamily.DISTRIBUTION,
    MetricFamily.BETA,
    MetricFamily.SML,
)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class RecomputeService:
    """Runs the batch jobs against repositories opened by scope().

    scope is a zero-argument callable returning an async context manager
    that yields repositories bound to one transaction (commit on exit,
    rollback on error); see repositories_scope().

    today returns the current UTC date.  The windowed families only read
    data dated strictly before it, so no statistic is keyed on a day that
    is still open.
    """

    def __init__(
        self,
        scope: ScopeFactory,
        config: EngineConfig,
        today: Callable[[], date] = _utc_today,
    ) -> None:
        self._scope = scope
        self._config = config
        self._today = today
        self._returns = ReturnSeriesService()
        self._scanner = RollingWindowScanner()
        self._sensitivity = MarketSensitivityService()
        self._portfolio = PortfolioRiskService(scanner=self._scanner)

    # ─────────────────────────────────────────────────────────────────── #
    # Returns                                                              #
    # ─────────────────────────────────────────────────────────────────── #

    async def recompute_returns(self, force: bool = False) -> RunReport:
        """Derive and store daily log returns for every asset with prices."""
        started = time.perf_counter()
        report = RunReport(job="returns")

        async with self._scope() as repos:
            assets = await repos.assets.list_with_prices(min_prices=2)

        for asset in assets:
            try:
                report.add(await self._returns_for_asset(asset, force))
            except Exception:
                logger.exception("returns failed for %s", asset.symbol)
                report.errored += 1

        report.duration_ms = _elapsed_ms(started)
        logger.info(report.summary())
        return report

    async def _returns_for_asset(self, asset: Asset, force: bool) -> RunReport:
        counts = RunReport(job="returns")
        async with self._scope() as repos:
            prices = await repos.prices.get_prices(asset.asset_id)
            existing = set() if force else await repos.returns.existing_dates(asset.asset_id)
            result = self._returns.build_returns(prices, existing)
            written = await repos.returns.insert_many(result.points, overwrite=force)

        counts.computed = written
        counts.skipped = result.skipped + len(result.points) - written
        counts.invalid = result.invalid
        logger.debug(
            "returns %s: computed=%d skipped=%d invalid=%d",
            asset.symbol,
            counts.computed,
            counts.skipped,
            counts.invalid,
        )
        return counts

    # ─────────────────────────────────────────────────────────────────── #
    # Windowed families                                                    #
    # ─────────────────────────────────────────────────────────────────── #

    async def recompute_family(self, family: MetricFamily, force: bool = False) -> RunReport:
        """Compute every missing windowed statistic of one family for all assets."""
        definition = FAMILY_DEFINITIONS[family]
        policy = definition.policy(self._config)
        started = time.perf_counter()
        report = RunReport(job=family.value)
        cutoff = self._today()

        benchmark: list[BenchmarkReturnPoint] | None = None
        async with self._scope() as repos:
            assets = await repos.assets.list_with_returns(min_returns=policy.minimum_window)
            if definition.needs_benchmark:
                levels = await repos.benchmark.get_levels(self._config.benchmark_name)
                benchmark = self._returns.build_benchmark_returns(levels, as_of=cutoff)

        if benchmark is not None and len(benchmark) < policy.minimum_window:
            logger.warning(
                "%s: benchmark %r has %d daily returns; nothing to compute",
                family.value,
                self._config.benchmark_name,
                len(benchmark),
            )
            report.duration_ms = _elapsed_ms(started)
            return report

        for asset in assets:
            try:
                report.add(await self._family_for_asset(definition, asset, benchmark, cutoff, force))
            except Exception:
                logger.exception("%s failed for %s", family.value, asset.symbol)
                report.errored += 1

        report.duration_ms = _elapsed_ms(started)
        logger.info(report.summary())
        return report

    async def _family_for_asset(
        self,
        definition: FamilyDefinition,
        asset: Asset,
        benchmark: Sequence[BenchmarkReturnPoint] | None,
        cutoff: date,
        force: bool,
    ) -> RunReport:
        counts = RunReport(job=definition.family.value)
        policy = definition.policy(self._config)

        async with self._scope() as repos:
            points = await repos.returns.get_returns(asset.asset_id, end=cutoff - timedelta(days=1))
            if benchmark is not None:
                aligned = self._sensitivity.align(points, benchmark)
                dates, values, bench = aligned.dates, aligned.asset, aligned.benchmark
            else:
                dates = [p.return_date for p in points]
                values = [p.log_return for p in points]
                bench = None

            if len(dates) < policy.minimum_window:
                counts.insufficient += 1
                return counts

            repo = repos.statistics(definition.family)
            existing = set() if force else await repo.existing_keys(asset.asset_id)

            stats = []
            for window in self._scanner.scan(dates, policy, existing):
                if window.already_exists:
                    counts.skipped += 1
                    continue
                stat = definition.compute(
                    asset.asset_id,
                    window,
                    values[window.start : window.stop],
                    bench[window.start : window.stop] if bench is not None else None,
                    self._config,
                )
                if stat is None:
                    counts.insufficient += 1
                    continue
                stats.append(stat)

            written = await repo.insert_many(stats, overwrite=force)

        counts.computed = written
        counts.skipped += len(stats) - written
        logger.debug(
            "%s %s: computed=%d skipped=%d",
            definition.family.value,
            asset.symbol,
            counts.computed,
            counts.skipped,
        )
        return counts

    # ─────────────────────────────────────────────────────────────────── #
    # Portfolio                                                            #
    # ─────────────────────────────────────────────────────────────────── #

    async def recompute_portfolios(self, force: bool = False) -> RunReport:
        """Compute volatility snapshots for the recent dates of every active portfolio."""
        started = time.perf_counter()
        report = RunReport(job="portfolio")

        async with self._scope() as repos:
            configs = await repos.portfolios.list_active_configs()

        for config in configs:
            try:
                async with self._scope() as repos:
                    dates = await repos.portfolios.get_snapshot_dates(
                        config.portfolio_config_id, self._config.portfolio_max_snapshots
                    )
                    existing = set() if force else await repos.portfolios.existing_dates(
                        config.portfolio_config_id
                    )
            except Exception:
                logger.exception("portfolio %s: listing snapshot dates failed", config.name)
                report.errored += 1
                continue

            for snapshot_date in sorted(dates):
                if snapshot_date in existing:
                    report.skipped += 1
                    continue
                try:
                    report.add(await self._portfolio_snapshot(config, snapshot_date, force))
                except Exception:
                    logger.exception("portfolio %s on %s failed", config.name, snapshot_date)
                    report.errored += 1

        report.duration_ms = _elapsed_ms(started)
        logger.info(report.summary())
        return report

    async def _portfolio_snapshot(
        self,
        config: PortfolioConfig,
        snapshot_date: date,
        force: bool,
    ) -> RunReport:
        counts = RunReport(job="portfolio")
        started = time.perf_counter()
        target = self._config.portfolio_window.target_window

        async with self._scope() as repos:
            snapshot = await repos.portfolios.get_constituents(config.portfolio_config_id, snapshot_date)
            inputs = []
            for member in snapshot:
                recent = await repos.returns.get_recent_returns(member.asset_id, snapshot_date, target)
                inputs.append(
                    ConstituentReturns(
                        asset_id=member.asset_id,
                        market_cap=member.market_cap,
                        returns=[p.log_return for p in recent],
                    )
                )

            stat = self._portfolio.build_snapshot(
                config.portfolio_config_id, snapshot_date, inputs, self._config
            )
            if stat is None:
                counts.insufficient += 1
                return counts

            stat = stat.model_copy(update={"calculation_duration_ms": _elapsed_ms(started)})
            created = await repos.portfolios.create(stat, overwrite=force)

        if created:
            counts.computed += 1
        else:
            counts.skipped += 1
        return counts

    # ─────────────────────────────────────────────────────────────────── #
    # Orchestration / administration                                       #
    # ─────────────────────────────────────────────────────────────────── #

    async def recompute_all(self, force: bool = False) -> list[RunReport]:
        """Returns first, then every family, then portfolios."""
        reports = [await self.recompute_returns(force)]
        for family in FAMILY_ORDER:
            reports.append(await self.recompute_family(family, force))
        reports.append(await self.recompute_portfolios(force))
        return reports

    async def truncate(self) -> dict[str, int]:
        """Delete every derived record (dependents first) in one transaction.

        Returns the number of rows removed per table group.  Prices,
        benchmark levels and reference data are untouched.
        """
        removed: dict[str, int] = {}
        async with self._scope() as repos:
            removed["portfolio"] = await repos.portfolios.delete_all()
            for family in FAMILY_ORDER:
                removed[family.value] = await repos.statistics(family).delete_all()
            removed["returns"] = await repos.returns.delete_all()
        logger.warning("truncated derived data: %s", removed)
        return removed
