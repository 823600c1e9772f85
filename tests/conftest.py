"""Shared fixtures: in-memory repositories behind the same scope() contract
the batch jobs use in production.

The fakes implement the domain repository interfaces so the recompute and
read services run end to end without a database.
"""

from __future__ import annotations

import math
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date, datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest

from riskmetrics.domain.models import (
    Asset,
    BenchmarkLevel,
    ConstituentSnapshot,
    EngineConfig,
    MetricFamily,
    PortfolioConfig,
    PortfolioStatistic,
    PricePoint,
    ReturnPoint,
    WindowedStatistic,
)
from riskmetrics.domain.repositories import (
    AssetRepository,
    BenchmarkRepository,
    PortfolioRepository,
    PriceRepository,
    ReturnRepository,
    WindowedStatisticRepository,
)


class InMemoryAssetRepository(AssetRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_by_id(self, asset_id: UUID) -> Asset | None:
        return self._store.assets.get(asset_id)

    async def get_by_symbol(self, symbol: str) -> Asset | None:
        return next(
            (a for a in self._store.assets.values() if a.symbol.lower() == symbol.lower()), None
        )

    async def list(self, limit: int = 50, offset: int = 0) -> list[Asset]:
        ordered = sorted(self._store.assets.values(), key=lambda a: a.symbol)
        return ordered[offset : offset + limit]

    async def list_with_prices(self, min_prices: int = 2) -> list[Asset]:
        return [
            a
            for a in await self.list(limit=10_000)
            if len(self._store.prices.get(a.asset_id, [])) >= min_prices
        ]

    async def list_with_returns(self, min_returns: int = 1) -> list[Asset]:
        return [
            a
            for a in await self.list(limit=10_000)
            if len(self._store.returns.get(a.asset_id, {})) >= min_returns
        ]

    async def create(self, entity: Asset) -> Asset:
        self._store.assets[entity.asset_id] = entity
        return entity

    async def update(self, entity: Asset) -> Asset:
        raise NotImplementedError

    async def delete(self, id: UUID) -> None:
        raise NotImplementedError


class InMemoryPriceRepository(PriceRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_prices(self, asset_id, start=None, end=None) -> list[PricePoint]:
        if asset_id in self._store.failing_assets:
            raise ConnectionError("price source unavailable")
        points = sorted(self._store.prices.get(asset_id, []), key=lambda p: p.price_date)
        return [
            p
            for p in points
            if (start is None or p.price_date >= start) and (end is None or p.price_date <= end)
        ]

    async def get_latest_price(self, asset_id) -> PricePoint | None:
        points = await self.get_prices(asset_id)
        return points[-1] if points else None


class InMemoryBenchmarkRepository(BenchmarkRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_levels(self, benchmark_name, start=None, end=None) -> list[BenchmarkLevel]:
        return sorted(self._store.benchmark.get(benchmark_name, []), key=lambda b: b.observed_at)


class InMemoryReturnRepository(ReturnRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_returns(self, asset_id, start=None, end=None) -> list[ReturnPoint]:
        if asset_id in self._store.failing_assets:
            raise ConnectionError("return store unavailable")
        rows = self._store.returns.get(asset_id, {})
        return [
            rows[d]
            for d in sorted(rows)
            if (start is None or d >= start) and (end is None or d <= end)
        ]

    async def get_recent_returns(self, asset_id, end, limit) -> list[ReturnPoint]:
        return (await self.get_returns(asset_id, end=end))[-limit:]

    async def existing_dates(self, asset_id) -> set[date]:
        return set(self._store.returns.get(asset_id, {}))

    async def insert_many(self, points, overwrite=False) -> int:
        written = 0
        for p in points:
            rows = self._store.returns.setdefault(p.asset_id, {})
            if p.return_date in rows and not overwrite:
                continue
            rows[p.return_date] = p
            written += 1
        return written

    async def delete_all(self) -> int:
        removed = sum(len(rows) for rows in self._store.returns.values())
        self._store.returns.clear()
        return removed


class InMemoryStatisticRepository(WindowedStatisticRepository):
    def __init__(self) -> None:
        self.rows: dict[tuple[UUID, date, int], WindowedStatistic] = {}

    async def existing_keys(self, asset_id) -> set[tuple[date, int]]:
        return {(d, w) for (a, d, w) in self.rows if a == asset_id}

    async def insert_many(self, stats, overwrite=False) -> int:
        written = 0
        for s in stats:
            key = (s.asset_id, s.stat_date, s.window_days)
            if key in self.rows and not overwrite:
                continue
            self.rows[key] = s
            written += 1
        return written

    async def get_latest(self, asset_id, window_days=None):
        matches = [
            s
            for (a, _, w), s in self.rows.items()
            if a == asset_id and (window_days is None or w == window_days)
        ]
        return max(matches, key=lambda s: (s.stat_date, s.window_days), default=None)

    async def get_history(self, asset_id, window_days=None, start=None, end=None):
        return sorted(
            (
                s
                for (a, d, w), s in self.rows.items()
                if a == asset_id
                and (window_days is None or w == window_days)
                and (start is None or d >= start)
                and (end is None or d <= end)
            ),
            key=lambda s: (s.stat_date, s.window_days),
        )

    async def delete_all(self) -> int:
        removed = len(self.rows)
        self.rows.clear()
        return removed


class InMemoryPortfolioRepository(PortfolioRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self.snapshots: dict[tuple[UUID, date], PortfolioStatistic] = {}

    async def list_active_configs(self) -> list[PortfolioConfig]:
        return sorted((c for c in self._store.configs if c.is_active), key=lambda c: c.name)

    async def get_snapshot_dates(self, portfolio_config_id, limit=None) -> list[date]:
        dates = sorted(
            {d for (cid, d) in self._store.constituents if cid == portfolio_config_id},
            reverse=True,
        )
        return dates[:limit] if limit is not None else dates

    async def get_constituents(self, portfolio_config_id, snapshot_date) -> list[ConstituentSnapshot]:
        return list(self._store.constituents.get((portfolio_config_id, snapshot_date), []))

    async def existing_dates(self, portfolio_config_id) -> set[date]:
        return {d for (cid, d) in self.snapshots if cid == portfolio_config_id}

    async def create(self, stat, overwrite=False) -> bool:
        key = (stat.portfolio_config_id, stat.stat_date)
        if key in self.snapshots and not overwrite:
            return False
        self.snapshots[key] = stat
        return True

    async def get_latest(self, portfolio_config_id):
        matches = [s for (cid, _), s in self.snapshots.items() if cid == portfolio_config_id]
        return max(matches, key=lambda s: s.stat_date, default=None)

    async def get_history(self, portfolio_config_id, start=None, end=None):
        return sorted(
            (s for (cid, _), s in self.snapshots.items() if cid == portfolio_config_id),
            key=lambda s: s.stat_date,
        )

    async def delete_all(self) -> int:
        removed = len(self.snapshots)
        self.snapshots.clear()
        return removed


class InMemoryRepositories:
    def __init__(self, store: InMemoryStore) -> None:
        self.assets = InMemoryAssetRepository(store)
        self.prices = InMemoryPriceRepository(store)
        self.benchmark = InMemoryBenchmarkRepository(store)
        self.returns = InMemoryReturnRepository(store)
        self.portfolios = store.portfolio_repo
        self._statistics = store.statistic_repos

    def statistics(self, family: MetricFamily) -> InMemoryStatisticRepository:
        return self._statistics[family]


class InMemoryStore:
    """Holds all fake tables; scope() mimics repositories_scope()."""

    def __init__(self) -> None:
        self.assets: dict[UUID, Asset] = {}
        self.prices: dict[UUID, list[PricePoint]] = {}
        self.benchmark: dict[str, list[BenchmarkLevel]] = {}
        self.returns: dict[UUID, dict[date, ReturnPoint]] = {}
        self.configs: list[PortfolioConfig] = []
        self.constituents: dict[tuple[UUID, date], list[ConstituentSnapshot]] = {}
        self.failing_assets: set[UUID] = set()
        self.statistic_repos = {f: InMemoryStatisticRepository() for f in MetricFamily}
        self.portfolio_repo = InMemoryPortfolioRepository(self)

    @asynccontextmanager
    async def scope(self) -> AsyncIterator[InMemoryRepositories]:
        yield InMemoryRepositories(self)

    # --- seeding helpers ---

    def add_asset(self, symbol: str) -> Asset:
        asset = Asset(asset_id=uuid4(), symbol=symbol, name=f"{symbol} coin")
        self.assets[asset.asset_id] = asset
        return asset

    def add_prices(self, asset: Asset, start: date, prices: list[float]) -> None:
        self.prices.setdefault(asset.asset_id, []).extend(
            PricePoint(asset_id=asset.asset_id, price_date=start + timedelta(days=i), price=p)
            for i, p in enumerate(prices)
        )

    def add_returns(self, asset: Asset, start: date, returns: list[float], base: float = 100.0) -> None:
        rows = self.returns.setdefault(asset.asset_id, {})
        price = base
        for i, r in enumerate(returns):
            current = price * math.exp(r)
            point = ReturnPoint.from_prices(
                asset_id=asset.asset_id,
                return_date=start + timedelta(days=i),
                price_current=current,
                price_previous=price,
            )
            rows[point.return_date] = point
            price = current

    def add_benchmark(self, name: str, start: date, levels: list[float]) -> None:
        self.benchmark.setdefault(name, []).extend(
            BenchmarkLevel(
                observed_at=datetime.combine(start + timedelta(days=i), datetime.min.time(), timezone.utc)
                + timedelta(hours=23),
                level=lvl,
            )
            for i, lvl in enumerate(levels)
        )

    def add_portfolio(self, name: str, snapshot_date: date, caps: dict[UUID, float]) -> PortfolioConfig:
        config = PortfolioConfig(portfolio_config_id=uuid4(), name=name)
        self.configs.append(config)
        self.constituents[(config.portfolio_config_id, snapshot_date)] = [
            ConstituentSnapshot(asset_id=a, market_cap=c) for a, c in caps.items()
        ]
        return config


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig()
