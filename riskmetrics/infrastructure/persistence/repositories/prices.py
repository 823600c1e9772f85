"""SQLAlchemy implementations of PriceRepository and BenchmarkRepository."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from riskmetrics.domain.models.market_data import BenchmarkLevel as DomainBenchmarkLevel
from riskmetrics.domain.models.market_data import PricePoint as DomainPricePoint
from riskmetrics.domain.repositories.prices import BenchmarkRepository, PriceRepository
from riskmetrics.infrastructure.persistence.models.market_data import BenchmarkLevel as OrmBenchmarkLevel
from riskmetrics.infrastructure.persistence.models.market_data import PricePoint as OrmPricePoint


class SqlPriceRepository(PriceRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @staticmethod
    def _to_domain(row: OrmPricePoint) -> DomainPricePoint:
        return DomainPricePoint(asset_id=row.asset_id, price_date=row.price_date, price=row.price)

    async def get_prices(
        self,
        asset_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[DomainPricePoint]:
        stmt = (
            select(OrmPricePoint)
            .where(OrmPricePoint.asset_id == asset_id)
            .order_by(OrmPricePoint.price_date.asc())
        )
        if start is not None:
            stmt = stmt.where(OrmPricePoint.price_date >= start)
        if end is not None:
            stmt = stmt.where(OrmPricePoint.price_date <= end)
        result = await self._session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars()]

    async def get_latest_price(self, asset_id: UUID) -> DomainPricePoint | None:
        stmt = (
            select(OrmPricePoint)
            .where(OrmPricePoint.asset_id == asset_id)
            .order_by(OrmPricePoint.price_date.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return self._to_domain(row) if row else None


class SqlBenchmarkRepository(BenchmarkRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @staticmethod
    def _to_domain(row: OrmBenchmarkLevel) -> DomainBenchmarkLevel:
        return DomainBenchmarkLevel(observed_at=row.observed_at, level=row.level)

    async def get_levels(
        self,
        benchmark_name: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[DomainBenchmarkLevel]:
        stmt = (
            select(OrmBenchmarkLevel)
            .where(OrmBenchmarkLevel.benchmark_name == benchmark_name)
            .order_by(OrmBenchmarkLevel.observed_at.asc())
        )
        if start is not None:
            stmt = stmt.where(OrmBenchmarkLevel.observed_at >= start)
        if end is not None:
            stmt = stmt.where(OrmBenchmarkLevel.observed_at <= end)
        result = await self._session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars()]
