"""SQLAlchemy implementation of ReturnRepository."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from riskmetrics.domain.models.market_data import ReturnPoint as DomainReturnPoint
from riskmetrics.domain.repositories.returns import ReturnRepository
from riskmetrics.infrastructure.persistence.models.market_data import ReturnPoint as OrmReturnPoint

_BATCH_SIZE = 1000


class SqlReturnRepository(ReturnRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @staticmethod
    def _to_domain(row: OrmReturnPoint) -> DomainReturnPoint:
        return DomainReturnPoint(
            asset_id=row.asset_id,
            return_date=row.return_date,
            log_return=row.log_return,
            price_current=row.price_current,
            price_previous=row.price_previous,
        )

    async def get_returns(
        self,
        asset_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[DomainReturnPoint]:
        stmt = (
            select(OrmReturnPoint)
            .where(OrmReturnPoint.asset_id == asset_id)
            .order_by(OrmReturnPoint.return_date.asc())
        )
        if start is not None:
            stmt = stmt.where(OrmReturnPoint.return_date >= start)
        if end is not None:
            stmt = stmt.where(OrmReturnPoint.return_date <= end)
        result = await self._session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars()]

    async def get_recent_returns(
        self,
        asset_id: UUID,
        end: date,
        limit: int,
    ) -> list[DomainReturnPoint]:
        stmt = (
            select(OrmReturnPoint)
            .where(OrmReturnPoint.asset_id == asset_id, OrmReturnPoint.return_date <= end)
            .order_by(OrmReturnPoint.return_date.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        rows = [self._to_domain(row) for row in result.scalars()]
        rows.reverse()
        return rows

    async def existing_dates(self, asset_id: UUID) -> set[date]:
        stmt = select(OrmReturnPoint.return_date).where(OrmReturnPoint.asset_id == asset_id)
        result = await self._session.execute(stmt)
        return set(result.scalars())

    async def insert_many(self, points: list[DomainReturnPoint], overwrite: bool = False) -> int:
        if not points:
            return 0
        written = 0
        for offset in range(0, len(points), _BATCH_SIZE):
            values = [
                {
                    "asset_id": p.asset_id,
                    "return_date": p.return_date,
                    "log_return": p.log_return,
                    "price_current": p.price_current,
                    "price_previous": p.price_previous,
                }
                for p in points[offset : offset + _BATCH_SIZE]
            ]
            stmt = pg_insert(OrmReturnPoint).values(values)
            if overwrite:
                stmt = stmt.on_conflict_do_update(
                    index_elements=["asset_id", "return_date"],
                    set_={
                        "log_return": stmt.excluded.log_return,
                        "price_current": stmt.excluded.price_current,
                        "price_previous": stmt.excluded.price_previous,
                    },
                )
            else:
                stmt = stmt.on_conflict_do_nothing(index_elements=["asset_id", "return_date"])
            result = await self._session.execute(stmt)
            written += result.rowcount
        return written

    async def delete_all(self) -> int:
        result = await self._session.execute(delete(OrmReturnPoint))
        return result.rowcount
