"""SQLAlchemy implementation of AssetRepository."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from riskmetrics.domain.models.assets import Asset as DomainAsset
from riskmetrics.domain.repositories.assets import AssetRepository
from riskmetrics.infrastructure.persistence.models.market_data import PricePoint as OrmPricePoint
from riskmetrics.infrastructure.persistence.models.market_data import ReturnPoint as OrmReturnPoint
from riskmetrics.infrastructure.persistence.models.reference import Asset as OrmAsset


class SqlAssetRepository(AssetRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @staticmethod
    def _to_domain(row: OrmAsset) -> DomainAsset:
        return DomainAsset(asset_id=row.asset_id, symbol=row.symbol, name=row.name)

    async def get_by_id(self, asset_id: UUID) -> DomainAsset | None:
        stmt = select(OrmAsset).where(OrmAsset.asset_id == asset_id)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return self._to_domain(row) if row else None

    async def get_by_symbol(self, symbol: str) -> DomainAsset | None:
        stmt = select(OrmAsset).where(func.lower(OrmAsset.symbol) == symbol.lower())
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return self._to_domain(row) if row else None

    async def list(self, limit: int = 50, offset: int = 0) -> list[DomainAsset]:
        stmt = select(OrmAsset).order_by(OrmAsset.symbol.asc()).limit(limit).offset(offset)
        result = await self._session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars()]

    async def list_with_prices(self, min_prices: int = 2) -> list[DomainAsset]:
        stmt = (
            select(OrmAsset)
            .join(OrmPricePoint, OrmPricePoint.asset_id == OrmAsset.asset_id)
            .group_by(OrmAsset.asset_id)
            .having(func.count(OrmPricePoint.price_date) >= min_prices)
            .order_by(OrmAsset.symbol.asc())
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars()]

    async def list_with_returns(self, min_returns: int = 1) -> list[DomainAsset]:
        stmt = (
            select(OrmAsset)
            .join(OrmReturnPoint, OrmReturnPoint.asset_id == OrmAsset.asset_id)
            .group_by(OrmAsset.asset_id)
            .having(func.count(OrmReturnPoint.return_date) >= min_returns)
            .order_by(OrmAsset.symbol.asc())
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars()]

    async def create(self, entity: DomainAsset) -> DomainAsset:
        row = OrmAsset(asset_id=entity.asset_id, symbol=entity.symbol, name=entity.name)
        self._session.add(row)
        await self._session.flush()
        return self._to_domain(row)

    async def update(self, entity: DomainAsset) -> DomainAsset:
        raise NotImplementedError("assets are owned by the market data loader")

    async def delete(self, id: UUID) -> None:
        raise NotImplementedError("assets are owned by the market data loader")
