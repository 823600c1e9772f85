"""SQLAlchemy implementation of PortfolioRepository."""

from __future__ import annotations

import uuid
from datetime import date
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from riskmetrics.domain.models.assets import ConstituentSnapshot, PortfolioConfig as DomainPortfolioConfig
from riskmetrics.domain.models.portfolio import (
    PortfolioConstituentStatistic as DomainConstituentStatistic,
)
from riskmetrics.domain.models.portfolio import PortfolioStatistic as DomainPortfolioStatistic
from riskmetrics.domain.repositories.portfolio import PortfolioRepository
from riskmetrics.infrastructure.persistence.models.portfolio import (
    PortfolioConstituentStatistic as OrmConstituentStatistic,
)
from riskmetrics.infrastructure.persistence.models.portfolio import (
    PortfolioStatistic as OrmPortfolioStatistic,
)
from riskmetrics.infrastructure.persistence.models.reference import (
    PortfolioConfig as OrmPortfolioConfig,
)
from riskmetrics.infrastructure.persistence.models.reference import (
    PortfolioSnapshotConstituent as OrmSnapshotConstituent,
)

_STAT_FIELDS = (
    "window_days",
    "daily_volatility",
    "annualized_volatility",
    "num_constituents",
    "total_market_cap",
    "weighted_average_volatility",
    "diversification_benefit",
    "hhi",
    "effective_n",
    "calculation_duration_ms",
)
_CONSTITUENT_FIELDS = (
    "asset_id",
    "weight",
    "market_cap",
    "daily_volatility",
    "annualized_volatility",
    "mcr",
    "crc",
    "prc",
)


class SqlPortfolioRepository(PortfolioRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @staticmethod
    def _config_to_domain(row: OrmPortfolioConfig) -> DomainPortfolioConfig:
        return DomainPortfolioConfig(
            portfolio_config_id=row.portfolio_config_id,
            name=row.name,
            is_active=row.is_active,
        )

    @staticmethod
    def _constituent_to_domain(row: OrmConstituentStatistic) -> DomainConstituentStatistic:
        return DomainConstituentStatistic(**{f: getattr(row, f) for f in _CONSTITUENT_FIELDS})

    @staticmethod
    def _to_domain(
        row: OrmPortfolioStatistic,
        constituents: list[OrmConstituentStatistic] | None = None,
    ) -> DomainPortfolioStatistic:
        return DomainPortfolioStatistic(
            portfolio_config_id=row.portfolio_config_id,
            stat_date=row.stat_date,
            constituents=[
                SqlPortfolioRepository._constituent_to_domain(c) for c in constituents or []
            ],
            **{f: getattr(row, f) for f in _STAT_FIELDS},
        )

    async def list_active_configs(self) -> list[DomainPortfolioConfig]:
        stmt = (
            select(OrmPortfolioConfig)
            .where(OrmPortfolioConfig.is_active.is_(True))
            .order_by(OrmPortfolioConfig.name.asc())
        )
        result = await self._session.execute(stmt)
        return [self._config_to_domain(row) for row in result.scalars()]

    async def get_snapshot_dates(self, portfolio_config_id: UUID, limit: int | None = None) -> list[date]:
        stmt = (
            select(OrmSnapshotConstituent.snapshot_date)
            .where(OrmSnapshotConstituent.portfolio_config_id == portfolio_config_id)
            .distinct()
            .order_by(OrmSnapshotConstituent.snapshot_date.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars())

    async def get_constituents(
        self,
        portfolio_config_id: UUID,
        snapshot_date: date,
    ) -> list[ConstituentSnapshot]:
        stmt = (
            select(OrmSnapshotConstituent)
            .where(
                OrmSnapshotConstituent.portfolio_config_id == portfolio_config_id,
                OrmSnapshotConstituent.snapshot_date == snapshot_date,
            )
            .order_by(OrmSnapshotConstituent.market_cap.desc())
        )
        result = await self._session.execute(stmt)
        return [
            ConstituentSnapshot(asset_id=row.asset_id, market_cap=row.market_cap)
            for row in result.scalars()
        ]

    async def existing_dates(self, portfolio_config_id: UUID) -> set[date]:
        stmt = select(OrmPortfolioStatistic.stat_date).where(
            OrmPortfolioStatistic.portfolio_config_id == portfolio_config_id
        )
        result = await self._session.execute(stmt)
        return set(result.scalars())

    async def create(self, stat: DomainPortfolioStatistic, overwrite: bool = False) -> bool:
        if overwrite:
            await self._session.execute(
                delete(OrmPortfolioStatistic).where(
                    OrmPortfolioStatistic.portfolio_config_id == stat.portfolio_config_id,
                    OrmPortfolioStatistic.stat_date == stat.stat_date,
                )
            )

        values = {f: getattr(stat, f) for f in _STAT_FIELDS}
        values.update(
            portfolio_statistic_id=uuid.uuid4(),
            portfolio_config_id=stat.portfolio_config_id,
            stat_date=stat.stat_date,
        )
        stmt = (
            pg_insert(OrmPortfolioStatistic)
            .values(values)
            .on_conflict_do_nothing(index_elements=["portfolio_config_id", "stat_date"])
            .returning(OrmPortfolioStatistic.portfolio_statistic_id)
        )
        result = await self._session.execute(stmt)
        statistic_id = result.scalar_one_or_none()
        if statistic_id is None:
            return False

        if stat.constituents:
            await self._session.execute(
                pg_insert(OrmConstituentStatistic).values(
                    [
                        {"portfolio_statistic_id": statistic_id}
                        | {f: getattr(c, f) for f in _CONSTITUENT_FIELDS}
                        for c in stat.constituents
                    ]
                )
            )
        return True

    async def get_latest(self, portfolio_config_id: UUID) -> DomainPortfolioStatistic | None:
        stmt = (
            select(OrmPortfolioStatistic)
            .options(selectinload(OrmPortfolioStatistic.constituents))
            .where(OrmPortfolioStatistic.portfolio_config_id == portfolio_config_id)
            .order_by(OrmPortfolioStatistic.stat_date.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return self._to_domain(row, row.constituents) if row else None

    async def get_history(
        self,
        portfolio_config_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[DomainPortfolioStatistic]:
        stmt = (
            select(OrmPortfolioStatistic)
            .where(OrmPortfolioStatistic.portfolio_config_id == portfolio_config_id)
            .order_by(OrmPortfolioStatistic.stat_date.asc())
        )
        if start is not None:
            stmt = stmt.where(OrmPortfolioStatistic.stat_date >= start)
        if end is not None:
            stmt = stmt.where(OrmPortfolioStatistic.stat_date <= end)
        result = await self._session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars()]

    async def delete_all(self) -> int:
        await self._session.execute(delete(OrmConstituentStatistic))
        result = await self._session.execute(delete(OrmPortfolioStatistic))
        return result.rowcount
