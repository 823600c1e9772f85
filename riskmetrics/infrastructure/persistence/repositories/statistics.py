"""SQLAlchemy implementations of WindowedStatisticRepository, one per family.

The five families share key columns and query shapes, so a single generic
base carries the SQL; each subclass names its ORM class, domain class and
metric columns.
"""

from __future__ import annotations

from datetime import date
from typing import Any, ClassVar, Generic, TypeVar
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from riskmetrics.domain.models import statistics as domain
from riskmetrics.domain.repositories.statistics import WindowedStatisticRepository
from riskmetrics.infrastructure.persistence.models import statistics as orm

S = TypeVar("S", bound=domain.WindowedStatistic)

_KEY_COLUMNS = ("asset_id", "stat_date", "window_days")
_BATCH_SIZE = 1000


class SqlWindowedStatisticRepository(WindowedStatisticRepository[S], Generic[S]):
    orm_model: ClassVar[type[Any]]
    domain_model: ClassVar[type[domain.WindowedStatistic]]
    metric_columns: ClassVar[tuple[str, ...]]

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @classmethod
    def _columns(cls) -> tuple[str, ...]:
        return _KEY_COLUMNS + ("num_observations",) + cls.metric_columns

    @classmethod
    def _to_domain(cls, row: Any) -> S:
        return cls.domain_model(**{col: getattr(row, col) for col in cls._columns()})  # type: ignore[return-value]

    @classmethod
    def _to_values(cls, stat: S) -> dict[str, Any]:
        return {col: getattr(stat, col) for col in cls._columns()}

    async def existing_keys(self, asset_id: UUID) -> set[tuple[date, int]]:
        model = self.orm_model
        stmt = select(model.stat_date, model.window_days).where(model.asset_id == asset_id)
        result = await self._session.execute(stmt)
        return {(row.stat_date, row.window_days) for row in result}

    async def insert_many(self, stats: list[S], overwrite: bool = False) -> int:
        if not stats:
            return 0
        written = 0
        for offset in range(0, len(stats), _BATCH_SIZE):
            values = [self._to_values(s) for s in stats[offset : offset + _BATCH_SIZE]]
            stmt = pg_insert(self.orm_model).values(values)
            if overwrite:
                updated = ("num_observations",) + self.metric_columns
                stmt = stmt.on_conflict_do_update(
                    index_elements=list(_KEY_COLUMNS),
                    set_={col: stmt.excluded[col] for col in updated},
                )
            else:
                stmt = stmt.on_conflict_do_nothing(index_elements=list(_KEY_COLUMNS))
            result = await self._session.execute(stmt)
            written += result.rowcount
        return written

    async def get_latest(self, asset_id: UUID, window_days: int | None = None) -> S | None:
        model = self.orm_model
        stmt = (
            select(model)
            .where(model.asset_id == asset_id)
            .order_by(model.stat_date.desc(), model.window_days.desc())
            .limit(1)
        )
        if window_days is not None:
            stmt = stmt.where(model.window_days == window_days)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return self._to_domain(row) if row else None

    async def get_history(
        self,
        asset_id: UUID,
        window_days: int | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[S]:
        model = self.orm_model
        stmt = (
            select(model)
            .where(model.asset_id == asset_id)
            .order_by(model.stat_date.asc(), model.window_days.asc())
        )
        if window_days is not None:
            stmt = stmt.where(model.window_days == window_days)
        if start is not None:
            stmt = stmt.where(model.stat_date >= start)
        if end is not None:
            stmt = stmt.where(model.stat_date <= end)
        result = await self._session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars()]

    async def delete_all(self) -> int:
        result = await self._session.execute(delete(self.orm_model))
        return result.rowcount


class SqlVolatilityRepository(SqlWindowedStatisticRepository[domain.VolatilityStatistic]):
    orm_model = orm.VolatilityStatistic
    domain_model = domain.VolatilityStatistic
    metric_columns = ("mean_return", "daily_volatility", "annualized_volatility")


class SqlVaRRepository(SqlWindowedStatisticRepository[domain.VaRStatistic]):
    orm_model = orm.VaRStatistic
    domain_model = domain.VaRStatistic
    metric_columns = (
        "var_95",
        "var_99",
        "cvar_95",
        "cvar_99",
        "mean_return",
        "std_dev",
        "min_return",
        "max_return",
    )


class SqlDistributionRepository(SqlWindowedStatisticRepository[domain.DistributionStatistic]):
    orm_model = orm.DistributionStatistic
    domain_model = domain.DistributionStatistic
    metric_columns = ("skewness", "kurtosis", "mean_return", "std_dev")


class SqlBetaRepository(SqlWindowedStatisticRepository[domain.BetaStatistic]):
    orm_model = orm.BetaStatistic
    domain_model = domain.BetaStatistic
    metric_columns = ("beta", "alpha", "r_squared", "correlation")


class SqlSMLRepository(SqlWindowedStatisticRepository[domain.SMLStatistic]):
    orm_model = orm.SMLStatistic
    domain_model = domain.SMLStatistic
    metric_columns = (
        "beta",
        "expected_return",
        "actual_return",
        "alpha",
        "is_overvalued",
        "market_return",
    )
