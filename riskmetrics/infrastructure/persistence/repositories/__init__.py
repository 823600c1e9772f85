"""Concrete SQLAlchemy repository implementations.

Exports every SqlRepository class, the Repositories bundle, the
get_repositories() factory and repositories_scope(), which opens one
transactional unit of work and yields repositories bound to it.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from riskmetrics.domain.models.enums import MetricFamily
from riskmetrics.domain.repositories.statistics import WindowedStatisticRepository
from riskmetrics.infrastructure.database import session_scope

from .assets import SqlAssetRepository
from .portfolio import SqlPortfolioRepository
from .prices import SqlBenchmarkRepository, SqlPriceRepository
from .returns import SqlReturnRepository
from .statistics import (
    SqlBetaRepository,
    SqlDistributionRepository,
    SqlSMLRepository,
    SqlVaRRepository,
    SqlVolatilityRepository,
    SqlWindowedStatisticRepository,
)


@dataclass
class Repositories:
    """All repository instances bound to a single AsyncSession."""

    assets: SqlAssetRepository
    prices: SqlPriceRepository
    benchmark: SqlBenchmarkRepository
    returns: SqlReturnRepository
    volatility: SqlVolatilityRepository
    var: SqlVaRRepository
    distribution: SqlDistributionRepository
    beta: SqlBetaRepository
    sml: SqlSMLRepository
    portfolios: SqlPortfolioRepository

    def statistics(self, family: MetricFamily) -> WindowedStatisticRepository:
        """The windowed statistic repository of one metric family."""
        return getattr(self, family.value)


def get_repositories(session: AsyncSession) -> Repositories:
    """Construct all repositories bound to the given session.

        async with session_scope() as session:
            repos = get_repositories(session)
            asset = await repos.assets.get_by_symbol("ETH")
    """
    return Repositories(
        assets=SqlAssetRepository(session),
        prices=SqlPriceRepository(session),
        benchmark=SqlBenchmarkRepository(session),
        returns=SqlReturnRepository(session),
        volatility=SqlVolatilityRepository(session),
        var=SqlVaRRepository(session),
        distribution=SqlDistributionRepository(session),
        beta=SqlBetaRepository(session),
        sml=SqlSMLRepository(session),
        portfolios=SqlPortfolioRepository(session),
    )


@asynccontextmanager
async def repositories_scope() -> AsyncIterator[Repositories]:
    """One committed-or-rolled-back unit of work with repositories bound to it."""
    async with session_scope() as session:
        yield get_repositories(session)


__all__ = [
    "SqlAssetRepository",
    "SqlPriceRepository",
    "SqlBenchmarkRepository",
    "SqlReturnRepository",
    "SqlWindowedStatisticRepository",
    "SqlVolatilityRepository",
    "SqlVaRRepository",
    "SqlDistributionRepository",
    "SqlBetaRepository",
    "SqlSMLRepository",
    "SqlPortfolioRepository",
    "Repositories",
    "get_repositories",
    "repositories_scope",
]
