"""Persistence package.

Importing this package registers every ORM mapper with Base.metadata
(required for Alembic autogenerate and SQLAlchemy mapper configuration)
and exports all repository implementations and the factory functions.
"""

from riskmetrics.infrastructure.persistence.models import *  # noqa: F401, F403
from riskmetrics.infrastructure.persistence.models import __all__ as _orm_all
from riskmetrics.infrastructure.persistence.repositories import (
    Repositories,
    SqlAssetRepository,
    SqlBenchmarkRepository,
    SqlBetaRepository,
    SqlDistributionRepository,
    SqlPortfolioRepository,
    SqlPriceRepository,
    SqlReturnRepository,
    SqlSMLRepository,
    SqlVaRRepository,
    SqlVolatilityRepository,
    get_repositories,
    repositories_scope,
)

__all__ = _orm_all + [
    "Repositories",
    "SqlAssetRepository",
    "SqlPriceRepository",
    "SqlBenchmarkRepository",
    "SqlReturnRepository",
    "SqlVolatilityRepository",
    "SqlVaRRepository",
    "SqlDistributionRepository",
    "SqlBetaRepository",
    "SqlSMLRepository",
    "SqlPortfolioRepository",
    "get_repositories",
    "repositories_scope",
]
