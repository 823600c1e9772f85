"""ORM model registry: imports every layer module so each mapper class is
registered with Base.metadata before Alembic or SQLAlchemy runs.

Import order follows the dependency graph (referenced tables first).
"""

from riskmetrics.infrastructure.persistence.models.reference import (
    Asset,
    PortfolioConfig,
    PortfolioSnapshotConstituent,
)
from riskmetrics.infrastructure.persistence.models.market_data import (
    BenchmarkLevel,
    PricePoint,
    ReturnPoint,
)
from riskmetrics.infrastructure.persistence.models.statistics import (
    BetaStatistic,
    DistributionStatistic,
    SMLStatistic,
    VaRStatistic,
    VolatilityStatistic,
)
from riskmetrics.infrastructure.persistence.models.portfolio import (
    PortfolioConstituentStatistic,
    PortfolioStatistic,
)

__all__ = [
    # Reference
    "Asset",
    "PortfolioConfig",
    "PortfolioSnapshotConstituent",
    # Market data
    "PricePoint",
    "BenchmarkLevel",
    "ReturnPoint",
    # Windowed statistics
    "VolatilityStatistic",
    "VaRStatistic",
    "DistributionStatistic",
    "BetaStatistic",
    "SMLStatistic",
    # Portfolio
    "PortfolioStatistic",
    "PortfolioConstituentStatistic",
]
