"""Domain services: pure computation over return series.

No service touches the database; repositories are wired in the
application layer.
"""

from .lookup import LookupResult, resolve_statistic
from .portfolio import (
    ConstituentReturns,
    DiversificationBenefit,
    PortfolioRiskService,
    RiskDecompositionResult,
)
from .returns import ReturnSeriesResult, ReturnSeriesService
from .sensitivity import (
    AlignedReturns,
    BetaResult,
    MarketSensitivityService,
    SMLPoint,
    SMLResult,
)
from .univariate import CurvePoint, Histogram, UnivariateStatisticsService
from .windows import RollingWindowScanner, WindowSlice

__all__ = [
    "ReturnSeriesService",
    "ReturnSeriesResult",
    "RollingWindowScanner",
    "WindowSlice",
    "UnivariateStatisticsService",
    "Histogram",
    "CurvePoint",
    "MarketSensitivityService",
    "AlignedReturns",
    "BetaResult",
    "SMLResult",
    "SMLPoint",
    "PortfolioRiskService",
    "ConstituentReturns",
    "RiskDecompositionResult",
    "DiversificationBenefit",
    "LookupResult",
    "resolve_statistic",
]
