"""Domain model package.

All domain objects are pure Python / Pydantic models with no ORM or
infrastructure dependencies.  Import from this package to avoid coupling
application code to individual module paths.
"""

from .assets import Asset, ConstituentSnapshot, PortfolioConfig
from .enums import MetricFamily, VarianceConvention
from .market_data import BenchmarkLevel, BenchmarkReturnPoint, PricePoint, ReturnPoint
from .portfolio import PortfolioConstituentStatistic, PortfolioStatistic
from .runs import RunReport
from .statistics import (
    BetaStatistic,
    DistributionStatistic,
    SMLStatistic,
    VaRStatistic,
    VolatilityStatistic,
    WindowedStatistic,
)
from .stress import StressResult, StressScenario
from .windows import DEFAULT_WINDOW_POLICIES, EngineConfig, WindowPolicy

__all__ = [
    # enums
    "MetricFamily",
    "VarianceConvention",
    # reference data
    "Asset",
    "PortfolioConfig",
    "ConstituentSnapshot",
    # market data
    "PricePoint",
    "ReturnPoint",
    "BenchmarkLevel",
    "BenchmarkReturnPoint",
    # windowed statistics
    "WindowedStatistic",
    "VolatilityStatistic",
    "VaRStatistic",
    "DistributionStatistic",
    "BetaStatistic",
    "SMLStatistic",
    # portfolio
    "PortfolioStatistic",
    "PortfolioConstituentStatistic",
    # configuration
    "WindowPolicy",
    "EngineConfig",
    "DEFAULT_WINDOW_POLICIES",
    # runs
    "RunReport",
    # stress
    "StressScenario",
    "StressResult",
]
