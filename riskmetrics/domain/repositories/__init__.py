"""Domain repository interfaces.

All abstractions are defined here with abc.ABC and @abstractmethod.
Concrete implementations live in riskmetrics/infrastructure/persistence/
and are wired at the application boundary.

Import from this package rather than individual modules to avoid coupling
callers to specific repository module paths.
"""

from .assets import AssetRepository
from .base import Repository
from .portfolio import PortfolioRepository
from .prices import BenchmarkRepository, PriceRepository
from .returns import ReturnRepository
from .statistics import WindowedStatisticRepository

__all__ = [
    "Repository",
    "AssetRepository",
    "PriceRepository",
    "BenchmarkRepository",
    "ReturnRepository",
    "WindowedStatisticRepository",
    "PortfolioRepository",
]
