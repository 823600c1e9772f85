"""Price and benchmark level repository interfaces.

Both are read-only time-series interfaces: prices and benchmark levels are
loaded by an external ingestion process and consumed here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from uuid import UUID

from riskmetrics.domain.models.market_data import BenchmarkLevel, PricePoint


class PriceRepository(ABC):
    """Read interface for daily asset prices."""

    @abstractmethod
    async def get_prices(
        self,
        asset_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[PricePoint]:
        """Return prices for one asset in ascending date order.

        start and end are inclusive.  When omitted the full available history
        is returned.
        """

    @abstractmethod
    async def get_latest_price(self, asset_id: UUID) -> PricePoint | None:
        """Return the most recent price of the asset, or None."""


class BenchmarkRepository(ABC):
    """Read interface for raw benchmark level observations."""

    @abstractmethod
    async def get_levels(
        self,
        benchmark_name: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[BenchmarkLevel]:
        """Return level observations in ascending time order (inclusive bounds)."""
