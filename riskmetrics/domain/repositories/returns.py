"""Return series repository interface.

ReturnRepository is a specialised time-series interface and does not extend
the generic Repository[T] base: return points are derived from prices,
inserted in bulk, never updated in place, and queried by asset + date range.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from uuid import UUID

from riskmetrics.domain.models.market_data import ReturnPoint


class ReturnRepository(ABC):
    """Read/append interface for daily log returns."""

    @abstractmethod
    async def get_returns(
        self,
        asset_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[ReturnPoint]:
        """Return points for one asset in ascending date order (inclusive bounds)."""

    @abstractmethod
    async def get_recent_returns(
        self,
        asset_id: UUID,
        end: date,
        limit: int,
    ) -> list[ReturnPoint]:
        """The last `limit` returns on or before end, in ascending date order."""

    @abstractmethod
    async def existing_dates(self, asset_id: UUID) -> set[date]:
        """All return dates stored for the asset."""

    @abstractmethod
    async def insert_many(self, points: list[ReturnPoint], overwrite: bool = False) -> int:
        """Insert return points, skipping (or, with overwrite, replacing) existing keys.

        Returns the number of rows written.
        """

    @abstractmethod
    async def delete_all(self) -> int:
        """Administrative truncate; returns the number of rows removed."""
