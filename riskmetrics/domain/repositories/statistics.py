"""Windowed statistic repository interface, shared by every metric family.

Records are keyed by (asset_id, stat_date, window_days).  The storage layer
enforces that key, so insert_many is safe to call concurrently: a record
written by another run is reported as not inserted rather than duplicated.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Generic, TypeVar
from uuid import UUID

from riskmetrics.domain.models.statistics import WindowedStatistic

S = TypeVar("S", bound=WindowedStatistic)


class WindowedStatisticRepository(ABC, Generic[S]):
    """Append-only store for one family of windowed statistics."""

    @abstractmethod
    async def existing_keys(self, asset_id: UUID) -> set[tuple[date, int]]:
        """All (stat_date, window_days) keys stored for the asset, in one query."""

    @abstractmethod
    async def insert_many(self, stats: list[S], overwrite: bool = False) -> int:
        """Insert statistics, skipping existing keys unless overwrite is set.

        Returns the number of rows written.
        """

    @abstractmethod
    async def get_latest(self, asset_id: UUID, window_days: int | None = None) -> S | None:
        """Most recent statistic for the window (any window when None), or None."""

    @abstractmethod
    async def get_history(
        self,
        asset_id: UUID,
        window_days: int | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[S]:
        """Statistics in ascending date order, optionally filtered by window and dates."""

    @abstractmethod
    async def delete_all(self) -> int:
        """Administrative truncate; returns the number of rows removed."""
