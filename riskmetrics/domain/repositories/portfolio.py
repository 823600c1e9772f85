"""Portfolio configuration and snapshot statistic repository interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from uuid import UUID

from riskmetrics.domain.models.assets import ConstituentSnapshot, PortfolioConfig
from riskmetrics.domain.models.portfolio import PortfolioStatistic


class PortfolioRepository(ABC):
    """Reads portfolio definitions and appends volatility snapshots.

    Snapshots are keyed by (portfolio_config_id, stat_date).
    """

    @abstractmethod
    async def list_active_configs(self) -> list[PortfolioConfig]:
        """Active portfolio configurations, ordered by name."""

    @abstractmethod
    async def get_snapshot_dates(self, portfolio_config_id: UUID, limit: int | None = None) -> list[date]:
        """Dates with constituent snapshots, most recent first, at most `limit`."""

    @abstractmethod
    async def get_constituents(
        self,
        portfolio_config_id: UUID,
        snapshot_date: date,
    ) -> list[ConstituentSnapshot]:
        """Constituents and market caps of the portfolio on snapshot_date."""

    @abstractmethod
    async def existing_dates(self, portfolio_config_id: UUID) -> set[date]:
        """Dates that already have a stored snapshot statistic."""

    @abstractmethod
    async def create(self, stat: PortfolioStatistic, overwrite: bool = False) -> bool:
        """Persist a snapshot with its constituents.

        Returns False when a snapshot for the same key already exists and
        overwrite is not set.  With overwrite the existing snapshot and its
        constituents are replaced.
        """

    @abstractmethod
    async def get_latest(self, portfolio_config_id: UUID) -> PortfolioStatistic | None:
        """Most recent snapshot with constituents, or None."""

    @abstractmethod
    async def get_history(
        self,
        portfolio_config_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[PortfolioStatistic]:
        """Snapshots in ascending date order (without constituents)."""

    @abstractmethod
    async def delete_all(self) -> int:
        """Administrative truncate of snapshots and constituents; returns snapshots removed."""
