"""Asset repository interface."""

from __future__ import annotations

from abc import abstractmethod
from uuid import UUID

from riskmetrics.domain.models.assets import Asset

from .base import Repository


class AssetRepository(Repository[Asset]):
    """Read interface for the assets the engine computes statistics for.

    Assets are reference data loaded alongside prices; the engine only
    creates them when seeding.  get_by_id and get_by_symbol return None when
    no match exists.
    """

    async def get(self, id: UUID) -> Asset | None:
        """Delegate to get_by_id for a consistent base-interface contract."""
        return await self.get_by_id(id)

    @abstractmethod
    async def get_by_id(self, asset_id: UUID) -> Asset | None:
        """Return the asset with the given ID, or None."""

    @abstractmethod
    async def get_by_symbol(self, symbol: str) -> Asset | None:
        """Return the asset with the given symbol (case-insensitive), or None."""

    @abstractmethod
    async def list_with_prices(self, min_prices: int = 2) -> list[Asset]:
        """Assets with at least min_prices stored prices, ordered by symbol."""

    @abstractmethod
    async def list_with_returns(self, min_returns: int = 1) -> list[Asset]:
        """Assets with at least min_returns stored returns, ordered by symbol."""
