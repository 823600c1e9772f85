"""Tests for SqlReturnRepository: mapping and insert_many edge cases."""

import math
from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from riskmetrics.domain.models import ReturnPoint
from riskmetrics.infrastructure.persistence.repositories.returns import SqlReturnRepository


def _orm_point(**overrides):
    defaults = {
        "asset_id": uuid4(),
        "return_date": date(2024, 1, 2),
        "log_return": math.log(1.05),
        "price_current": 105.0,
        "price_previous": 100.0,
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def test_to_domain_maps_log_return():
    assert SqlReturnRepository._to_domain(_orm_point()).log_return == math.log(1.05)


def test_to_domain_maps_prices():
    point = SqlReturnRepository._to_domain(_orm_point())
    assert (point.price_previous, point.price_current) == (100.0, 105.0)


async def test_insert_many_empty_list_returns_zero():
    session = AsyncMock()
    repo = SqlReturnRepository(session)
    assert await repo.insert_many([]) == 0
    session.execute.assert_not_awaited()


async def test_insert_many_counts_rows_reported_by_database():
    session = AsyncMock()
    session.execute.return_value = MagicMock(rowcount=1)
    repo = SqlReturnRepository(session)
    asset_id = uuid4()
    points = [
        ReturnPoint.from_prices(asset_id, date(2024, 1, 2), 105.0, 100.0),
        ReturnPoint.from_prices(asset_id, date(2024, 1, 3), 110.0, 105.0),
    ]
    # one batch; the conflicting second row is ignored by the database
    assert await repo.insert_many(points) == 1
    session.execute.assert_awaited_once()


async def test_delete_all_returns_rowcount():
    session = AsyncMock()
    session.execute.return_value = MagicMock(rowcount=7)
    assert await SqlReturnRepository(session).delete_all() == 7
