"""Tests for SqlPortfolioRepository: mapping and create() semantics."""

from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from riskmetrics.domain.models import PortfolioStatistic
from riskmetrics.infrastructure.persistence.repositories.portfolio import SqlPortfolioRepository


def _orm_stat(**overrides):
    defaults = {
        "portfolio_config_id": uuid4(),
        "stat_date": date(2024, 3, 1),
        "window_days": 90,
        "daily_volatility": 0.02,
        "annualized_volatility": 0.38,
        "num_constituents": 2,
        "total_market_cap": 300.0,
        "weighted_average_volatility": 0.5,
        "diversification_benefit": 0.12,
        "hhi": 0.56,
        "effective_n": 1.8,
        "calculation_duration_ms": 12,
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def _orm_constituent(weight):
    return SimpleNamespace(
        asset_id=uuid4(),
        weight=weight,
        market_cap=weight * 300,
        daily_volatility=0.03,
        annualized_volatility=0.57,
        mcr=0.01,
        crc=0.005,
        prc=weight,
    )


def test_config_to_domain_maps_active_flag():
    row = SimpleNamespace(portfolio_config_id=uuid4(), name="Top 10", is_active=False)
    assert SqlPortfolioRepository._config_to_domain(row).is_active is False


def test_to_domain_without_constituents():
    stat = SqlPortfolioRepository._to_domain(_orm_stat())
    assert stat.constituents == []
    assert stat.calculation_duration_ms == 12


def test_to_domain_with_constituents():
    stat = SqlPortfolioRepository._to_domain(
        _orm_stat(), [_orm_constituent(2 / 3), _orm_constituent(1 / 3)]
    )
    assert len(stat.constituents) == 2
    assert abs(stat.weight_sum - 1.0) < 1e-12


async def test_create_returns_false_when_snapshot_exists():
    session = AsyncMock()
    session.execute.return_value = MagicMock(**{"scalar_one_or_none.return_value": None})
    repo = SqlPortfolioRepository(session)
    row = _orm_stat()
    stat = PortfolioStatistic(
        portfolio_config_id=row.portfolio_config_id,
        stat_date=row.stat_date,
        **{k: v for k, v in vars(row).items() if k not in ("portfolio_config_id", "stat_date")},
    )
    assert await repo.create(stat) is False
    session.execute.assert_awaited_once()


async def test_delete_all_reports_snapshot_rows():
    session = AsyncMock()
    session.execute.return_value = MagicMock(rowcount=3)
    assert await SqlPortfolioRepository(session).delete_all() == 3
