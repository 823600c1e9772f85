"""Initial schema: reference data, market data, windowed statistics, portfolios.

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

WINDOWED_TABLES: dict[str, tuple[tuple[str, sa.types.TypeEngine], ...]] = {
    "volatility_statistics": (
        ("mean_return", sa.Double()),
        ("daily_volatility", sa.Double()),
        ("annualized_volatility", sa.Double()),
    ),
    "var_statistics": (
        ("var_95", sa.Double()),
        ("var_99", sa.Double()),
        ("cvar_95", sa.Double()),
        ("cvar_99", sa.Double()),
        ("mean_return", sa.Double()),
        ("std_dev", sa.Double()),
        ("min_return", sa.Double()),
        ("max_return", sa.Double()),
    ),
    "distribution_statistics": (
        ("skewness", sa.Double()),
        ("kurtosis", sa.Double()),
        ("mean_return", sa.Double()),
        ("std_dev", sa.Double()),
    ),
    "beta_statistics": (
        ("beta", sa.Double()),
        ("alpha", sa.Double()),
        ("r_squared", sa.Double()),
        ("correlation", sa.Double()),
    ),
    "sml_statistics": (
        ("beta", sa.Double()),
        ("expected_return", sa.Double()),
        ("actual_return", sa.Double()),
        ("alpha", sa.Double()),
        ("is_overvalued", sa.Boolean()),
        ("market_return", sa.Double()),
    ),
}


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def _asset_fk(primary_key: bool = True) -> sa.Column:
    return sa.Column(
        "asset_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("assets.asset_id", ondelete="CASCADE"),
        primary_key=primary_key,
    )


def upgrade() -> None:
    # ------------------------------------------------------------------ #
    # 1. REFERENCE LAYER                                                   #
    # ------------------------------------------------------------------ #

    op.create_table(
        "assets",
        sa.Column("asset_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("symbol", sa.Text, nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        _created_at(),
        sa.UniqueConstraint("symbol", name="uq_assets_symbol"),
    )

    op.create_table(
        "portfolio_configs",
        sa.Column("portfolio_config_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("is_active", sa.Boolean, server_default=sa.text("true"), nullable=False),
        _created_at(),
        sa.UniqueConstraint("name", name="uq_portfolio_configs_name"),
    )

    op.create_table(
        "portfolio_snapshot_constituents",
        sa.Column(
            "portfolio_config_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("portfolio_configs.portfolio_config_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("snapshot_date", sa.Date, primary_key=True),
        _asset_fk(),
        sa.Column("market_cap", sa.Double, nullable=False),
    )
    op.create_index(
        "ix_portfolio_snapshot_constituents_config_date",
        "portfolio_snapshot_constituents",
        ["portfolio_config_id", "snapshot_date"],
    )

    # ------------------------------------------------------------------ #
    # 2. MARKET DATA LAYER                                                 #
    # ------------------------------------------------------------------ #

    op.create_table(
        "price_points",
        _asset_fk(),
        sa.Column("price_date", sa.Date, primary_key=True),
        sa.Column("price", sa.Double, nullable=False),
        sa.Column(
            "pulled_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    )

    op.create_table(
        "benchmark_levels",
        sa.Column("level_id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("benchmark_name", sa.Text, nullable=False),
        sa.Column("observed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("level", sa.Double, nullable=False),
        sa.UniqueConstraint("benchmark_name", "observed_at", name="uq_benchmark_levels_name_time"),
    )
    op.create_index(
        "ix_benchmark_levels_name_time", "benchmark_levels", ["benchmark_name", "observed_at"]
    )

    op.create_table(
        "return_points",
        _asset_fk(),
        sa.Column("return_date", sa.Date, primary_key=True),
        sa.Column("log_return", sa.Double, nullable=False),
        sa.Column("price_current", sa.Double, nullable=False),
        sa.Column("price_previous", sa.Double, nullable=False),
        _created_at(),
    )
    op.create_index("ix_return_points_return_date", "return_points", ["return_date"])

    # ------------------------------------------------------------------ #
    # 3. WINDOWED STATISTICS (PK = asset_id, stat_date, window_days)       #
    # ------------------------------------------------------------------ #

    for table, metrics in WINDOWED_TABLES.items():
        op.create_table(
            table,
            _asset_fk(),
            sa.Column("stat_date", sa.Date, primary_key=True),
            sa.Column("window_days", sa.Integer, primary_key=True),
            sa.Column("num_observations", sa.Integer, nullable=False),
            *[sa.Column(name, type_, nullable=False) for name, type_ in metrics],
            _created_at(),
        )

    # ------------------------------------------------------------------ #
    # 4. PORTFOLIO STATISTICS                                              #
    # ------------------------------------------------------------------ #

    op.create_table(
        "portfolio_statistics",
        sa.Column("portfolio_statistic_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "portfolio_config_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("portfolio_configs.portfolio_config_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("stat_date", sa.Date, nullable=False),
        sa.Column("window_days", sa.Integer, nullable=False),
        sa.Column("daily_volatility", sa.Double, nullable=False),
        sa.Column("annualized_volatility", sa.Double, nullable=False),
        sa.Column("num_constituents", sa.Integer, nullable=False),
        sa.Column("total_market_cap", sa.Double, nullable=False),
        sa.Column("weighted_average_volatility", sa.Double, nullable=False),
        sa.Column("diversification_benefit", sa.Double, nullable=False),
        sa.Column("hhi", sa.Double, nullable=False),
        sa.Column("effective_n", sa.Double, nullable=False),
        sa.Column("calculation_duration_ms", sa.BigInteger, nullable=True),
        _created_at(),
        sa.UniqueConstraint(
            "portfolio_config_id", "stat_date", name="uq_portfolio_statistics_config_date"
        ),
    )

    op.create_table(
        "portfolio_constituent_statistics",
        sa.Column(
            "portfolio_statistic_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("portfolio_statistics.portfolio_statistic_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        _asset_fk(),
        sa.Column("weight", sa.Double, nullable=False),
        sa.Column("market_cap", sa.Double, nullable=False),
        sa.Column("daily_volatility", sa.Double, nullable=False),
        sa.Column("annualized_volatility", sa.Double, nullable=False),
        sa.Column("mcr", sa.Double, nullable=False),
        sa.Column("crc", sa.Double, nullable=False),
        sa.Column("prc", sa.Double, nullable=False),
    )


def downgrade() -> None:
    # Drop in reverse dependency order (leaves first, roots last).
    op.drop_table("portfolio_constituent_statistics")
    op.drop_table("portfolio_statistics")
    for table in reversed(list(WINDOWED_TABLES)):
        op.drop_table(table)
    op.drop_index("ix_return_points_return_date", table_name="return_points")
    op.drop_table("return_points")
    op.drop_index("ix_benchmark_levels_name_time", table_name="benchmark_levels")
    op.drop_table("benchmark_levels")
    op.drop_table("price_points")
    op.drop_index(
        "ix_portfolio_snapshot_constituents_config_date",
        table_name="portfolio_snapshot_constituents",
    )
    op.drop_table("portfolio_snapshot_constituents")
    op.drop_table("portfolio_configs")
    op.drop_table("assets")
