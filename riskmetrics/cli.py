"""Batch entry points: recompute returns, per-family statistics and portfolios.

    riskmetrics returns
    riskmetrics volatility --force
    riskmetrics all
    riskmetrics truncate --yes
"""

from __future__ import annotations

import asyncio
import json
import logging

import typer

from riskmetrics.application.recompute import RecomputeService
from riskmetrics.config import Settings
from riskmetrics.domain.models.enums import MetricFamily
from riskmetrics.domain.models.runs import RunReport
from riskmetrics.infrastructure.persistence.repositories import repositories_scope

app = typer.Typer(help="Rolling-window risk metrics: idempotent batch recomputation")

FORCE_OPTION = typer.Option(False, "--force", help="Recompute and overwrite existing records")


def _service() -> RecomputeService:
    settings = Settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return RecomputeService(repositories_scope, settings.engine_config())


def _echo(reports: list[RunReport]) -> None:
    for report in reports:
        typer.echo(report.summary())
    if any(r.errored for r in reports):
        raise typer.Exit(code=1)


def _run_family(family: MetricFamily, force: bool) -> None:
    service = _service()
    _echo([asyncio.run(service.recompute_family(family, force))])


@app.command()
def returns(force: bool = FORCE_OPTION):
    """Derive daily log returns from stored prices."""
    service = _service()
    _echo([asyncio.run(service.recompute_returns(force))])


@app.command()
def volatility(force: bool = FORCE_OPTION):
    """Rolling population volatility (target 90 days)."""
    _run_family(MetricFamily.VOLATILITY, force)


@app.command()
def var(force: bool = FORCE_OPTION):
    """Historical VaR / CVaR at 95 % and 99 % (target 365 days)."""
    _run_family(MetricFamily.VAR, force)


@app.command()
def distribution(force: bool = FORCE_OPTION):
    """Rolling skewness and excess kurtosis (target 90 days)."""
    _run_family(MetricFamily.DISTRIBUTION, force)


@app.command()
def beta(force: bool = FORCE_OPTION):
    """Beta / alpha / R² against the benchmark (target 365 days)."""
    _run_family(MetricFamily.BETA, force)


@app.command()
def sml(force: bool = FORCE_OPTION):
    """Security market line positioning (target 90 days)."""
    _run_family(MetricFamily.SML, force)


@app.command()
def portfolio(force: bool = FORCE_OPTION):
    """Market-cap weighted portfolio volatility for recent snapshot dates."""
    service = _service()
    _echo([asyncio.run(service.recompute_portfolios(force))])


@app.command("all")
def run_all(force: bool = FORCE_OPTION):
    """Returns, every metric family, then portfolios."""
    service = _service()
    _echo(asyncio.run(service.recompute_all(force)))


@app.command()
def truncate(
    yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt"),
    recompute: bool = typer.Option(False, "--recompute", help="Run every job after truncating"),
):
    """Delete all derived data (returns, statistics, portfolio snapshots)."""
    if not yes:
        typer.confirm("Delete all derived risk data?", abort=True)
    service = _service()
    removed = asyncio.run(service.truncate())
    typer.echo(json.dumps(removed, indent=2))
    if recompute:
        _echo(asyncio.run(service.recompute_all()))


if __name__ == "__main__":
    app()
