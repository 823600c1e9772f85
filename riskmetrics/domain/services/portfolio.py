"""Covariance / portfolio engine.

Implements market-cap weighted portfolio volatility:
  w_i        = cap_i / Σ cap
  Σ          = sample covariance of the constituents' aligned returns
  σ_p²       = wᵀ Σ w
  MCR_i      = (Σw)_i / σ_p,  CRC_i = w_i · MCR_i,  PRC_i = CRC_i / σ_p
  HHI        = Σ w_i²,        effective N = 1 / HHI

Constituent return series are aligned positionally: each contributes its
most recent `window` returns, where window = min(target, shortest series).
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from uuid import UUID

import numpy as np
import pandas as pd

from riskmetrics.domain.models.portfolio import (
    PortfolioConstituentStatistic,
    PortfolioStatistic,
)
from riskmetrics.domain.models.windows import EngineConfig

from .univariate import UnivariateStatisticsService
from .windows import RollingWindowScanner

logger = logging.getLogger(__name__)

_VOL_TOL = 1e-12


# ─────────────────────────────────────────────────────────────────────────── #
# Input / output types                                                         #
# ─────────────────────────────────────────────────────────────────────────── #


@dataclass
class ConstituentReturns:
    """One constituent's market cap and its returns up to the snapshot date (ascending)."""

    asset_id: UUID
    market_cap: float
    returns: list[float]


@dataclass
class RiskDecompositionResult:
    """Per-asset risk contributions, positional arrays aligned to the weights.

    Identities: Σ CRC_i = σ_p,  Σ PRC_i = 1 (when σ_p > 0).
    """

    mcr: np.ndarray
    crc: np.ndarray
    prc: np.ndarray


@dataclass
class DiversificationBenefit:
    """Reduction of volatility relative to the cap-weighted average of constituent vols."""

    weighted_average_volatility: float
    portfolio_volatility: float
    absolute: float
    relative: float


# ─────────────────────────────────────────────────────────────────────────── #
# Service                                                                      #
# ─────────────────────────────────────────────────────────────────────────── #


class PortfolioRiskService:
    """Pure computation service for covariance-based portfolio risk.

    The class is stateless; all configuration is passed per call.
    """

    def __init__(
        self,
        univariate: UnivariateStatisticsService | None = None,
        scanner: RollingWindowScanner | None = None,
    ) -> None:
        self._univariate = univariate or UnivariateStatisticsService()
        self._scanner = scanner or RollingWindowScanner()

    def covariance_matrix(self, returns: pd.DataFrame) -> np.ndarray:
        """Sample covariance (ddof = 1) of a dates × assets return frame."""
        if returns.shape[0] < 2:
            raise ValueError("at least two observations are required for a covariance matrix")
        return returns.cov(ddof=1).to_numpy()

    def portfolio_variance(self, weights: np.ndarray, sigma: np.ndarray) -> float:
        w = np.asarray(weights, dtype=float)
        s = np.asarray(sigma, dtype=float)
        if s.shape != (len(w), len(w)):
            raise ValueError(
                f"covariance shape {s.shape} does not match {len(w)} weights"
            )
        return float(w @ s @ w)

    def portfolio_volatility(self, weights: np.ndarray, sigma: np.ndarray) -> float:
        return math.sqrt(max(self.portfolio_variance(weights, sigma), 0.0))

    def market_cap_weights(self, market_caps: Sequence[float]) -> np.ndarray:
        caps = np.asarray(market_caps, dtype=float)
        total = float(caps.sum())
        if total <= 0:
            raise ValueError("total market cap must be positive")
        return caps / total

    def validate_weights(self, weights: np.ndarray, tolerance: float = 1e-4) -> bool:
        """True when the weights sum to 1 within tolerance; logs a warning otherwise."""
        total = float(np.sum(weights))
        if abs(total - 1.0) > tolerance:
            logger.warning("portfolio weights sum to %.6f (tolerance %g)", total, tolerance)
            return False
        return True

    def risk_decomposition(self, weights: np.ndarray, sigma: np.ndarray) -> RiskDecompositionResult:
        """MCR, CRC and PRC per asset; zero arrays when portfolio volatility is ~0."""
        stdev = self.portfolio_volatility(weights, sigma)
        if stdev < _VOL_TOL:
            zeros = np.zeros(len(weights))
            return RiskDecompositionResult(mcr=zeros, crc=zeros, prc=zeros)

        g = sigma @ weights
        mcr = g / stdev
        crc = weights * mcr
        prc = crc / stdev
        return RiskDecompositionResult(mcr=mcr, crc=crc, prc=prc)

    def diversification_benefit(
        self,
        portfolio_volatility: float,
        weights: Sequence[float],
        volatilities: Sequence[float],
    ) -> DiversificationBenefit:
        weighted = float(np.dot(weights, volatilities))
        absolute = weighted - portfolio_volatility
        relative = absolute / weighted if weighted > 0 else 0.0
        return DiversificationBenefit(
            weighted_average_volatility=weighted,
            portfolio_volatility=portfolio_volatility,
            absolute=absolute,
            relative=relative,
        )

    def concentration(self, weights: np.ndarray) -> tuple[float, float]:
        """(HHI, effective N) of a weight vector."""
        hhi = float(np.sum(np.square(weights)))
        return hhi, (1.0 / hhi if hhi > 0 else 0.0)

    # ─────────────────────────────────────────────────────────────────── #
    # Snapshot                                                             #
    # ─────────────────────────────────────────────────────────────────── #

    def build_snapshot(
        self,
        portfolio_config_id: UUID,
        stat_date: date,
        constituents: Sequence[ConstituentReturns],
        config: EngineConfig,
    ) -> PortfolioStatistic | None:
        """Volatility snapshot of one portfolio on one date.

        Constituents with fewer than the policy minimum of returns are left
        out.  Returns None when fewer than config.portfolio_min_constituents
        remain or their total market cap is zero.
        """
        policy = config.portfolio_window
        eligible = [c for c in constituents if len(c.returns) >= policy.minimum_window]
        if len(eligible) < config.portfolio_min_constituents:
            logger.debug(
                "portfolio %s on %s: %d of %d constituents have enough history",
                portfolio_config_id,
                stat_date,
                len(eligible),
                len(constituents),
            )
            return None

        window = self._scanner.common_window([len(c.returns) for c in eligible], policy)
        if window is None:
            return None
        total_cap = float(sum(c.market_cap for c in eligible))
        if total_cap <= 0:
            return None

        matrix = pd.DataFrame(np.column_stack([c.returns[-window:] for c in eligible]))
        sigma = self.covariance_matrix(matrix)
        weights = self.market_cap_weights([c.market_cap for c in eligible])
        self.validate_weights(weights, config.weight_tolerance)

        daily_vol = self.portfolio_volatility(weights, sigma)
        annual_vol = self._univariate.annualize(daily_vol, config.annualization_days)
        decomposition = self.risk_decomposition(weights, sigma)

        members: list[PortfolioConstituentStatistic] = []
        annual_vols: list[float] = []
        for i, c in enumerate(eligible):
            own_daily = self._univariate.daily_volatility(c.returns[-window:])
            own_annual = self._univariate.annualize(own_daily, config.annualization_days)
            annual_vols.append(own_annual)
            members.append(
                PortfolioConstituentStatistic(
                    asset_id=c.asset_id,
                    weight=float(weights[i]),
                    market_cap=c.market_cap,
                    daily_volatility=own_daily,
                    annualized_volatility=own_annual,
                    mcr=float(decomposition.mcr[i]),
                    crc=float(decomposition.crc[i]),
                    prc=float(decomposition.prc[i]),
                )
            )

        benefit = self.diversification_benefit(annual_vol, weights, annual_vols)
        hhi, effective_n = self.concentration(weights)

        return PortfolioStatistic(
            portfolio_config_id=portfolio_config_id,
            stat_date=stat_date,
            window_days=window,
            daily_volatility=daily_vol,
            annualized_volatility=annual_vol,
            num_constituents=len(members),
            total_market_cap=total_cap,
            weighted_average_volatility=benefit.weighted_average_volatility,
            diversification_benefit=benefit.absolute,
            hhi=hhi,
            effective_n=effective_n,
            constituents=members,
        )
