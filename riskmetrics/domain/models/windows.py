"""Window policies and the engine configuration value.

EngineConfig is built once at the application boundary (see
riskmetrics.config.Settings.engine_config) and passed explicitly into every
recompute and lookup call.  Nothing in the engine reads globals.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import MetricFamily


class WindowPolicy(BaseModel):
    """Growing-window policy for one metric family.

    A statistic is produced for the i-th observation (0-based) once
    i + 1 >= minimum_window; its window is min(i + 1, target_window).
    """

    model_config = ConfigDict(frozen=True)

    target_window: int = Field(gt=0)
    minimum_window: int = Field(gt=0)

    @model_validator(mode="after")
    def _minimum_not_above_target(self) -> "WindowPolicy":
        if self.minimum_window > self.target_window:
            raise ValueError(
                f"minimum_window ({self.minimum_window}) cannot exceed "
                f"target_window ({self.target_window})"
            )
        return self

    def effective_window(self, available: int) -> int:
        """Window length for a statistic ending at the available-th observation."""
        return min(available, self.target_window)


DEFAULT_WINDOW_POLICIES: dict[MetricFamily, WindowPolicy] = {
    MetricFamily.VOLATILITY: WindowPolicy(target_window=90, minimum_window=7),
    MetricFamily.VAR: WindowPolicy(target_window=365, minimum_window=7),
    MetricFamily.BETA: WindowPolicy(target_window=365, minimum_window=7),
    MetricFamily.DISTRIBUTION: WindowPolicy(target_window=90, minimum_window=7),
    MetricFamily.SML: WindowPolicy(target_window=90, minimum_window=7),
}


class EngineConfig(BaseModel):
    """All tunables consumed by the engines, as one immutable value."""

    model_config = ConfigDict(frozen=True)

    benchmark_name: str = "BTC"
    annualization_days: int = Field(default=365, gt=0)
    risk_free_rate: float = 0.0
    min_beta_observations: int = Field(default=5, ge=2)
    weight_tolerance: float = Field(default=1e-4, gt=0.0)
    portfolio_window: WindowPolicy = WindowPolicy(target_window=90, minimum_window=7)
    portfolio_min_constituents: int = Field(default=10, ge=1)
    portfolio_max_snapshots: int | None = Field(default=100, gt=0)
    window_policies: dict[MetricFamily, WindowPolicy] = Field(
        default_factory=lambda: dict(DEFAULT_WINDOW_POLICIES)
    )

    @model_validator(mode="after")
    def _every_family_has_a_policy(self) -> "EngineConfig":
        missing = [f.value for f in MetricFamily if f not in self.window_policies]
        if missing:
            raise ValueError(f"window_policies missing families: {missing}")
        return self

    def policy_for(self, family: MetricFamily) -> WindowPolicy:
        return self.window_policies[family]
