"""Engine settings loaded from the environment (prefix RISKMETRICS_) or .env.

The database URL lives with the engine in riskmetrics.infrastructure.database;
everything here is turned into an immutable EngineConfig that is passed
explicitly into the services.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from riskmetrics.domain.models.enums import MetricFamily
from riskmetrics.domain.models.windows import EngineConfig, WindowPolicy


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RISKMETRICS_", env_file=".env", extra="ignore")

    benchmark_name: str = "BTC"
    annualization_days: int = Field(default=365, gt=0)
    risk_free_rate: float = 0.0
    minimum_window: int = Field(default=7, gt=0)

    volatility_window: int = 90
    var_window: int = 365
    beta_window: int = 365
    distribution_window: int = 90
    sml_window: int = 90

    portfolio_target_window: int = 90
    portfolio_min_constituents: int = 10
    portfolio_max_snapshots: int | None = 100
    weight_tolerance: float = 1e-4
    min_beta_observations: int = 5

    log_level: str = "INFO"

    def engine_config(self) -> EngineConfig:
        def policy(target: int) -> WindowPolicy:
            return WindowPolicy(target_window=target, minimum_window=self.minimum_window)

        return EngineConfig(
            benchmark_name=self.benchmark_name,
            annualization_days=self.annualization_days,
            risk_free_rate=self.risk_free_rate,
            min_beta_observations=self.min_beta_observations,
            weight_tolerance=self.weight_tolerance,
            portfolio_window=policy(self.portfolio_target_window),
            portfolio_min_constituents=self.portfolio_min_constituents,
            portfolio_max_snapshots=self.portfolio_max_snapshots,
            window_policies={
                MetricFamily.VOLATILITY: policy(self.volatility_window),
                MetricFamily.VAR: policy(self.var_window),
                MetricFamily.BETA: policy(self.beta_window),
                MetricFamily.DISTRIBUTION: policy(self.distribution_window),
                MetricFamily.SML: policy(self.sml_window),
            },
        )
