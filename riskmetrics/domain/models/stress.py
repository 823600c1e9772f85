"""Beta-driven stress scenarios.

StressScenario — a named market-wide shock (e.g. -0.25 = market falls 25 %).
StressResult   — the projected effect of that shock on one asset, given its
                 beta and current price.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class StressScenario(BaseModel):
    """A named proportional shock applied to the benchmark."""

    model_config = ConfigDict(frozen=True)

    name: str
    market_shock: float = Field(ge=-1.0)

    @classmethod
    def mild(cls) -> StressScenario:
        return cls(name="Mild", market_shock=-0.10)

    @classmethod
    def moderate(cls) -> StressScenario:
        return cls(name="Moderate", market_shock=-0.25)

    @classmethod
    def severe(cls) -> StressScenario:
        return cls(name="Severe", market_shock=-0.50)

    @classmethod
    def defaults(cls) -> list[StressScenario]:
        return [cls.mild(), cls.moderate(), cls.severe()]


class StressResult(BaseModel):
    """Projected asset move under a scenario.

    expected_impact = beta * market_shock
    new_price       = current_price * (1 + expected_impact)
    price_change    = new_price - current_price
    """

    model_config = ConfigDict(frozen=True)

    name: str
    market_shock: float
    expected_impact: float
    new_price: float
    price_change: float
