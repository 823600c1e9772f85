"""Domain enumerations for the risk metrics engine.

String-valued enums use the str mixin so they serialize cleanly and stay
comparable to plain strings (CLI arguments, stored labels).
"""

from enum import Enum


class MetricFamily(str, Enum):
    """Per-asset rolling statistic families produced by the batch jobs."""

    VOLATILITY = "volatility"
    VAR = "var"
    DISTRIBUTION = "distribution"
    BETA = "beta"
    SML = "sml"

    @property
    def needs_benchmark(self) -> bool:
        """True when the family is computed against the benchmark series."""
        return self in (MetricFamily.BETA, MetricFamily.SML)


class VarianceConvention(str, Enum):
    """Divisor convention for variance.

    Within-asset volatility uses POPULATION (divide by n); covariance and
    beta use SAMPLE (divide by n - 1).  Callers always pick one explicitly.
    """

    POPULATION = "population"
    SAMPLE = "sample"

    @property
    def ddof(self) -> int:
        return {
            VarianceConvention.POPULATION: 0,
            VarianceConvention.SAMPLE: 1,
        }[self]
