"""Rolling-window scanner.

Given a date-ordered series and a WindowPolicy, yields the windows for
which a statistic should exist: one per date from the minimum_window-th
observation onwards, growing until it reaches target_window and rolling
from then on.
"""

from __future__ import annotations

from collections.abc import Collection, Iterator, Sequence
from dataclasses import dataclass
from datetime import date

from riskmetrics.domain.models.windows import WindowPolicy


@dataclass(frozen=True)
class WindowSlice:
    """Half-open index range [start, stop) ending at stat_date.

    window_days == stop - start is the effective window.  already_exists is
    True when a statistic with key (stat_date, window_days) is stored.
    """

    stat_date: date
    window_days: int
    start: int
    stop: int
    already_exists: bool = False

    @property
    def key(self) -> tuple[date, int]:
        return (self.stat_date, self.window_days)


class RollingWindowScanner:
    """Enumerates growing/rolling windows over an ordered date series.

    The class is stateless; the policy and existing keys are passed per call.
    """

    def scan(
        self,
        dates: Sequence[date],
        policy: WindowPolicy,
        existing_keys: Collection[tuple[date, int]] = frozenset(),
    ) -> Iterator[WindowSlice]:
        """Yield one WindowSlice per eligible end date, oldest first.

        For the i-th observation (0-based) with i + 1 >= minimum_window the
        window is min(i + 1, target_window) and covers the observations
        ending at i.  Series shorter than minimum_window yield nothing.
        """
        for i in range(policy.minimum_window - 1, len(dates)):
            effective = policy.effective_window(i + 1)
            stat_date = dates[i]
            yield WindowSlice(
                stat_date=stat_date,
                window_days=effective,
                start=i + 1 - effective,
                stop=i + 1,
                already_exists=(stat_date, effective) in existing_keys,
            )

    def common_window(self, available: Sequence[int], policy: WindowPolicy) -> int | None:
        """Window shared by several series: min(target, shortest series).

        Returns None when no series is given or the shortest one is below
        the policy minimum.
        """
        if not available:
            return None
        shortest = min(available)
        if shortest < policy.minimum_window:
            return None
        return policy.effective_window(shortest)
