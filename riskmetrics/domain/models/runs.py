"""Aggregate outcome of one batch recompute run."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RunReport:
    """Counters accumulated by a batch job.

    computed     — new records written.
    skipped      — records that already existed (or lost an insert race).
    invalid      — input points excluded by data-quality checks.
    insufficient — windows or snapshots not computed for lack of data.
    errored      — assets or snapshots whose processing raised.
    """

    job: str
    computed: int = 0
    skipped: int = 0
    invalid: int = 0
    insufficient: int = 0
    errored: int = 0
    duration_ms: int = 0

    def summary(self) -> str:
        return (
            f"{self.job}: computed={self.computed} skipped={self.skipped} "
            f"invalid={self.invalid} insufficient={self.insufficient} "
            f"errored={self.errored} duration_ms={self.duration_ms}"
        )

    def add(self, other: "RunReport") -> None:
        """Accumulate another report's counters into this one."""
        self.computed += other.computed
        self.skipped += other.skipped
        self.invalid += other.invalid
        self.insufficient += other.insufficient
        self.errored += other.errored
