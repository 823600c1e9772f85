"""Two-tier lookup: prefer a stored statistic, otherwise compute one transiently."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class LookupResult(Generic[T]):
    """value is None when neither tier could produce a statistic.

    from_store tells the caller whether the value is a persisted record or
    a transient computation that was not saved.
    """

    value: T | None
    from_store: bool


async def resolve_statistic(
    stored: T | None,
    compute: Callable[[], Awaitable[T | None]],
) -> LookupResult[T]:
    """Return stored when present; otherwise await compute() without persisting."""
    if stored is not None:
        return LookupResult(value=stored, from_store=True)
    return LookupResult(value=await compute(), from_store=False)
