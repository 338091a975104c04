"""Bounded concurrent fan-out over many independent per-item queries.

Repository-wide operations (related files, change summary, branch listing)
run the same git query for every candidate. Running them one by one costs a
full process round trip each; launching them all at once can exhaust file
descriptors on large repositories. fan_out() launches every query as a task
but lets at most `limit` of them hold a git process at a time.

Failures are captured per item and never cancel the rest of the batch. There
are no retries: a failed git invocation is final for that item. Each caller
chooses what a failure means: drop the item, or keep it in a degraded form.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Iterable, TypeVar

from githistory_core.errors import GitHistoryError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class Outcome(Generic[T, R]):
    """The result of one fan-out query, tied back to the input that produced it."""

    item: T
    value: R | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def fan_out(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[R]],
    *,
    limit: int,
) -> list[Outcome[T, R]]:
    """Run worker(item) for every item with at most `limit` running at once.

    Returns one Outcome per input, in input order regardless of which query
    finished first. GitHistoryError and OSError are recorded on the Outcome;
    any other exception is a bug and propagates.
    """
    if limit < 1:
        raise ValueError(f"fan-out limit must be at least 1, got {limit}")

    semaphore = asyncio.Semaphore(limit)

    async def run_one(item: T) -> Outcome[T, R]:
        async with semaphore:
            try:
                return Outcome(item=item, value=await worker(item))
            except (GitHistoryError, OSError) as e:
                logger.debug("Fan-out query for %r failed: %s", item, e)
                return Outcome(item=item, error=e)

    items = list(items)
    if not items:
        return []
    return list(await asyncio.gather(*(run_one(item) for item in items)))


def successful(outcomes: list[Outcome[T, R]]) -> dict[T, R]:
    """Keep only the outcomes that produced a value, keyed by their input."""
    return {o.item: o.value for o in outcomes if o.ok}
