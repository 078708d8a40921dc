"""Bounded concurrent fan-out for classification calls."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

_T = TypeVar("_T")
_R = TypeVar("_R")

DEFAULT_CONCURRENCY = 5


class _NotAdmitted(Exception):
    """A queued call skipped because an earlier call failed."""


async def run_bounded(
    items: Iterable[_T],
    fn: Callable[[_T], Awaitable[_R]],
    limit: int = DEFAULT_CONCURRENCY,
) -> list[_R]:
    """Run ``fn(item)`` for every item with at most *limit* calls in flight.

    A new call is admitted as soon as any in-flight call finishes (rolling
    window, not batches). Results are returned in submission order.

    Dispatched calls are never cancelled. After the first failure no further
    calls are admitted; in-flight calls run to completion and the first
    failure is then re-raised.
    """
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")

    semaphore = asyncio.Semaphore(limit)
    failed = asyncio.Event()

    async def _run(item: _T) -> _R:
        async with semaphore:
            if failed.is_set():
                raise _NotAdmitted
            try:
                return await fn(item)
            except Exception:
                failed.set()
                raise

    tasks = [asyncio.create_task(_run(item)) for item in items]
    outcomes = await asyncio.gather(*tasks, return_exceptions=True)

    results: list[_R] = []
    for outcome in outcomes:
        if isinstance(outcome, _NotAdmitted):
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        results.append(outcome)
    return results
