"""Bounded-concurrency fan-out yielding results in completion order."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable, Iterable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

CoroutineFactory = Callable[[], Awaitable[T]]


async def bounded_as_completed(
    factories: Iterable[CoroutineFactory[T]],
    limit: int,
    *,
    return_exceptions: bool = False,
) -> AsyncIterator[T | BaseException]:
    """Run ``factories`` with at most ``limit`` in flight.

    Each factory is only called once a slot is free, so no more than ``limit``
    computations (including their data fetches) are ever pending. Results are
    yielded as soon as they complete. A failing computation raises its error
    when it would have been yielded; results that completed alongside it are
    yielded first. With ``return_exceptions`` the error is yielded instead and
    the remaining computations keep running.

    Tasks still pending when the consumer stops iterating are cancelled.
    """

    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")

    queued = iter(factories)
    pending: set[asyncio.Task] = set()

    def _fill() -> None:
        while len(pending) < limit:
            factory = next(queued, None)
            if factory is None:
                return
            pending.add(asyncio.ensure_future(factory()))

    try:
        _fill()
        while pending:
            done, _ = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            pending.difference_update(done)

            failures = [task for task in done if not task.cancelled() and task.exception() is not None]
            for task in done:
                if task in failures:
                    continue
                yield task.result()

            if failures:
                if not return_exceptions:
                    raise failures[0].exception()  # type: ignore[misc]
                for task in failures:
                    yield task.exception()  # type: ignore[misc]

            _fill()
    finally:
        if pending:
            logger.debug("Cancelling %d pending computations", len(pending))
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


async def run_bounded(
    factories: Iterable[CoroutineFactory[T]],
    limit: int,
) -> list[T]:
    """Collect every result of :func:`bounded_as_completed` in completion order."""

    return [result async for result in bounded_as_completed(factories, limit)]  # type: ignore[misc]


__all__ = ["CoroutineFactory", "bounded_as_completed", "run_bounded"]
