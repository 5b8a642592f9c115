from __future__ import annotations

import asyncio

import pytest

from wallet_analytics.services.batch import bounded_as_completed, run_bounded


class InFlightCounter:
    def __init__(self) -> None:
        self.current = 0
        self.peak = 0

    def job(self, value: int, delay: float):
        async def _run() -> int:
            self.current += 1
            self.peak = max(self.peak, self.current)
            try:
                await asyncio.sleep(delay)
                return value
            finally:
                self.current -= 1

        return _run


async def test_five_jobs_with_cap_two():
    counter = InFlightCounter()
    factories = [counter.job(index, 0.01 * (5 - index)) for index in range(5)]
    results = await run_bounded(factories, 2)
    assert sorted(results) == [0, 1, 2, 3, 4]
    assert counter.peak == 2
    assert counter.current == 0


async def test_results_arrive_in_completion_order():
    counter = InFlightCounter()
    factories = [counter.job(0, 0.05), counter.job(1, 0.0), counter.job(2, 0.01)]
    results = [value async for value in bounded_as_completed(factories, 3)]
    assert results == [1, 2, 0]


async def test_empty_and_small_batches_finish():
    assert await run_bounded([], 4) == []
    counter = InFlightCounter()
    assert await run_bounded([counter.job(7, 0)], 10) == [7]


async def test_failure_propagates_after_completed_results():
    counter = InFlightCounter()

    async def boom() -> int:
        await asyncio.sleep(0.02)
        raise RuntimeError("fetch failed")

    factories = [counter.job(1, 0.0), boom, counter.job(2, 0.5)]
    seen = []
    with pytest.raises(RuntimeError, match="fetch failed"):
        async for value in bounded_as_completed(factories, 3):
            seen.append(value)
    assert seen == [1]
    # the slow sibling is cancelled once the consumer stops
    assert counter.current == 0


async def test_return_exceptions_keeps_going():
    counter = InFlightCounter()

    async def boom() -> int:
        raise ValueError("bad wallet")

    results = [value async for value in bounded_as_completed([boom, counter.job(3, 0.01)], 1, return_exceptions=True)]
    assert isinstance(results[0], ValueError)
    assert results[1] == 3


async def test_limit_must_be_positive():
    with pytest.raises(ValueError):
        async for _ in bounded_as_completed([], 0):
            pass
