"""Weighted-average cost basis as a pure fold over transaction events.

``advance(state, event)`` never mutates ``state``; it returns the state after
the event. Only acquisitions and corporate actions move the average price,
disposals keep it and shrink the total cost proportionally.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal, getcontext
from functools import reduce
from typing import Iterable

from wallet_analytics.models.transactions import (
    BonusShare,
    Buy,
    Dividend,
    Inplit,
    Sell,
    Split,
    TransactionEvent,
    TransferIn,
    TransferOut,
)

getcontext().prec = 28

ZERO = Decimal("0")


def average_price(total_cost: Decimal, shares: Decimal) -> Decimal:
    """Return ``total_cost / shares``, or zero unless shares are held."""

    if shares <= 0:
        return ZERO
    return total_cost / shares


@dataclass(frozen=True)
class RunningCostState:
    shares_outstanding: Decimal = ZERO
    total_cost_value: Decimal = ZERO
    average_price: Decimal = ZERO


def _buy(state: RunningCostState, event: Buy) -> RunningCostState:
    shares = state.shares_outstanding + event.shares
    cost = state.total_cost_value + event.shares * event.price + event.costs
    return RunningCostState(shares, cost, average_price(cost, shares))


def _dispose(state: RunningCostState, shares_delta: Decimal) -> RunningCostState:
    shares = state.shares_outstanding + shares_delta
    return replace(state, shares_outstanding=shares, total_cost_value=shares * state.average_price)


def _transfer_in(state: RunningCostState, event: TransferIn) -> RunningCostState:
    cost = state.total_cost_value + event.shares * event.close_price
    shares = state.shares_outstanding + event.shares
    return RunningCostState(shares, cost, average_price(cost, shares))


def _bonus_share(state: RunningCostState, event: BonusShare) -> RunningCostState:
    # Bonus shares dilute the average; total cost stays untouched
    shares = state.shares_outstanding + state.shares_outstanding * event.factor
    return replace(
        state,
        shares_outstanding=shares,
        average_price=average_price(state.total_cost_value, shares),
    )


def _split(state: RunningCostState, event: Split) -> RunningCostState:
    return replace(
        state,
        shares_outstanding=state.shares_outstanding * event.factor,
        average_price=state.average_price / event.factor,
    )


def _inplit(state: RunningCostState, event: Inplit) -> RunningCostState:
    return replace(
        state,
        shares_outstanding=state.shares_outstanding / event.factor,
        average_price=state.average_price * event.factor,
    )


def advance(state: RunningCostState, event: TransactionEvent) -> RunningCostState:
    """Return the running cost state after applying ``event``."""

    if isinstance(event, Buy):
        return _buy(state, event)
    if isinstance(event, (Sell, TransferOut)):
        return _dispose(state, event.shares)
    if isinstance(event, TransferIn):
        return _transfer_in(state, event)
    if isinstance(event, BonusShare):
        return _bonus_share(state, event)
    if isinstance(event, Split):
        return _split(state, event)
    if isinstance(event, Inplit):
        return _inplit(state, event)
    if isinstance(event, Dividend):
        return state
    raise TypeError(f"Unsupported transaction event: {type(event).__name__}")


def replay(events: Iterable[TransactionEvent], initial: RunningCostState | None = None) -> RunningCostState:
    """Fold ``events`` in order starting from ``initial`` (empty by default)."""

    return reduce(advance, events, initial or RunningCostState())


__all__ = ["RunningCostState", "advance", "average_price", "replay"]
