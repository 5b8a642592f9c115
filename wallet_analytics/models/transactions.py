"""Transaction records and the tagged events derived from them.

The data layer hands over flat :class:`TransactionRecord` rows (one shape for
every transaction type, optional fields left empty). :func:`parse_transaction`
turns a row into exactly one frozen event variant, checking that the fields
its type requires are present. Reducers only ever see events.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Callable, Union, cast

from wallet_analytics.core.exceptions import MalformedTransactionError

ZERO = Decimal("0")


class TransactionType(str, Enum):
    BUY = "buy"
    SELL = "sell"
    TRANSFER = "transfer"
    BONUS_SHARE = "bonus_share"
    SPLIT = "split"
    INPLIT = "inplit"
    DIVIDEND = "dividend"


EQUITY_TRANSACTION_TYPES = frozenset(TransactionType)
BOND_TRANSACTION_TYPES = frozenset({TransactionType.BUY, TransactionType.SELL})


@dataclass(frozen=True)
class TransactionRecord:
    """A transaction row as stored, before validation.

    ``price_quote`` is the unit price for buys and sells and the previous-day
    close price for incoming transfers. ``costs`` and ``taxes`` are stored
    non-positive.
    """

    asset_id: str
    type: TransactionType
    date_utc: datetime
    shares_amount: Decimal | None = None
    price_quote: Decimal | None = None
    costs: Decimal | None = None
    taxes: Decimal | None = None
    value: Decimal | None = None
    factor: Decimal | None = None


@dataclass(frozen=True)
class Buy:
    date_utc: datetime
    shares: Decimal
    price: Decimal
    costs: Decimal = ZERO


@dataclass(frozen=True)
class Sell:
    date_utc: datetime
    shares: Decimal  # always negative
    price: Decimal
    costs: Decimal = ZERO
    taxes: Decimal = ZERO


@dataclass(frozen=True)
class TransferOut:
    date_utc: datetime
    shares: Decimal  # negative


@dataclass(frozen=True)
class TransferIn:
    date_utc: datetime
    shares: Decimal
    close_price: Decimal


@dataclass(frozen=True)
class BonusShare:
    date_utc: datetime
    factor: Decimal
    value: Decimal | None = None


@dataclass(frozen=True)
class Split:
    date_utc: datetime
    factor: Decimal


@dataclass(frozen=True)
class Inplit:
    date_utc: datetime
    factor: Decimal


@dataclass(frozen=True)
class Dividend:
    date_utc: datetime
    value: Decimal
    costs: Decimal = ZERO
    taxes: Decimal = ZERO


TransactionEvent = Union[Buy, Sell, TransferOut, TransferIn, BonusShare, Split, Inplit, Dividend]


def _require(record: TransactionRecord, *names: str) -> None:
    missing = [name for name in names if getattr(record, name) is None]
    if missing:
        raise MalformedTransactionError(
            record,
            f"{record.type.value} transaction is missing {', '.join(missing)}",
        )


def _require_positive_factor(record: TransactionRecord) -> Decimal:
    _require(record, "factor")
    factor = cast(Decimal, record.factor)
    if factor <= 0:
        raise MalformedTransactionError(
            record, f"{record.type.value} factor must be positive, got {factor}"
        )
    return factor


def _parse_buy(record: TransactionRecord) -> Buy:
    _require(record, "shares_amount", "price_quote")
    return Buy(
        date_utc=record.date_utc,
        shares=record.shares_amount,  # type: ignore[arg-type]
        price=record.price_quote,  # type: ignore[arg-type]
        costs=record.costs or ZERO,
    )


def _parse_sell(record: TransactionRecord) -> Sell:
    _require(record, "shares_amount", "price_quote")
    return Sell(
        date_utc=record.date_utc,
        shares=-abs(record.shares_amount),  # type: ignore[arg-type]
        price=record.price_quote,  # type: ignore[arg-type]
        costs=record.costs or ZERO,
        taxes=record.taxes or ZERO,
    )


def _parse_transfer(record: TransactionRecord) -> TransferOut | TransferIn:
    _require(record, "shares_amount")
    shares = cast(Decimal, record.shares_amount)
    if shares < 0:
        return TransferOut(date_utc=record.date_utc, shares=shares)
    if record.price_quote is None:
        raise MalformedTransactionError(record, "incoming transfer has no close price quote")
    return TransferIn(date_utc=record.date_utc, shares=shares, close_price=record.price_quote)


def _parse_bonus_share(record: TransactionRecord) -> BonusShare:
    factor = _require_positive_factor(record)
    return BonusShare(date_utc=record.date_utc, factor=factor, value=record.value)


def _parse_split(record: TransactionRecord) -> Split:
    return Split(date_utc=record.date_utc, factor=_require_positive_factor(record))


def _parse_inplit(record: TransactionRecord) -> Inplit:
    return Inplit(date_utc=record.date_utc, factor=_require_positive_factor(record))


def _parse_dividend(record: TransactionRecord) -> Dividend:
    _require(record, "value")
    return Dividend(
        date_utc=record.date_utc,
        value=record.value,  # type: ignore[arg-type]
        costs=record.costs or ZERO,
        taxes=record.taxes or ZERO,
    )


_PARSERS: dict[TransactionType, Callable[[TransactionRecord], TransactionEvent]] = {
    TransactionType.BUY: _parse_buy,
    TransactionType.SELL: _parse_sell,
    TransactionType.TRANSFER: _parse_transfer,
    TransactionType.BONUS_SHARE: _parse_bonus_share,
    TransactionType.SPLIT: _parse_split,
    TransactionType.INPLIT: _parse_inplit,
    TransactionType.DIVIDEND: _parse_dividend,
}


def parse_transaction(
    record: TransactionRecord,
    allowed_types: frozenset[TransactionType] = EQUITY_TRANSACTION_TYPES,
) -> TransactionEvent:
    """Validate ``record`` and return its event variant.

    Raises :class:`MalformedTransactionError` when a type-required field is
    missing, a factor is not positive, or the type is not valid for the asset
    class.
    """

    if record.type not in allowed_types:
        raise MalformedTransactionError(record, f"{record.type.value} is not valid for this asset class")
    return _PARSERS[record.type](record)


__all__ = [
    "BOND_TRANSACTION_TYPES",
    "BonusShare",
    "Buy",
    "Dividend",
    "EQUITY_TRANSACTION_TYPES",
    "Inplit",
    "Sell",
    "Split",
    "TransactionEvent",
    "TransactionRecord",
    "TransactionType",
    "TransferIn",
    "TransferOut",
    "parse_transaction",
]
