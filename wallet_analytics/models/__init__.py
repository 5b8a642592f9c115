"""Domain models consumed and produced by the analytics engine."""

from .assets import (
    AssetClass,
    DoneState,
    EquityAsset,
    IndexType,
    InterestType,
    MovementType,
    PrivateBond,
    PrivateBondType,
    PublicBond,
    PublicBondType,
    Wallet,
    WalletMovement,
)
from .performance import PerformanceResult, TrendDirection, sort_by_latest_date
from .transactions import TransactionRecord, TransactionType, parse_transaction

__all__ = [
    "AssetClass",
    "DoneState",
    "EquityAsset",
    "IndexType",
    "InterestType",
    "MovementType",
    "PerformanceResult",
    "PrivateBond",
    "PrivateBondType",
    "PublicBond",
    "PublicBondType",
    "TransactionRecord",
    "TransactionType",
    "TrendDirection",
    "Wallet",
    "WalletMovement",
    "parse_transaction",
    "sort_by_latest_date",
]
