"""Domain models for wallets, movements and the asset classes they hold."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Sequence


class AssetClass(str, Enum):
    BRL_PRIVATE_BOND = "brl_private_bond"
    BRL_PUBLIC_BOND = "brl_public_bond"
    SEFBFR = "sefbfr"


class DoneState(str, Enum):
    ACTIVE = "active"
    DONE = "done"
    TRANSFERED = "transfered"


class PrivateBondType(str, Enum):
    LCA = "LCA"
    LCI = "LCI"
    CDB = "CDB"


class PublicBondType(str, Enum):
    LTN = "LTN"
    LFT = "LFT"


class InterestType(str, Enum):
    FIXED = "fixed"
    VARIABLE = "variable"


class IndexType(str, Enum):
    AA = "aa"
    CDI_PERC = "cdi_perc"
    SELIC_PLUS_PERC = "selic_plus_perc"


class MovementType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


@dataclass(frozen=True)
class WalletMovement:
    """A deposit or withdrawal against a wallet.

    ``result_amount`` is stored positive for both types; withdrawals count
    negatively towards the wallet balance (see :meth:`signed_amount`).
    """

    id: str
    wallet_id: str
    movement_type: MovementType
    date_utc: datetime
    result_amount: Decimal
    result_currency_code: str = "BRL"
    institution: str | None = None

    def signed_amount(self) -> Decimal:
        if self.movement_type == MovementType.DEPOSIT:
            return self.result_amount
        return -abs(self.result_amount)


@dataclass(frozen=True)
class Wallet:
    id: str
    user_id: str
    name: str
    currency_code: str
    created_at: datetime
    updated_at: datetime | None = None
    movements: Sequence[WalletMovement] = field(default_factory=tuple)


@dataclass(frozen=True)
class PrivateBond:
    """A fixed or variable rate private bond (LCA/LCI/CDB).

    The record carries its own terminal figures: ``gross_amount`` once the bond
    exits, ``fees`` and ``taxes`` as non-positive numbers.
    """

    id: str
    wallet_id: str
    name: str
    bond_type: PrivateBondType
    interest_type: InterestType
    index_type: IndexType
    index_value: Decimal
    maturity_date_utc: datetime
    enter_date_utc: datetime
    input_amount: Decimal
    exit_date_utc: datetime | None = None
    gross_amount: Decimal | None = None
    fees: Decimal | None = None
    taxes: Decimal | None = None
    holder_institution: str | None = None
    emitter_institution: str | None = None

    @property
    def is_done(self) -> bool:
        return self.exit_date_utc is not None


@dataclass(frozen=True)
class PublicBond:
    id: str
    wallet_id: str
    name: str
    is_done: bool
    bond_type: PublicBondType
    interest_type: InterestType
    index_type: IndexType
    maturity_date_utc: datetime
    holder_institution: str | None = None


@dataclass(frozen=True)
class EquityAsset:
    """A free-form equity-like instrument (stocks, ETFs, BDRs, FIIs...)."""

    id: str
    wallet_id: str
    name: str
    done_state: DoneState = DoneState.ACTIVE
    holder_institution: str | None = None

    @property
    def is_done(self) -> bool:
        return self.done_state != DoneState.ACTIVE


__all__ = [
    "AssetClass",
    "DoneState",
    "EquityAsset",
    "IndexType",
    "InterestType",
    "MovementType",
    "PrivateBond",
    "PrivateBondType",
    "PublicBond",
    "PublicBondType",
    "Wallet",
    "WalletMovement",
]
