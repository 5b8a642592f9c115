import asyncio
import inspect
import pathlib
import sys
from datetime import datetime, timezone
from decimal import Decimal

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from wallet_analytics.models import (  # noqa: E402
    DoneState,
    EquityAsset,
    IndexType,
    InterestType,
    MovementType,
    PrivateBond,
    PrivateBondType,
    PublicBond,
    PublicBondType,
    TransactionRecord,
    TransactionType,
    Wallet,
    WalletMovement,
)
from wallet_analytics.services.repository import InMemoryRepository  # noqa: E402

USER_ID = "user-1"


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the suite."""

    config.addinivalue_line("markers", "asyncio: mark test as running in an asyncio event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            loop.run_until_complete(test_function(**pyfuncitem.funcargs))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None


def _at(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


def build_main_wallet() -> Wallet:
    return Wallet(
        id="w-main",
        user_id=USER_ID,
        name="Main",
        currency_code="BRL",
        created_at=_at(2024, 1, 1),
        updated_at=_at(2024, 6, 1),
        movements=(
            WalletMovement("m-2", "w-main", MovementType.WITHDRAW, _at(2024, 5, 1), Decimal("1000")),
            WalletMovement("m-1", "w-main", MovementType.DEPOSIT, _at(2024, 1, 2), Decimal("10000")),
        ),
    )


def build_old_wallet() -> Wallet:
    return Wallet(
        id="w-old",
        user_id=USER_ID,
        name="Old",
        currency_code="BRL",
        created_at=_at(2023, 6, 1),
        updated_at=_at(2024, 2, 1),
        movements=(
            WalletMovement("m-3", "w-old", MovementType.DEPOSIT, _at(2024, 1, 5), Decimal("500")),
        ),
    )


@pytest.fixture
def sample_repository() -> InMemoryRepository:
    """Two wallets; the main one holds a winning and a losing equity, a bond and an open public bond."""

    equities = [
        EquityAsset("eq-1", "w-main", "ACME3", DoneState.DONE),
        EquityAsset("eq-2", "w-main", "BETA4", DoneState.TRANSFERED),
    ]
    private_bonds = [
        PrivateBond(
            id="pb-1",
            wallet_id="w-main",
            name="CDB Bank",
            bond_type=PrivateBondType.CDB,
            interest_type=InterestType.VARIABLE,
            index_type=IndexType.CDI_PERC,
            index_value=Decimal("1.1"),
            maturity_date_utc=_at(2026, 1, 1),
            enter_date_utc=_at(2024, 2, 1),
            input_amount=Decimal("2000"),
            exit_date_utc=_at(2024, 4, 1),
            gross_amount=Decimal("1900"),
            fees=Decimal("-10"),
        )
    ]
    public_bonds = [
        PublicBond(
            id="pu-1",
            wallet_id="w-main",
            name="Tesouro Selic",
            is_done=False,
            bond_type=PublicBondType.LFT,
            interest_type=InterestType.VARIABLE,
            index_type=IndexType.SELIC_PLUS_PERC,
            maturity_date_utc=_at(2029, 3, 1),
        )
    ]
    transactions = [
        TransactionRecord(
            "eq-1", TransactionType.BUY, _at(2024, 1, 10),
            shares_amount=Decimal("10"), price_quote=Decimal("100"), costs=Decimal("-5"),
        ),
        TransactionRecord(
            "eq-1", TransactionType.SELL, _at(2024, 3, 10),
            shares_amount=Decimal("-10"), price_quote=Decimal("120"),
        ),
        TransactionRecord(
            "eq-2", TransactionType.BUY, _at(2024, 2, 15),
            shares_amount=Decimal("5"), price_quote=Decimal("50"), costs=Decimal("-2"),
        ),
        TransactionRecord("eq-2", TransactionType.TRANSFER, _at(2024, 3, 20), shares_amount=Decimal("-5")),
        TransactionRecord(
            "pu-1", TransactionType.BUY, _at(2024, 4, 15),
            shares_amount=Decimal("2"), price_quote=Decimal("1000"),
        ),
    ]
    return InMemoryRepository(
        wallets=[build_main_wallet(), build_old_wallet()],
        private_bonds=private_bonds,
        public_bonds=public_bonds,
        equity_assets=equities,
        transactions=transactions,
    )
