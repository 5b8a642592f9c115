"""Data-access contract consumed by the analytics engine.

Storage lives outside this package. Anything that can hand back wallets,
assets and their transaction records satisfies :class:`AnalyticsRepository`;
:class:`InMemoryRepository` is the reference implementation used by tests and
by callers that already hold the data in memory.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Iterable, Protocol, Sequence, TypeVar

from wallet_analytics.models import (
    EquityAsset,
    PrivateBond,
    PublicBond,
    TransactionRecord,
    Wallet,
)

AssetT = TypeVar("AssetT", EquityAsset, PublicBond)


@dataclass(frozen=True)
class AssetTransactions(Generic[AssetT]):
    asset: AssetT
    transactions: Sequence[TransactionRecord]


class AnalyticsRepository(Protocol):
    """Async lookups the engine performs; each may suspend on I/O."""

    async def list_wallets(self, user_id: str) -> list[Wallet]:
        ...

    async def list_private_bonds(
        self, wallet_id: str | None = None, bond_id: str | None = None
    ) -> list[PrivateBond]:
        ...

    async def list_public_bonds(
        self, wallet_id: str | None = None, bond_id: str | None = None
    ) -> list[AssetTransactions[PublicBond]]:
        ...

    async def list_equity_assets(
        self, wallet_id: str | None = None, asset_id: str | None = None
    ) -> list[AssetTransactions[EquityAsset]]:
        ...


class InMemoryRepository:
    """Simple repository for tests and embedding."""

    def __init__(
        self,
        wallets: Iterable[Wallet] = (),
        private_bonds: Iterable[PrivateBond] = (),
        public_bonds: Iterable[PublicBond] = (),
        equity_assets: Iterable[EquityAsset] = (),
        transactions: Iterable[TransactionRecord] = (),
    ):
        self._wallets = list(wallets)
        self._private_bonds = list(private_bonds)
        self._public_bonds = list(public_bonds)
        self._equity_assets = list(equity_assets)
        self._transactions: dict[str, list[TransactionRecord]] = {}
        for record in transactions:
            self._transactions.setdefault(record.asset_id, []).append(record)

    def _records_for(self, asset_id: str) -> list[TransactionRecord]:
        return sorted(self._transactions.get(asset_id, []), key=lambda r: r.date_utc)

    async def list_wallets(self, user_id: str) -> list[Wallet]:
        return [wallet for wallet in self._wallets if wallet.user_id == user_id]

    async def list_private_bonds(
        self, wallet_id: str | None = None, bond_id: str | None = None
    ) -> list[PrivateBond]:
        selected = [
            bond
            for bond in self._private_bonds
            if (bond_id is None or bond.id == bond_id)
            and (wallet_id is None or bond.wallet_id == wallet_id)
        ]
        return sorted(selected, key=lambda b: b.enter_date_utc)

    async def list_public_bonds(
        self, wallet_id: str | None = None, bond_id: str | None = None
    ) -> list[AssetTransactions[PublicBond]]:
        return [
            AssetTransactions(bond, self._records_for(bond.id))
            for bond in self._public_bonds
            if (bond_id is None or bond.id == bond_id)
            and (wallet_id is None or bond.wallet_id == wallet_id)
        ]

    async def list_equity_assets(
        self, wallet_id: str | None = None, asset_id: str | None = None
    ) -> list[AssetTransactions[EquityAsset]]:
        return [
            AssetTransactions(asset, self._records_for(asset.id))
            for asset in self._equity_assets
            if (asset_id is None or asset.id == asset_id)
            and (wallet_id is None or asset.wallet_id == wallet_id)
        ]


__all__ = ["AnalyticsRepository", "AssetTransactions", "InMemoryRepository"]
