"""
Collaborator capabilities consumed by the pair engine.

The pair never touches balances directly: it observes custody through
`balance_of`, pays out through `safe_transfer`, and issues shares through a
share ledger. Implementations that also expose `snapshot()` / `restore()` are
rolled back together with the pair when an operation fails.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ..state.balances import Address, Amount, AssetId


@runtime_checkable
class CustodyLike(Protocol):
    def balance_of(self, asset: AssetId, holder: Address) -> Amount: ...

    def safe_transfer(self, asset: AssetId, to: Address, amount: Amount) -> None: ...


@runtime_checkable
class ShareLedgerLike(Protocol):
    def mint_shares(self, owner: Address, amount: Amount) -> None: ...

    def burn_shares(self, owner: Address, amount: Amount) -> None: ...

    def total_shares(self) -> Amount: ...

    def share_balance(self, owner: Address) -> Amount: ...


@runtime_checkable
class Journaled(Protocol):
    def snapshot(self) -> Any: ...

    def restore(self, snapshot: Any) -> None: ...
