"""
Asset custody adapter for the in-memory ledger.
"""

from __future__ import annotations

from typing import Any, List, Optional, Protocol, Tuple

from ..core.errors import PoolError, TransferFailedError
from ..state.balances import Address, Amount, AssetId, AssetLedger

# (asset, to, amount) of one completed outgoing transfer
TransferRecord = Tuple[AssetId, Address, Amount]


class TransferFn(Protocol):
    def __call__(self, asset: AssetId, sender: Address, to: Address, amount: Amount) -> Any: ...


class LedgerCustody:
    """
    Custody capability for one pair, backed by an `AssetLedger`.

    `safe_transfer` only accepts a literal `True` from the underlying transfer;
    `False`, `None` or any other value counts as failure, and so does a
    non-pool exception raised by the transfer itself. Pool errors raised from
    inside the transfer (e.g. a re-entrant call hitting the pair lock) pass
    through unchanged.

    The ledger is shared by every pair in a registry, so rollback never
    restores the whole table. `snapshot()` opens a journal of this custody's
    own outgoing transfers and `restore()` reverses exactly those, leaving
    writes by other pairs and other holders alone.
    """

    def __init__(self, ledger: AssetLedger, holder: Address, *, transfer: Optional[TransferFn] = None) -> None:
        self.ledger = ledger
        self.holder = holder
        self._transfer = transfer if transfer is not None else ledger.transfer
        self._journal: List[TransferRecord] = []

    def balance_of(self, asset: AssetId, holder: Address) -> Amount:
        return self.ledger.balance_of(asset, holder)

    def safe_transfer(self, asset: AssetId, to: Address, amount: Amount) -> None:
        try:
            result = self._transfer(asset, self.holder, to, amount)
        except PoolError:
            raise
        except Exception as exc:
            raise TransferFailedError(f"transfer of {amount} {asset} to {to} raised: {exc}") from exc
        if result is not True:
            raise TransferFailedError(f"transfer of {amount} {asset} to {to} returned {result!r}")
        self._journal.append((asset, to, amount))

    def snapshot(self) -> List[TransferRecord]:
        self._journal = []
        return self._journal

    def restore(self, journal: List[TransferRecord]) -> None:
        for asset, to, amount in reversed(journal):
            # Undo through the ledger directly; the custom transfer may be the thing that failed.
            if not self.ledger.transfer(asset, to, self.holder, amount):
                raise TransferFailedError(f"cannot reclaim {amount} {asset} from {to}: already spent")
        journal.clear()
