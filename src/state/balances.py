"""
Multi-asset custody ledger with deterministic ordering.

Implements AssetLedger[Address, AssetId] -> Amount, the in-memory asset
custody the pair engine observes through `balance_of` and moves funds with
through `transfer`.
"""

from typing import Dict, Tuple


# Type aliases
Address = str  # 20-byte hex string (0x...)
AssetId = str  # asset contract address, same encoding as Address
Amount = int  # Non-negative integer (arbitrary precision)

# Null sentinel for unset asset ids and the locked-share sink
NULL_ADDRESS = "0x" + "00" * 20


class AssetLedger:
    """
    Balance table mapping (holder, asset) -> amount.

    `transfer` follows the token convention of reporting failure through its
    return value instead of raising; the custody adapter turns a falsy or
    non-bool result into `TransferFailedError`.
    """

    def __init__(self):
        """Initialize empty ledger."""
        self._balances: Dict[Tuple[Address, AssetId], Amount] = {}

    def balance_of(self, asset: AssetId, holder: Address) -> Amount:
        """Get balance for (holder, asset). Returns 0 if not found."""
        return self._balances.get((holder, asset), 0)

    def set(self, holder: Address, asset: AssetId, amount: Amount) -> None:
        """
        Set balance for (holder, asset).

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            # Remove zero balances to keep table sparse
            self._balances.pop((holder, asset), None)
        else:
            self._balances[(holder, asset)] = amount

    def credit(self, holder: Address, asset: AssetId, amount: Amount) -> None:
        """Create `amount` of `asset` out of thin air for `holder` (funding helper)."""
        if amount < 0:
            raise ValueError(f"Credit must be non-negative: {amount}")
        self.set(holder, asset, self.balance_of(asset, holder) + amount)

    def transfer(self, asset: AssetId, sender: Address, to: Address, amount: Amount) -> bool:
        """
        Move `amount` of `asset` from `sender` to `to`.

        Returns:
            True on success, False if the sender's balance is insufficient
        """
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative: {amount}")
        available = self.balance_of(asset, sender)
        if available < amount:
            return False
        self.set(sender, asset, available - amount)
        self.set(to, asset, self.balance_of(asset, to) + amount)
        return True

    def get_all_balances(self) -> Dict[Tuple[Address, AssetId], Amount]:
        """
        Get all balances as a dictionary.

        Returns:
            Dictionary mapping (holder, asset) -> amount
        """
        return dict(self._balances)

    def total_supply(self, asset: AssetId) -> Amount:
        """Sum of every holder's balance of `asset`."""
        return sum(amount for (_, a), amount in self._balances.items() if a == asset)

    def __repr__(self) -> str:
        return f"AssetLedger({len(self._balances)} entries)"
