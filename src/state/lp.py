"""
Pool-share balance tracking.

Shares are scoped to a single pair: each `Pair` owns one `ShareLedger`.
"""

from __future__ import annotations

from typing import Dict, Tuple

from .balances import Address, Amount


class ShareLedger:
    """
    Share balance table mapping owner -> share amount, plus allowances.

    Notes:
    - Share balances are always non-negative.
    - Zero balances are omitted to keep the table sparse.
    - `total_shares()` always equals the sum of all balances.
    """

    def __init__(self) -> None:
        self._balances: Dict[Address, Amount] = {}
        self._allowances: Dict[Tuple[Address, Address], Amount] = {}
        self._total: Amount = 0

    def share_balance(self, owner: Address) -> Amount:
        """Get share balance for `owner`. Returns 0 if not found."""
        return self._balances.get(owner, 0)

    def total_shares(self) -> Amount:
        return self._total

    def _set(self, owner: Address, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Share balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop(owner, None)
        else:
            self._balances[owner] = amount

    def mint_shares(self, owner: Address, amount: Amount) -> None:
        """Issue `amount` new shares to `owner`."""
        if amount < 0:
            raise ValueError(f"Mint amount must be non-negative: {amount}")
        self._set(owner, self.share_balance(owner) + amount)
        self._total += amount

    def burn_shares(self, owner: Address, amount: Amount) -> None:
        """Destroy `amount` of `owner`'s shares."""
        if amount < 0:
            raise ValueError(f"Burn amount must be non-negative: {amount}")
        current = self.share_balance(owner)
        if current < amount:
            raise ValueError(f"Insufficient share balance: {current} < {amount}")
        self._set(owner, current - amount)
        self._total -= amount

    def transfer(self, sender: Address, to: Address, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative: {amount}")
        current = self.share_balance(sender)
        if current < amount:
            raise ValueError(f"Insufficient share balance: {current} < {amount}")
        self._set(sender, current - amount)
        self._set(to, self.share_balance(to) + amount)

    def approve(self, owner: Address, spender: Address, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Allowance must be non-negative: {amount}")
        if amount == 0:
            self._allowances.pop((owner, spender), None)
        else:
            self._allowances[(owner, spender)] = amount

    def allowance(self, owner: Address, spender: Address) -> Amount:
        return self._allowances.get((owner, spender), 0)

    def transfer_from(self, spender: Address, owner: Address, to: Address, amount: Amount) -> None:
        """Move `owner`'s shares on behalf of `spender`, consuming allowance."""
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            raise ValueError(f"Insufficient allowance: {allowed} < {amount}")
        self.transfer(owner, to, amount)
        self.approve(owner, spender, allowed - amount)

    def get_all_balances(self) -> Dict[Address, Amount]:
        """Return all share balances."""
        return dict(self._balances)

    def get_all_allowances(self) -> Dict[Tuple[Address, Address], Amount]:
        """Return all non-zero allowances keyed by (owner, spender)."""
        return dict(self._allowances)

    def snapshot(self) -> Tuple[Dict[Address, Amount], Dict[Tuple[Address, Address], Amount], Amount]:
        return dict(self._balances), dict(self._allowances), self._total

    def restore(self, snapshot: Tuple[Dict[Address, Amount], Dict[Tuple[Address, Address], Amount], Amount]) -> None:
        balances, allowances, total = snapshot
        self._balances = dict(balances)
        self._allowances = dict(allowances)
        self._total = total

    def __repr__(self) -> str:
        return f"ShareLedger({len(self._balances)} holders, total={self._total})"
