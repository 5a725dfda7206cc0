"""
Constant-product pair engine.

A `Pair` owns one `PoolState` and drives it through `mint`, `burn` and `swap`,
all of which end in the shared `_update` step that writes the reserves and
advances the price accumulators together.

Execution model:
- Every public mutating call runs inside `_critical_section`: a per-pair mutex
  serializes threads, and a call that re-enters the pair from the thread
  already inside it (a collaborator calling back) fails with `LockedError`.
- Operations are all-or-nothing. The pair snapshots its own state and every
  collaborator that supports `snapshot()` / `restore()`; on any exception the
  snapshots are restored before the error propagates. Events are held back
  until the operation commits.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import replace
from typing import Callable, Iterator, List, Optional, Tuple

from ..state.balances import NULL_ADDRESS, Address, Amount, AssetId
from ..state.canonical import canonical_address
from ..state.pools import PoolState
from .capabilities import CustodyLike, Journaled, ShareLedgerLike
from .config import PoolConfig
from .cpmm import compute_burn_amounts, compute_shares_minted, verify_swap
from .errors import (
    AlreadyInitializedError,
    BalanceOverflowError,
    IdenticalAssetsError,
    InsufficientLiquidityBurnedError,
    InsufficientLiquidityError,
    InsufficientOutputAmountError,
    InvalidRecipientError,
    LockedError,
    NotInitializedError,
    UnderflowError,
    ZeroAddressError,
)
from .events import Burn, EventLog, Mint, Swap, Sync
from .oracle import accumulate, current_cumulative_prices, spot_price

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class Pair:
    """Engine for one constant-product pool."""

    def __init__(
        self,
        state: PoolState,
        *,
        shares: ShareLedgerLike,
        custody: CustodyLike,
        config: PoolConfig = PoolConfig(),
        clock: Clock = time.time,
        events: Optional[EventLog] = None,
    ) -> None:
        self._state = state
        self.shares = shares
        self.custody = custody
        self.config = config
        self._clock = clock
        self.events = events if events is not None else EventLog()
        self._mutex = threading.Lock()
        self._owner: Optional[int] = None
        self._pending: List[object] = []

    # -- Read-only views -----------------------------------------------------

    @property
    def pool_id(self) -> str:
        return self._state.pool_id

    @property
    def address(self) -> Address:
        return self._state.address

    @property
    def asset_a(self) -> AssetId:
        return self._state.asset_a

    @property
    def asset_b(self) -> AssetId:
        return self._state.asset_b

    @property
    def state(self) -> PoolState:
        """A copy of the current pool state."""
        return replace(self._state)

    def get_reserves(self) -> Tuple[Amount, Amount, int]:
        s = self._state
        return s.reserve_a, s.reserve_b, s.last_sync_time

    def total_shares(self) -> Amount:
        return self.shares.total_shares()

    def share_balance(self, owner: Address) -> Amount:
        return self.shares.share_balance(owner)

    def price_a(self) -> int:
        """Spot price of asset_a in asset_b, UQ112x112."""
        if self._state.reserve_a == 0 or self._state.reserve_b == 0:
            raise InsufficientLiquidityError("no spot price for an empty pool")
        return spot_price(self._state.reserve_b, self._state.reserve_a)

    def price_b(self) -> int:
        """Spot price of asset_b in asset_a, UQ112x112."""
        if self._state.reserve_a == 0 or self._state.reserve_b == 0:
            raise InsufficientLiquidityError("no spot price for an empty pool")
        return spot_price(self._state.reserve_a, self._state.reserve_b)

    def current_cumulative_prices(self) -> Tuple[int, int, int]:
        """Accumulators as of now, without syncing."""
        return current_cumulative_prices(
            self._state,
            self._now(),
            timestamp_bits=self.config.timestamp_bits,
            accumulator_bits=self.config.accumulator_bits,
        )

    # -- Critical section ----------------------------------------------------

    @contextmanager
    def _critical_section(self, op: str) -> Iterator[None]:
        if self._owner == threading.get_ident():
            raise LockedError(f"{op} re-entered pair {self.pool_id}")
        with self._mutex:
            self._owner = threading.get_ident()
            saved = self._journal()
            self._pending = []
            try:
                yield
            except BaseException as exc:
                self._rollback(saved)
                logger.warning("pair %s: %s rolled back: %s", self.pool_id, op, exc)
                raise
            else:
                pending = self._pending
                for event in pending:
                    self.events.emit(event)
            finally:
                self._pending = []
                self._owner = None

    def _journal(self):
        shares_snap = self.shares.snapshot() if isinstance(self.shares, Journaled) else None
        custody_snap = self.custody.snapshot() if isinstance(self.custody, Journaled) else None
        return replace(self._state), shares_snap, custody_snap

    def _rollback(self, saved) -> None:
        state, shares_snap, custody_snap = saved
        self._state = state
        if shares_snap is not None:
            self.shares.restore(shares_snap)
        if custody_snap is not None:
            self.custody.restore(custody_snap)

    def _emit(self, event: object) -> None:
        self._pending.append(event)

    def _now(self) -> int:
        return int(self._clock())

    def _require_initialized(self) -> None:
        if not self._state.is_initialized:
            raise NotInitializedError(f"pair {self.pool_id} has no assets")

    def _custody_balances(self) -> Tuple[Amount, Amount]:
        return (
            self.custody.balance_of(self._state.asset_a, self._state.address),
            self.custody.balance_of(self._state.asset_b, self._state.address),
        )

    # -- Reserve ledger + accumulator ----------------------------------------

    def _update(self, balance_a: Amount, balance_b: Amount, reserve_a: Amount, reserve_b: Amount) -> None:
        """Sync reserves to `balance_*`, accumulating prices at the prior reserves."""
        max_reserve = self.config.max_reserve
        if balance_a > max_reserve or balance_b > max_reserve:
            raise BalanceOverflowError(
                f"balances ({balance_a}, {balance_b}) exceed {self.config.reserve_bits}-bit reserves"
            )

        s = self._state
        upd = accumulate(
            cumulative_price_a=s.cumulative_price_a,
            cumulative_price_b=s.cumulative_price_b,
            reserve_a=reserve_a,
            reserve_b=reserve_b,
            last_sync_time=s.last_sync_time,
            now=self._now(),
            timestamp_bits=self.config.timestamp_bits,
            accumulator_bits=self.config.accumulator_bits,
        )
        s.cumulative_price_a = upd.cumulative_price_a
        s.cumulative_price_b = upd.cumulative_price_b
        s.reserve_a = balance_a
        s.reserve_b = balance_b
        s.last_sync_time = upd.timestamp
        self._emit(Sync(pool_id=s.pool_id, reserve_a=balance_a, reserve_b=balance_b))
        logger.debug(
            "pair %s sync: reserves=(%d, %d) elapsed=%d", s.pool_id, balance_a, balance_b, upd.elapsed
        )

    # -- Operations ----------------------------------------------------------

    def initialize(self, asset_a: AssetId, asset_b: AssetId) -> None:
        """Set the pair's assets. Allowed exactly once; order is taken as given."""
        with self._critical_section("initialize"):
            if self._state.is_initialized:
                raise AlreadyInitializedError(f"pair {self.pool_id} already initialized")
            a = canonical_address(asset_a, name="asset_a")
            b = canonical_address(asset_b, name="asset_b")
            if a == b:
                raise IdenticalAssetsError(f"pair assets are identical: {a}")
            if NULL_ADDRESS in (a, b):
                raise ZeroAddressError("pair assets must not be the null address")
            self._state.asset_a = a
            self._state.asset_b = b

    def mint(self, to: Address) -> Amount:
        """
        Issue shares for the assets pushed into custody since the last sync.

        Returns:
            Shares issued to `to`
        """
        with self._critical_section("mint"):
            self._require_initialized()
            reserve_a, reserve_b, _ = self.get_reserves()
            balance_a, balance_b = self._custody_balances()
            total_supply = self.shares.total_shares()

            res = compute_shares_minted(
                reserve_a,
                reserve_b,
                balance_a,
                balance_b,
                total_supply,
                min_locked=self.config.minimum_locked_shares,
            )
            if total_supply == 0:
                # Permanently locked so the supply can never return to zero.
                self.shares.mint_shares(self.config.locked_shares_sink, res.locked_shares)
            self.shares.mint_shares(to, res.shares_minted)

            self._update(balance_a, balance_b, reserve_a, reserve_b)
            self._emit(Mint(pool_id=self.pool_id, sender=to, amount_a=res.contributed_a, amount_b=res.contributed_b))
            logger.debug(
                "pair %s mint: %d shares to %s for (%d, %d)",
                self.pool_id, res.shares_minted, to, res.contributed_a, res.contributed_b,
            )
            return res.shares_minted

    def burn(self, withdrawer: Address, to: Optional[Address] = None) -> Tuple[Amount, Amount]:
        """
        Redeem all of `withdrawer`'s shares for a pro-rata cut of custody.

        Payouts go to `to` (default: the withdrawer). Amounts are computed
        from live custody balances, so a skewed earlier deposit is paid out at
        the skewed ratio. The locked shares at the sink can never be redeemed.
        """
        recipient = withdrawer if to is None else to
        with self._critical_section("burn"):
            self._require_initialized()
            if withdrawer == self.config.locked_shares_sink:
                raise InsufficientLiquidityBurnedError(f"shares at the sink {withdrawer} are locked")
            reserve_a, reserve_b, _ = self.get_reserves()
            balance_a, balance_b = self._custody_balances()
            liquidity = self.shares.share_balance(withdrawer)

            res = compute_burn_amounts(liquidity, balance_a, balance_b, self.shares.total_shares())
            self.shares.burn_shares(withdrawer, liquidity)
            self.custody.safe_transfer(self.asset_a, recipient, res.amount_a_out)
            self.custody.safe_transfer(self.asset_b, recipient, res.amount_b_out)

            balance_a, balance_b = self._custody_balances()
            self._update(balance_a, balance_b, reserve_a, reserve_b)
            self._emit(
                Burn(
                    pool_id=self.pool_id,
                    sender=withdrawer,
                    amount_a=res.amount_a_out,
                    amount_b=res.amount_b_out,
                    to=recipient,
                )
            )
            logger.debug(
                "pair %s burn: %d shares of %s for (%d, %d)",
                self.pool_id, liquidity, withdrawer, res.amount_a_out, res.amount_b_out,
            )
            return res.amount_a_out, res.amount_b_out

    def swap(self, amount_a_out: Amount, amount_b_out: Amount, to: Address, sender: Optional[Address] = None) -> None:
        """
        Pay out the requested amounts if the inputs already in custody keep k.

        The check runs on balances that assume the outputs have left; reserves
        are synced to those balances before the transfers go out.
        """
        if amount_a_out == 0 and amount_b_out == 0:
            raise InsufficientOutputAmountError("swap must request a non-zero output")
        with self._critical_section("swap"):
            self._require_initialized()
            to = canonical_address(to, name="to")
            if to in (self.asset_a, self.asset_b):
                raise InvalidRecipientError(f"recipient {to} is a pair asset")
            reserve_a, reserve_b, _ = self.get_reserves()
            custody_a, custody_b = self._custody_balances()

            res = verify_swap(reserve_a, reserve_b, custody_a, custody_b, amount_a_out, amount_b_out)
            self._update(res.balance_a, res.balance_b, reserve_a, reserve_b)

            if amount_a_out > 0:
                self.custody.safe_transfer(self.asset_a, to, amount_a_out)
            if amount_b_out > 0:
                self.custody.safe_transfer(self.asset_b, to, amount_b_out)

            self._emit(
                Swap(
                    pool_id=self.pool_id,
                    sender=to if sender is None else sender,
                    amount_a_in=res.amount_a_in,
                    amount_b_in=res.amount_b_in,
                    amount_a_out=amount_a_out,
                    amount_b_out=amount_b_out,
                    to=to,
                )
            )
            logger.debug(
                "pair %s swap: in=(%d, %d) out=(%d, %d) to %s",
                self.pool_id, res.amount_a_in, res.amount_b_in, amount_a_out, amount_b_out, to,
            )

    def skim(self, to: Address) -> Tuple[Amount, Amount]:
        """Send custody in excess of the reserves to `to`. Reserves are untouched."""
        with self._critical_section("skim"):
            self._require_initialized()
            reserve_a, reserve_b, _ = self.get_reserves()
            balance_a, balance_b = self._custody_balances()
            if balance_a < reserve_a or balance_b < reserve_b:
                raise UnderflowError(
                    f"custody below reserves: ({balance_a}, {balance_b}) < ({reserve_a}, {reserve_b})"
                )
            excess_a = balance_a - reserve_a
            excess_b = balance_b - reserve_b
            if excess_a > 0:
                self.custody.safe_transfer(self.asset_a, to, excess_a)
            if excess_b > 0:
                self.custody.safe_transfer(self.asset_b, to, excess_b)
            return excess_a, excess_b

    def force_sync(self) -> None:
        """Set the reserves to whatever custody currently holds."""
        with self._critical_section("sync"):
            self._require_initialized()
            reserve_a, reserve_b, _ = self.get_reserves()
            balance_a, balance_b = self._custody_balances()
            self._update(balance_a, balance_b, reserve_a, reserve_b)

    def __repr__(self) -> str:
        return f"Pair({self._state!r})"
