"""
Pool registry: one pair per unordered asset pair.

The registry is the imperative shell around the pair engine. It owns the
shared `AssetLedger` (custody for every pair), builds a `ShareLedger` per
pair, derives deterministic pool ids, and initializes each pair exactly once.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Dict, List, Optional, Tuple

from ..core.config import PoolConfig
from ..core.errors import IdenticalAssetsError, PoolExistsError, ZeroAddressError
from ..core.events import EventLog, PoolCreated
from ..core.pair import Clock, Pair
from ..state.balances import NULL_ADDRESS, AssetId, AssetLedger
from ..state.canonical import canonical_address
from ..state.lp import ShareLedger
from ..state.pools import PoolState, compute_pool_id, pool_address, sort_assets
from .custody import LedgerCustody

logger = logging.getLogger(__name__)


class PoolRegistry:
    """
    Registry of constant-product pairs keyed by canonically ordered asset pairs.

    Lookups work in either asset order; `all_pools` preserves creation order.
    """

    def __init__(
        self,
        ledger: Optional[AssetLedger] = None,
        *,
        config: PoolConfig = PoolConfig(),
        clock: Clock = time.time,
        events: Optional[EventLog] = None,
    ) -> None:
        self.ledger = ledger if ledger is not None else AssetLedger()
        self.config = config
        self.events = events if events is not None else EventLog()
        self._clock = clock
        self._pairs: Dict[str, Pair] = {}
        self._by_assets: Dict[Tuple[AssetId, AssetId], str] = {}
        self._all: List[str] = []
        self._mutex = threading.Lock()

    def create_pool(self, asset_x: AssetId, asset_y: AssetId) -> str:
        """
        Create and initialize the pair for (asset_x, asset_y).

        Returns:
            The deterministic pool_id

        Raises:
            IdenticalAssetsError: If both ids are the same asset
            ZeroAddressError: If the lower id is the null address
            PoolExistsError: If the pair is already registered
        """
        x = canonical_address(asset_x, name="asset_x")
        y = canonical_address(asset_y, name="asset_y")
        if x == y:
            raise IdenticalAssetsError(f"cannot pair an asset with itself: {x}")
        asset_a, asset_b = sort_assets(x, y)
        if asset_a == NULL_ADDRESS:
            raise ZeroAddressError("the null address cannot be pooled")

        with self._mutex:
            if (asset_a, asset_b) in self._by_assets:
                raise PoolExistsError(f"pool exists for ({asset_a}, {asset_b})")

            pool_id = compute_pool_id(asset_a, asset_b)
            address = pool_address(pool_id)
            pair = Pair(
                PoolState(pool_id=pool_id, address=address),
                shares=ShareLedger(),
                custody=LedgerCustody(self.ledger, address),
                config=self.config,
                clock=self._clock,
                events=self.events,
            )
            pair.initialize(asset_a, asset_b)
            self._store(pair)
            self.events.emit(
                PoolCreated(asset_a=asset_a, asset_b=asset_b, pool_id=pool_id, pool_count=len(self._all))
            )

        logger.info("created pool %s for (%s, %s); %d pools", pool_id, asset_a, asset_b, len(self._all))
        return pool_id

    def register_pair(self, pair: Pair) -> None:
        """
        Adopt an already-initialized pair (e.g. restored from a snapshot).

        No creation event is emitted; the pair existed before.
        """
        state = pair.state
        if not state.is_initialized:
            raise ValueError(f"pair {state.pool_id} is not initialized")
        if compute_pool_id(state.asset_a, state.asset_b) != state.pool_id:
            raise ValueError(f"pool_id {state.pool_id} does not match its assets")
        if state.address != pool_address(state.pool_id):
            raise ValueError(f"custody address {state.address} does not match pool_id {state.pool_id}")
        with self._mutex:
            if (state.asset_a, state.asset_b) in self._by_assets:
                raise PoolExistsError(f"pool exists for ({state.asset_a}, {state.asset_b})")
            self._store(pair)

    def _store(self, pair: Pair) -> None:
        self._pairs[pair.pool_id] = pair
        self._by_assets[(pair.asset_a, pair.asset_b)] = pair.pool_id
        self._by_assets[(pair.asset_b, pair.asset_a)] = pair.pool_id
        self._all.append(pair.pool_id)

    def get_pool(self, asset_x: AssetId, asset_y: AssetId) -> Optional[str]:
        """pool_id for the pair in either order, or None."""
        x = canonical_address(asset_x, name="asset_x")
        y = canonical_address(asset_y, name="asset_y")
        return self._by_assets.get((x, y))

    def pair(self, pool_id: str) -> Pair:
        """
        Raises:
            KeyError: If no pair has this pool_id
        """
        try:
            return self._pairs[pool_id]
        except KeyError:
            raise KeyError(f"unknown pool_id: {pool_id}") from None

    def pair_for(self, asset_x: AssetId, asset_y: AssetId) -> Pair:
        pool_id = self.get_pool(asset_x, asset_y)
        if pool_id is None:
            raise KeyError(f"no pool for ({asset_x}, {asset_y})")
        return self._pairs[pool_id]

    @property
    def all_pools(self) -> List[str]:
        return list(self._all)

    def all_pools_length(self) -> int:
        return len(self._all)

    def __repr__(self) -> str:
        return f"PoolRegistry({len(self._all)} pools)"
