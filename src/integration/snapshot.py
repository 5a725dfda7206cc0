"""
Registry state snapshot encoding.

Goals:
- Deterministic JSON serialization for hashing / snapshot distribution.
- Round-trippable into a live `PoolRegistry` (custody, pairs, shares).
- Explicit versioning for future formats.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from ..core.config import PoolConfig
from ..core.pair import Clock, Pair
from ..state.balances import AssetLedger
from ..state.canonical import canonical_json_bytes, domain_sep_bytes, sha256_hex
from ..state.lp import ShareLedger
from ..state.pools import PoolState
from .custody import LedgerCustody
from .registry import PoolRegistry


REGISTRY_SNAPSHOT_VERSION = 1


def _require_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    return int(value)


def _require_str(value: Any, *, name: str) -> str:
    if not isinstance(value, str) or not value:
        raise TypeError(f"{name} must be a non-empty string")
    return value


@dataclass(frozen=True)
class RegistrySnapshot:
    """
    Deterministic, versioned snapshot of a `PoolRegistry`.

    The commitment is *not* included inside `data` to avoid self-reference.
    Amounts that exceed the JSON-safe integer range are still exact: Python's
    json module encodes ints without loss.
    """

    version: int
    data: Dict[str, Any]

    def canonical_bytes(self) -> bytes:
        return canonical_json_bytes(self.data)

    def commitment_hex(self) -> str:
        payload = domain_sep_bytes("registry_snapshot", version=self.version) + self.canonical_bytes()
        return sha256_hex(payload)


def snapshot_from_registry(registry: PoolRegistry, *, version: int = REGISTRY_SNAPSHOT_VERSION) -> RegistrySnapshot:
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")

    balances_entries = [
        {"holder": holder, "asset": asset, "amount": int(amount)}
        for (holder, asset), amount in registry.ledger.get_all_balances().items()
    ]
    balances_entries.sort(key=lambda e: (e["holder"], e["asset"]))

    # Creation order is part of the registry's observable state, so pools stay unsorted.
    pools_entries: List[Dict[str, Any]] = []
    for pool_id in registry.all_pools:
        pair = registry.pair(pool_id)
        if not isinstance(pair.shares, ShareLedger):
            raise TypeError(f"pool {pool_id} uses a share ledger that cannot be snapshotted")
        share_entries = [
            {"owner": owner, "amount": int(amount)} for owner, amount in pair.shares.get_all_balances().items()
        ]
        share_entries.sort(key=lambda e: e["owner"])
        allowance_entries = [
            {"owner": owner, "spender": spender, "amount": int(amount)}
            for (owner, spender), amount in pair.shares.get_all_allowances().items()
        ]
        allowance_entries.sort(key=lambda e: (e["owner"], e["spender"]))
        pools_entries.append(
            {"state": pair.state.to_dict(), "shares": share_entries, "allowances": allowance_entries}
        )

    data: Dict[str, Any] = {
        "version": int(version),
        "balances": balances_entries,
        "pools": pools_entries,
    }
    return RegistrySnapshot(version=version, data=data)


def registry_from_snapshot(
    snapshot: Mapping[str, Any],
    *,
    config: PoolConfig = PoolConfig(),
    clock: Clock = time.time,
) -> PoolRegistry:
    """Rebuild a registry (custody, pairs, share balances) from snapshot data."""
    if not isinstance(snapshot, Mapping):
        raise TypeError("snapshot must be a mapping")

    version = snapshot.get("version", REGISTRY_SNAPSHOT_VERSION)
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("snapshot.version must be a positive int")
    if version != REGISTRY_SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version: {version}")

    ledger = AssetLedger()
    balances_entries = snapshot.get("balances") or []
    if not isinstance(balances_entries, list):
        raise TypeError("snapshot.balances must be a list")
    seen_balances: set[tuple[str, str]] = set()
    for entry in balances_entries:
        if not isinstance(entry, Mapping):
            raise TypeError("snapshot.balances entries must be objects")
        holder = _require_str(entry.get("holder"), name="balance.holder")
        asset = _require_str(entry.get("asset"), name="balance.asset")
        key = (holder, asset)
        if key in seen_balances:
            raise ValueError("duplicate balance entry (holder, asset)")
        seen_balances.add(key)
        ledger.set(holder, asset, _require_int(entry.get("amount"), name="balance.amount"))

    registry = PoolRegistry(ledger, config=config, clock=clock)
    pools_entries = snapshot.get("pools") or []
    if not isinstance(pools_entries, list):
        raise TypeError("snapshot.pools must be a list")
    for entry in pools_entries:
        if not isinstance(entry, Mapping):
            raise TypeError("snapshot.pools entries must be objects")
        state = PoolState.from_dict(entry["state"])
        if not state.is_initialized:
            raise ValueError(f"pool {state.pool_id} in snapshot is not initialized")
        shares = ShareLedger()
        for share in entry.get("shares") or []:
            owner = _require_str(share.get("owner"), name="share.owner")
            shares.mint_shares(owner, _require_int(share.get("amount"), name="share.amount"))
        for allowance in entry.get("allowances") or []:
            shares.approve(
                _require_str(allowance.get("owner"), name="allowance.owner"),
                _require_str(allowance.get("spender"), name="allowance.spender"),
                _require_int(allowance.get("amount"), name="allowance.amount"),
            )
        pair = Pair(
            state,
            shares=shares,
            custody=LedgerCustody(ledger, state.address),
            config=config,
            clock=clock,
            events=registry.events,
        )
        registry.register_pair(pair)
    return registry
