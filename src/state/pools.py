"""
Pool state for constant-product pairs.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Tuple

from .balances import NULL_ADDRESS, Address, AssetId, Amount
from .canonical import address_bytes, canonical_address, domain_sep_bytes, sha256_hex


RESERVE_BITS = 112
TIMESTAMP_BITS = 32
ACCUMULATOR_BITS = 256


def sort_assets(asset_x: AssetId, asset_y: AssetId) -> Tuple[AssetId, AssetId]:
    """Canonical pair ordering: lower identifier first."""
    x = canonical_address(asset_x, name="asset_x")
    y = canonical_address(asset_y, name="asset_y")
    return (x, y) if x < y else (y, x)


def compute_pool_id(asset_a: AssetId, asset_b: AssetId) -> str:
    """
    Deterministically compute a pool_id for an ordered asset pair.

        pool_id = sha256(domain_sep("pool_id") || asset_a || asset_b)

    The same unordered pair always maps to the same id once sorted.
    """
    if asset_a >= asset_b:
        raise ValueError(f"Assets must be in canonical order: {asset_a} < {asset_b}")
    data = (
        domain_sep_bytes("pool_id")
        + address_bytes(asset_a, name="asset_a")
        + address_bytes(asset_b, name="asset_b")
    )
    return sha256_hex(data)


def pool_address(pool_id: str) -> Address:
    """Custody address of a pair: the low 20 bytes of its pool_id."""
    body = pool_id[2:] if pool_id.startswith("0x") else pool_id
    if len(body) != 64:
        raise ValueError("pool_id must be a 32-byte hex string")
    return canonical_address(body[-40:], name="pool address")


def _check_uint(name: str, value: Any, bits: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if not (0 <= value < (1 << bits)):
        raise ValueError(f"{name} must fit in {bits} unsigned bits: {value}")


@dataclass
class PoolState:
    """
    Reserve ledger and price accumulators of one pair.

    Only the owning `Pair` mutates this record.

    Attributes:
        pool_id: 32-byte pool identifier (hex string)
        address: Custody address holding the pair's assets
        asset_a: Lower asset identifier (NULL_ADDRESS until initialized)
        asset_b: Higher asset identifier (NULL_ADDRESS until initialized)
        reserve_a: Last-synced holdings of asset_a (uint112)
        reserve_b: Last-synced holdings of asset_b (uint112)
        last_sync_time: Clock at the last sync, truncated to 32 bits
        cumulative_price_a: Sum of UQ112x112 price of asset_a (in asset_b) * seconds, mod 2**256
        cumulative_price_b: Same for asset_b priced in asset_a
    """
    pool_id: str
    address: Address
    asset_a: AssetId = NULL_ADDRESS
    asset_b: AssetId = NULL_ADDRESS
    reserve_a: Amount = 0
    reserve_b: Amount = 0
    last_sync_time: int = 0
    cumulative_price_a: int = 0
    cumulative_price_b: int = 0

    def __post_init__(self):
        """Validate pool state invariants."""
        _check_uint("reserve_a", self.reserve_a, RESERVE_BITS)
        _check_uint("reserve_b", self.reserve_b, RESERVE_BITS)
        _check_uint("last_sync_time", self.last_sync_time, TIMESTAMP_BITS)
        _check_uint("cumulative_price_a", self.cumulative_price_a, ACCUMULATOR_BITS)
        _check_uint("cumulative_price_b", self.cumulative_price_b, ACCUMULATOR_BITS)
        if (self.asset_a == NULL_ADDRESS) != (self.asset_b == NULL_ADDRESS):
            raise ValueError("asset ids must be set together")
        if self.is_initialized and self.asset_a == self.asset_b:
            raise ValueError(f"Assets must be distinct: {self.asset_a}")

    @property
    def is_initialized(self) -> bool:
        return self.asset_a != NULL_ADDRESS

    def get_reserve(self, asset: AssetId) -> Amount:
        """
        Get reserve for a specific asset.

        Raises:
            ValueError: If asset is not in this pool
        """
        if asset == self.asset_a:
            return self.reserve_a
        elif asset == self.asset_b:
            return self.reserve_b
        else:
            raise ValueError(f"Asset {asset} not in pool {self.pool_id}")

    def get_constant_product(self) -> int:
        """k = reserve_a * reserve_b, exact."""
        return self.reserve_a * self.reserve_b

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "PoolState":
        """Deserialize a snapshot dict. Raises KeyError on missing fields."""
        return cls(**{f.name: d[f.name] for f in fields(cls)})

    def __repr__(self) -> str:
        return (
            f"PoolState(pool_id={self.pool_id[:16]}..., "
            f"assets=({self.asset_a[:10]}..., {self.asset_b[:10]}...), "
            f"reserves=({self.reserve_a}, {self.reserve_b}), "
            f"last_sync_time={self.last_sync_time})"
        )
