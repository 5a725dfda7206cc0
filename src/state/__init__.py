"""
State management for constant-product pairs
"""

from .balances import NULL_ADDRESS, AssetLedger
from .pools import PoolState, compute_pool_id, pool_address, sort_assets
from .lp import ShareLedger

__all__ = [
    "NULL_ADDRESS",
    "AssetLedger",
    "PoolState",
    "compute_pool_id",
    "pool_address",
    "sort_assets",
    "ShareLedger",
]
