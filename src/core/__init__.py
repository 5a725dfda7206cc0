"""
Core constant-product pair engine
"""

from .config import PoolConfig, load_pool_config
from .cpmm import (
    compute_shares_minted,
    compute_burn_amounts,
    verify_swap,
    quote,
    get_amount_out,
    get_amount_in,
)
from .errors import PoolError
from .events import Burn, EventLog, Mint, PoolCreated, Swap, Sync
from .oracle import current_cumulative_prices, decode_uq112x112, twap
from .pair import Pair

__all__ = [
    "PoolConfig",
    "load_pool_config",
    "compute_shares_minted",
    "compute_burn_amounts",
    "verify_swap",
    "quote",
    "get_amount_out",
    "get_amount_in",
    "PoolError",
    "Burn",
    "EventLog",
    "Mint",
    "PoolCreated",
    "Swap",
    "Sync",
    "current_cumulative_prices",
    "decode_uq112x112",
    "twap",
    "Pair",
]
