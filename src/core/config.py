"""
Pair engine configuration.

Defaults are the canonical pair constants (112-bit reserves, 32-bit clock,
256-bit accumulators, 1000 locked shares). A deployment can override them from
a YAML mapping via `load_pool_config`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

from ..kernels.python.share_math import MINIMUM_LOCKED_SHARES
from ..kernels.python.uq112x112 import RESOLUTION
from ..state.balances import NULL_ADDRESS, Address
from ..state.canonical import canonical_address
from ..state.pools import ACCUMULATOR_BITS, TIMESTAMP_BITS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolConfig:
    """Runtime config for every pair created by one registry."""

    minimum_locked_shares: int = MINIMUM_LOCKED_SHARES
    # Reserves are encoded as UQ112x112 numerators, so they can never exceed 112 bits.
    reserve_bits: int = RESOLUTION
    timestamp_bits: int = TIMESTAMP_BITS
    accumulator_bits: int = ACCUMULATOR_BITS
    locked_shares_sink: Address = NULL_ADDRESS

    def __post_init__(self) -> None:
        for name in ("minimum_locked_shares", "reserve_bits", "timestamp_bits", "accumulator_bits"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"{name} must be an int")
        if self.minimum_locked_shares <= 0:
            raise ValueError(f"minimum_locked_shares must be positive: {self.minimum_locked_shares}")
        if not (0 < self.reserve_bits <= RESOLUTION):
            raise ValueError(f"reserve_bits must be in [1, {RESOLUTION}]: {self.reserve_bits}")
        if not (0 < self.timestamp_bits <= TIMESTAMP_BITS):
            raise ValueError(f"timestamp_bits must be in [1, {TIMESTAMP_BITS}]: {self.timestamp_bits}")
        if not (2 * RESOLUTION <= self.accumulator_bits <= ACCUMULATOR_BITS):
            raise ValueError(f"accumulator_bits must be in [{2 * RESOLUTION}, {ACCUMULATOR_BITS}]: {self.accumulator_bits}")
        object.__setattr__(self, "locked_shares_sink", canonical_address(self.locked_shares_sink, name="locked_shares_sink"))

    @property
    def max_reserve(self) -> int:
        return (1 << self.reserve_bits) - 1


def pool_config_from_dict(d: Mapping[str, Any]) -> PoolConfig:
    """Build a PoolConfig from a plain mapping. Raises ValueError on unknown keys."""
    if not isinstance(d, Mapping):
        raise TypeError("pool config must be a mapping")
    known = {f.name for f in fields(PoolConfig)}
    unknown = sorted(set(d) - known)
    if unknown:
        raise ValueError(f"unknown pool config keys: {', '.join(unknown)}")
    return PoolConfig(**dict(d))


def load_pool_config(path: Union[str, Path]) -> PoolConfig:
    """
    Load a PoolConfig from a YAML file.

    The file holds either the fields at top level or under a `pool:` key.
    An empty file yields the defaults.
    """
    p = Path(path)
    obj = yaml.safe_load(p.read_text(encoding="utf-8"))
    if obj is None:
        obj = {}
    if not isinstance(obj, Mapping):
        raise TypeError("pool config YAML must be a mapping")
    if "pool" in obj:
        obj = obj["pool"] or {}
    config = pool_config_from_dict(obj)
    logger.debug("loaded pool config from %s: %s", p, config)
    return config
