"""
Time-weighted price accumulator.

Each sync integrates the *pre-sync* spot price over the seconds since the
previous sync:

    cumulative_price_a += uqdiv(encode(reserve_b), reserve_a) * elapsed
    cumulative_price_b += uqdiv(encode(reserve_a), reserve_b) * elapsed

Both the 32-bit clock and the 256-bit accumulators wrap. Consumers sample the
accumulator twice and divide the (wrapping) difference by the (wrapping)
elapsed time, so wraparound cancels out as long as samples are taken less than
one clock period apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import Tuple

from ..kernels.python.uq112x112 import encode, to_fraction, truncate, uqdiv, wrapping_add, wrapping_sub
from ..state.pools import ACCUMULATOR_BITS, TIMESTAMP_BITS, PoolState


@dataclass(frozen=True)
class AccumulatorUpdate:
    cumulative_price_a: int
    cumulative_price_b: int
    timestamp: int
    elapsed: int


def accumulate(
    *,
    cumulative_price_a: int,
    cumulative_price_b: int,
    reserve_a: int,
    reserve_b: int,
    last_sync_time: int,
    now: int,
    timestamp_bits: int = TIMESTAMP_BITS,
    accumulator_bits: int = ACCUMULATOR_BITS,
) -> AccumulatorUpdate:
    """Advance the accumulators from `last_sync_time` to `now` at the given reserves."""
    timestamp = truncate(now, bits=timestamp_bits)
    elapsed = wrapping_sub(timestamp, last_sync_time, bits=timestamp_bits)
    if elapsed > 0 and reserve_a != 0 and reserve_b != 0:
        cumulative_price_a = wrapping_add(
            cumulative_price_a, uqdiv(encode(reserve_b), reserve_a) * elapsed, bits=accumulator_bits
        )
        cumulative_price_b = wrapping_add(
            cumulative_price_b, uqdiv(encode(reserve_a), reserve_b) * elapsed, bits=accumulator_bits
        )
    return AccumulatorUpdate(
        cumulative_price_a=cumulative_price_a,
        cumulative_price_b=cumulative_price_b,
        timestamp=timestamp,
        elapsed=elapsed,
    )


def current_cumulative_prices(
    pool: PoolState,
    now: int,
    *,
    timestamp_bits: int = TIMESTAMP_BITS,
    accumulator_bits: int = ACCUMULATOR_BITS,
) -> Tuple[int, int, int]:
    """
    Accumulators as they would read if the pool synced at `now`.

    Lets an observer sample without mutating the pool (and without paying for a sync).

    Returns:
        (cumulative_price_a, cumulative_price_b, truncated timestamp)
    """
    update = accumulate(
        cumulative_price_a=pool.cumulative_price_a,
        cumulative_price_b=pool.cumulative_price_b,
        reserve_a=pool.reserve_a,
        reserve_b=pool.reserve_b,
        last_sync_time=pool.last_sync_time,
        now=now,
        timestamp_bits=timestamp_bits,
        accumulator_bits=accumulator_bits,
    )
    return update.cumulative_price_a, update.cumulative_price_b, update.timestamp


def twap(
    cumulative_start: int,
    cumulative_end: int,
    time_start: int,
    time_end: int,
    *,
    timestamp_bits: int = TIMESTAMP_BITS,
    accumulator_bits: int = ACCUMULATOR_BITS,
) -> int:
    """
    Time-weighted average price between two samples, as UQ112x112.

    Raises:
        ValueError: If no time elapsed between the samples
    """
    elapsed = wrapping_sub(
        truncate(time_end, bits=timestamp_bits), truncate(time_start, bits=timestamp_bits), bits=timestamp_bits
    )
    if elapsed == 0:
        raise ValueError("samples must be at least one second apart")
    delta = wrapping_sub(cumulative_end, cumulative_start, bits=accumulator_bits)
    return delta // elapsed


def decode_uq112x112(value: int) -> Fraction:
    """Exact rational value of a UQ112x112 price."""
    return to_fraction(value)


def spot_price(reserve_numerator: int, reserve_denominator: int) -> int:
    """Spot price `reserve_numerator / reserve_denominator` as UQ112x112."""
    return uqdiv(encode(reserve_numerator), reserve_denominator)
