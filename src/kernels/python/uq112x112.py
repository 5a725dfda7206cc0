"""
Fixed-width integer kernel: UQ112x112 fixed point and bounded/wrapping arithmetic.

Python ints never overflow, so every width the pair depends on is explicit here:
- reserves are checked against 2**112 - 1 (fatal on overflow),
- the sync clock is truncated to 32 bits and subtracted with wraparound,
- price accumulators add modulo 2**256.

UQ112x112 stores a ratio as an unsigned integer with 112 fractional bits.
`encode(y)` shifts a uint112 into the integer part; `uqdiv(x, y)` divides the
fixed-point numerator by a plain uint112, keeping all 112 fractional bits.
"""

from __future__ import annotations

from fractions import Fraction


RESOLUTION = 112
Q112 = 1 << RESOLUTION
UINT112_MAX = Q112 - 1
UINT224_MAX = (1 << 224) - 1


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def max_for_bits(bits: int) -> int:
    _require_int("bits", bits)
    if bits <= 0:
        raise ValueError("bits must be positive")
    return (1 << bits) - 1


def encode(y: int) -> int:
    """Encode a uint112 as UQ112x112 (`y * 2**112`)."""
    _require_int("y", y)
    if not (0 <= y <= UINT112_MAX):
        raise ValueError(f"encode input must fit in 112 bits: {y}")
    return y * Q112


def uqdiv(x: int, y: int) -> int:
    """Divide a UQ112x112 by a uint112, floor rounding. Result stays UQ112x112."""
    _require_int("x", x)
    _require_int("y", y)
    if not (0 <= x <= UINT224_MAX):
        raise ValueError(f"uqdiv numerator must fit in 224 bits: {x}")
    if not (0 < y <= UINT112_MAX):
        raise ValueError(f"uqdiv divisor must be a non-zero uint112: {y}")
    return x // y


def to_fraction(x: int) -> Fraction:
    """Exact rational value of a UQ112x112 (any width, e.g. an averaged accumulator delta)."""
    _require_int("x", x)
    if x < 0:
        raise ValueError("fixed-point values are unsigned")
    return Fraction(x, Q112)


def truncate(value: int, *, bits: int) -> int:
    """Keep the low `bits` bits of a non-negative int."""
    _require_int("value", value)
    if value < 0:
        raise ValueError(f"value must be non-negative: {value}")
    return value & max_for_bits(bits)


def wrapping_add(a: int, b: int, *, bits: int) -> int:
    """`(a + b) mod 2**bits`. Wraparound is intended, not an error."""
    _require_int("a", a)
    _require_int("b", b)
    return (a + b) & max_for_bits(bits)


def wrapping_sub(a: int, b: int, *, bits: int) -> int:
    """`(a - b) mod 2**bits`. Wraparound is intended, not an error."""
    _require_int("a", a)
    _require_int("b", b)
    return (a - b) & max_for_bits(bits)


def fits(value: int, *, bits: int) -> bool:
    _require_int("value", value)
    return 0 <= value <= max_for_bits(bits)
