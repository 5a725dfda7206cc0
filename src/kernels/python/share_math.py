"""
Pool-share math kernel.

Push-then-call semantics: the depositor has already moved assets into the
pair's custody, so contributions are inferred as `balance - reserve`.

It is written as a small set of pure functions with explicit rounding rules.
Domain failures (zero mint, zero burn) are reported through the result, not
raised; the engine decides which error to surface.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


MINIMUM_LOCKED_SHARES = 1000


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


@dataclass(frozen=True)
class MintSharesResult:
    contributed_a: int
    contributed_b: int
    shares_minted: int
    locked_shares: int
    new_total_supply: int


@dataclass(frozen=True)
class BurnSharesResult:
    amount_a_out: int
    amount_b_out: int
    new_total_supply: int


def initial_shares(*, amount_a: int, amount_b: int, min_locked: int = MINIMUM_LOCKED_SHARES) -> int:
    """
    First-deposit shares: `isqrt(amount_a * amount_b) - min_locked`.

    May be zero or negative when the deposit cannot cover the lock.
    """
    _require_int("amount_a", amount_a)
    _require_int("amount_b", amount_b)
    _require_int("min_locked", min_locked)
    if amount_a < 0 or amount_b < 0:
        raise ValueError("amounts must be non-negative")
    if min_locked < 0:
        raise ValueError("min_locked must be non-negative")
    return math.isqrt(amount_a * amount_b) - min_locked


def proportional_shares(
    *,
    amount_a: int,
    amount_b: int,
    reserve_a: int,
    reserve_b: int,
    total_supply: int,
) -> int:
    """
    Subsequent-deposit shares: the worse of the two implied valuations.

        min(floor(amount_a * total_supply / reserve_a),
            floor(amount_b * total_supply / reserve_b))
    """
    for name, v in (
        ("amount_a", amount_a),
        ("amount_b", amount_b),
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("total_supply", total_supply),
    ):
        _require_int(name, v)
    if amount_a < 0 or amount_b < 0:
        raise ValueError("amounts must be non-negative")
    if total_supply <= 0:
        raise ValueError("total_supply must be positive")
    # A pair with shares outstanding but an empty reserve cannot price a deposit.
    if reserve_a <= 0 or reserve_b <= 0:
        return 0

    shares_a = (amount_a * total_supply) // reserve_a
    shares_b = (amount_b * total_supply) // reserve_b
    return min(shares_a, shares_b)


def mint_shares(
    *,
    reserve_a: int,
    reserve_b: int,
    balance_a: int,
    balance_b: int,
    total_supply: int,
    min_locked: int = MINIMUM_LOCKED_SHARES,
) -> MintSharesResult:
    """
    Shares owed for the assets sitting in custody above the synced reserves.

    `balance_*` must be at least `reserve_*` (callers check and raise first).
    """
    for name, v in (
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("balance_a", balance_a),
        ("balance_b", balance_b),
        ("total_supply", total_supply),
    ):
        _require_int(name, v)
    if balance_a < reserve_a or balance_b < reserve_b:
        raise ValueError("custody balance below reserve")
    if total_supply < 0:
        raise ValueError("total_supply must be non-negative")

    contributed_a = balance_a - reserve_a
    contributed_b = balance_b - reserve_b

    if total_supply == 0:
        minted = initial_shares(amount_a=contributed_a, amount_b=contributed_b, min_locked=min_locked)
        locked = min_locked
    else:
        minted = proportional_shares(
            amount_a=contributed_a,
            amount_b=contributed_b,
            reserve_a=reserve_a,
            reserve_b=reserve_b,
            total_supply=total_supply,
        )
        locked = 0

    return MintSharesResult(
        contributed_a=contributed_a,
        contributed_b=contributed_b,
        shares_minted=minted,
        locked_shares=locked,
        new_total_supply=total_supply + locked + max(minted, 0),
    )


def burn_shares(*, liquidity: int, balance_a: int, balance_b: int, total_supply: int) -> BurnSharesResult:
    """
    Redeem `liquidity` shares against live custody balances (floor rounding).
    """
    for name, v in (
        ("liquidity", liquidity),
        ("balance_a", balance_a),
        ("balance_b", balance_b),
        ("total_supply", total_supply),
    ):
        _require_int(name, v)

    if liquidity < 0:
        raise ValueError("liquidity must be non-negative")
    if balance_a < 0 or balance_b < 0:
        raise ValueError("balances must be non-negative")
    if total_supply <= 0:
        raise ValueError("total_supply must be positive")
    if liquidity > total_supply:
        raise ValueError("cannot burn more than total_supply")

    amount_a_out = (liquidity * balance_a) // total_supply
    amount_b_out = (liquidity * balance_b) // total_supply
    return BurnSharesResult(
        amount_a_out=amount_a_out,
        amount_b_out=amount_b_out,
        new_total_supply=total_supply - liquidity,
    )
