"""
Constant-product swap check kernel (zero fee).

The pair never prices a swap itself: the caller names the outputs, pushes
inputs into custody, and this kernel decides whether the resulting balances
keep `k = reserve_a * reserve_b` from decreasing. Products are exact Python
ints, so there is no overflow to reason about.

The quote helpers give the boundary amounts the check accepts.
"""

from __future__ import annotations

from dataclasses import dataclass


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _ceil_div_nonneg(numerator: int, denominator: int) -> int:
    if denominator <= 0:
        raise ValueError("denominator must be positive")
    if numerator < 0:
        raise ValueError("numerator must be non-negative")
    return (numerator + denominator - 1) // denominator


@dataclass(frozen=True)
class SwapCheckResult:
    balance_a: int
    balance_b: int
    amount_a_in: int
    amount_b_in: int
    k_before: int
    k_after: int

    @property
    def ok(self) -> bool:
        return self.k_after >= self.k_before


def inferred_input(*, balance: int, reserve: int, amount_out: int) -> int:
    """Amount pushed in on one side: `balance - (reserve - amount_out)`, floored at 0."""
    expected = reserve - amount_out
    return balance - expected if balance > expected else 0


def check_swap(
    *,
    reserve_a: int,
    reserve_b: int,
    custody_a: int,
    custody_b: int,
    amount_a_out: int,
    amount_b_out: int,
) -> SwapCheckResult:
    """
    Post-output balances and the k comparison.

    `custody_*` are balances observed before the outputs leave; the check
    treats the outputs as already sent.
    """
    for name, v in (
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("custody_a", custody_a),
        ("custody_b", custody_b),
        ("amount_a_out", amount_a_out),
        ("amount_b_out", amount_b_out),
    ):
        _require_int(name, v)
    if amount_a_out < 0 or amount_b_out < 0:
        raise ValueError("output amounts must be non-negative")
    if custody_a < amount_a_out or custody_b < amount_b_out:
        raise ValueError("custody balance below requested output")

    balance_a = custody_a - amount_a_out
    balance_b = custody_b - amount_b_out
    return SwapCheckResult(
        balance_a=balance_a,
        balance_b=balance_b,
        amount_a_in=inferred_input(balance=balance_a, reserve=reserve_a, amount_out=amount_a_out),
        amount_b_in=inferred_input(balance=balance_b, reserve=reserve_b, amount_out=amount_b_out),
        k_before=reserve_a * reserve_b,
        k_after=balance_a * balance_b,
    )


def quote(*, amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """Equivalent amount of the other asset at the current reserve ratio (floor)."""
    for name, v in (("amount_a", amount_a), ("reserve_a", reserve_a), ("reserve_b", reserve_b)):
        _require_int(name, v)
    if amount_a <= 0:
        raise ValueError("amount must be positive")
    if reserve_a <= 0 or reserve_b <= 0:
        raise ValueError("reserves must be positive")
    return (amount_a * reserve_b) // reserve_a


def max_amount_out(*, amount_in: int, reserve_in: int, reserve_out: int) -> int:
    """
    Largest output the k-check accepts for `amount_in` pushed in:

        floor(amount_in * reserve_out / (reserve_in + amount_in))
    """
    for name, v in (("amount_in", amount_in), ("reserve_in", reserve_in), ("reserve_out", reserve_out)):
        _require_int(name, v)
    if amount_in <= 0:
        raise ValueError("amount_in must be positive")
    if reserve_in <= 0 or reserve_out <= 0:
        raise ValueError("reserves must be positive")
    return (amount_in * reserve_out) // (reserve_in + amount_in)


def min_amount_in(*, amount_out: int, reserve_in: int, reserve_out: int) -> int:
    """
    Smallest input the k-check accepts for `amount_out` taken out:

        ceil(reserve_in * amount_out / (reserve_out - amount_out))
    """
    for name, v in (("amount_out", amount_out), ("reserve_in", reserve_in), ("reserve_out", reserve_out)):
        _require_int(name, v)
    if amount_out <= 0:
        raise ValueError("amount_out must be positive")
    if reserve_in <= 0 or reserve_out <= 0:
        raise ValueError("reserves must be positive")
    if amount_out >= reserve_out:
        raise ValueError(f"cannot drain full reserve: amount_out ({amount_out}) >= reserve_out ({reserve_out})")
    return _ceil_div_nonneg(reserve_in * amount_out, reserve_out - amount_out)
