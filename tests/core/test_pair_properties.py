# [TESTER] v1

"""Property tests for the pair engine: k never shrinks, deposits never dilute."""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import assume, given, settings

from src.core.cpmm import get_amount_out
from src.core.errors import InsufficientLiquidityError, InvalidKError
from src.integration.registry import PoolRegistry

ASSET_X = "0x" + "11" * 20
ASSET_Y = "0x" + "22" * 20
LP = "0x" + "aa" * 20
DEPOSITOR = "0x" + "bb" * 20
TRADER = "0x" + "cc" * 20

_reserve = st.integers(min_value=10**4, max_value=10**30)
_trade = st.tuples(st.booleans(), st.integers(min_value=1, max_value=10**30))


def _seeded(reserve_a: int, reserve_b: int):
    registry = PoolRegistry(clock=lambda: 1_000)
    pair = registry.pair(registry.create_pool(ASSET_X, ASSET_Y))
    registry.ledger.credit(pair.address, pair.asset_a, reserve_a)
    registry.ledger.credit(pair.address, pair.asset_b, reserve_b)
    pair.mint(LP)
    return registry, pair


@settings(max_examples=200, deadline=None)
@given(reserve_a=_reserve, reserve_b=_reserve, trades=st.lists(_trade, min_size=1, max_size=8))
def test_k_never_decreases_across_swaps(reserve_a: int, reserve_b: int, trades) -> None:
    registry, pair = _seeded(reserve_a, reserve_b)

    for a_to_b, amount_in in trades:
        ra, rb, _ = pair.get_reserves()
        asset_in = pair.asset_a if a_to_b else pair.asset_b
        reserve_in, reserve_out = (ra, rb) if a_to_b else (rb, ra)
        out = get_amount_out(amount_in, reserve_in, reserve_out)
        if out == 0:
            continue
        registry.ledger.credit(pair.address, asset_in, amount_in)
        if a_to_b:
            pair.swap(0, out, TRADER)
        else:
            pair.swap(out, 0, TRADER)

        na, nb, _ = pair.get_reserves()
        assert na * nb >= ra * rb
        assert na == registry.ledger.balance_of(pair.asset_a, pair.address)
        assert nb == registry.ledger.balance_of(pair.asset_b, pair.address)


@settings(max_examples=200, deadline=None)
@given(reserve_a=_reserve, reserve_b=_reserve, amount_in=st.integers(min_value=1, max_value=10**30))
def test_one_unit_more_than_the_quote_is_rejected(reserve_a: int, reserve_b: int, amount_in: int) -> None:
    registry, pair = _seeded(reserve_a, reserve_b)
    out = get_amount_out(amount_in, reserve_a, reserve_b)
    registry.ledger.credit(pair.address, pair.asset_a, amount_in)
    before = pair.state

    with pytest.raises((InvalidKError, InsufficientLiquidityError)):
        pair.swap(0, out + 1, TRADER)
    assert pair.state == before


@settings(max_examples=200, deadline=None)
@given(
    reserve_a=_reserve,
    reserve_b=_reserve,
    deposit_a=st.integers(min_value=1, max_value=10**30),
    deposit_b=st.integers(min_value=1, max_value=10**30),
)
def test_mint_never_dilutes_existing_holders(reserve_a: int, reserve_b: int, deposit_a: int, deposit_b: int) -> None:
    registry, pair = _seeded(reserve_a, reserve_b)
    supply_before = pair.total_shares()
    # Value per share, compared cross-multiplied to stay in integers.
    ra, rb, _ = pair.get_reserves()

    registry.ledger.credit(pair.address, pair.asset_a, deposit_a)
    registry.ledger.credit(pair.address, pair.asset_b, deposit_b)
    # A dust deposit against a deep pool rounds down to zero shares.
    assume(deposit_a * supply_before // ra > 0 and deposit_b * supply_before // rb > 0)
    minted = pair.mint(DEPOSITOR)

    supply_after = pair.total_shares()
    na, nb, _ = pair.get_reserves()
    assert supply_after == supply_before + minted
    assert na * supply_before >= ra * supply_after
    assert nb * supply_before >= rb * supply_after

    # The depositor can never redeem more than it put in.
    assert minted * na // supply_after <= deposit_a
    assert minted * nb // supply_after <= deposit_b


@settings(max_examples=100, deadline=None)
@given(reserve_a=_reserve, reserve_b=_reserve)
def test_full_exit_leaves_only_locked_dust(reserve_a: int, reserve_b: int) -> None:
    registry, pair = _seeded(reserve_a, reserve_b)
    assume(pair.share_balance(LP) > 0)

    out_a, out_b = pair.burn(LP)

    assert pair.total_shares() == 1000
    ra, rb, _ = pair.get_reserves()
    assert ra + out_a == reserve_a
    assert rb + out_b == reserve_b
    assert registry.ledger.balance_of(pair.asset_a, LP) == out_a
