# [TESTER] v1

from __future__ import annotations

import pytest

from src.state.balances import NULL_ADDRESS
from src.state.canonical import canonical_address, canonical_json_bytes, domain_sep_bytes
from src.state.pools import PoolState, compute_pool_id, pool_address, sort_assets

ASSET_X = "0x" + "11" * 20
ASSET_Y = "0x" + "22" * 20


def test_sort_assets_is_order_independent_and_canonical() -> None:
    assert sort_assets(ASSET_Y, ASSET_X) == (ASSET_X, ASSET_Y)
    assert sort_assets("22" * 20, "11" * 20) == (ASSET_X, ASSET_Y)


def test_pool_id_is_deterministic_and_requires_canonical_order() -> None:
    pool_id = compute_pool_id(ASSET_X, ASSET_Y)
    assert pool_id == compute_pool_id(*sort_assets(ASSET_Y, ASSET_X))
    assert pool_id.startswith("0x") and len(pool_id) == 66
    with pytest.raises(ValueError, match="canonical order"):
        compute_pool_id(ASSET_Y, ASSET_X)


def test_pool_address_is_low_twenty_bytes() -> None:
    pool_id = compute_pool_id(ASSET_X, ASSET_Y)
    assert pool_address(pool_id) == "0x" + pool_id[-40:]
    with pytest.raises(ValueError):
        pool_address("0x1234")


def test_distinct_pairs_get_distinct_ids() -> None:
    asset_z = "0x" + "33" * 20
    ids = {compute_pool_id(ASSET_X, ASSET_Y), compute_pool_id(ASSET_X, asset_z), compute_pool_id(ASSET_Y, asset_z)}
    assert len(ids) == 3


def test_pool_state_bounds() -> None:
    pool_id = compute_pool_id(ASSET_X, ASSET_Y)
    address = pool_address(pool_id)
    PoolState(pool_id, address, ASSET_X, ASSET_Y, reserve_a=2**112 - 1, last_sync_time=2**32 - 1)
    with pytest.raises(ValueError):
        PoolState(pool_id, address, ASSET_X, ASSET_Y, reserve_a=2**112)
    with pytest.raises(ValueError):
        PoolState(pool_id, address, ASSET_X, ASSET_Y, last_sync_time=2**32)
    with pytest.raises(ValueError):
        PoolState(pool_id, address, ASSET_X, ASSET_Y, cumulative_price_b=2**256)
    with pytest.raises(TypeError):
        PoolState(pool_id, address, ASSET_X, ASSET_Y, reserve_b=1.5)


def test_pool_state_asset_invariants() -> None:
    pool_id = compute_pool_id(ASSET_X, ASSET_Y)
    address = pool_address(pool_id)
    assert not PoolState(pool_id, address).is_initialized
    with pytest.raises(ValueError, match="together"):
        PoolState(pool_id, address, ASSET_X, NULL_ADDRESS)
    with pytest.raises(ValueError, match="distinct"):
        PoolState(pool_id, address, ASSET_X, ASSET_X)


def test_pool_state_dict_round_trip() -> None:
    pool_id = compute_pool_id(ASSET_X, ASSET_Y)
    state = PoolState(
        pool_id, pool_address(pool_id), ASSET_X, ASSET_Y,
        reserve_a=5, reserve_b=7, last_sync_time=99, cumulative_price_a=2**200,
    )
    assert PoolState.from_dict(state.to_dict()) == state
    assert state.get_reserve(ASSET_Y) == 7
    assert state.get_constant_product() == 35
    with pytest.raises(ValueError):
        state.get_reserve(NULL_ADDRESS)
    with pytest.raises(KeyError):
        PoolState.from_dict({"pool_id": pool_id})


def test_canonical_address_rules() -> None:
    assert canonical_address("AB" * 20) == "0x" + "ab" * 20
    with pytest.raises(ValueError):
        canonical_address("0x1234")
    with pytest.raises(ValueError):
        canonical_address("0x" + "zz" * 20)
    with pytest.raises(TypeError):
        canonical_address(None)  # type: ignore[arg-type]


def test_canonical_json_is_key_sorted_and_rejects_floats() -> None:
    assert canonical_json_bytes({"b": 1, "a": [2**130]}) == b'{"a":[' + str(2**130).encode() + b'],"b":1}'
    with pytest.raises(TypeError):
        canonical_json_bytes({"x": 1.0})


def test_domain_separator_shape() -> None:
    assert domain_sep_bytes("pool_id") == b"pairpool:pool_id:v1\x00"
    with pytest.raises(ValueError):
        domain_sep_bytes("bad\x00label")
