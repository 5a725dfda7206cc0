# [TESTER] v1

from __future__ import annotations

import pytest

from src.core.config import PoolConfig
from src.core.errors import (
    AlreadyInitializedError,
    BalanceOverflowError,
    IdenticalAssetsError,
    InsufficientLiquidityBurnedError,
    InvalidKError,
    LockedError,
    TransferFailedError,
    ZeroAddressError,
)
from src.core.events import Burn, EventLog, Swap
from src.core.pair import Pair
from src.integration.custody import LedgerCustody
from src.kernels.python.uq112x112 import UINT112_MAX
from src.state.balances import NULL_ADDRESS, AssetLedger
from src.state.lp import ShareLedger
from src.state.pools import PoolState, compute_pool_id, pool_address

E18 = 10**18
ASSET_X = "0x" + "11" * 20
ASSET_Y = "0x" + "22" * 20
ASSET_Z = "0x" + "33" * 20
ALICE = "0x" + "aa" * 20
TRADER = "0x" + "cc" * 20
EVE = "0x" + "ee" * 20


def _pair(
    ledger: AssetLedger,
    transfer=None,
    config: PoolConfig = PoolConfig(),
    assets: tuple = (ASSET_X, ASSET_Y),
) -> Pair:
    pool_id = compute_pool_id(*assets)
    address = pool_address(pool_id)
    pair = Pair(
        PoolState(pool_id=pool_id, address=address),
        shares=ShareLedger(),
        custody=LedgerCustody(ledger, address, transfer=transfer),
        config=config,
        clock=lambda: 1_000,
        events=EventLog(),
    )
    pair.initialize(*assets)
    return pair


def _seed(ledger: AssetLedger, pair: Pair, amount_a: int, amount_b: int) -> None:
    ledger.credit(pair.address, pair.asset_a, amount_a)
    ledger.credit(pair.address, pair.asset_b, amount_b)
    pair.mint(ALICE)


def test_initialize_runs_once() -> None:
    pair = _pair(AssetLedger())
    with pytest.raises(AlreadyInitializedError):
        pair.initialize(ASSET_X, ASSET_Y)


def test_initialize_rejects_degenerate_pairs() -> None:
    ledger = AssetLedger()
    pool_id = compute_pool_id(ASSET_X, ASSET_Y)
    address = pool_address(pool_id)

    def fresh() -> Pair:
        return Pair(
            PoolState(pool_id=pool_id, address=address),
            shares=ShareLedger(),
            custody=LedgerCustody(ledger, address),
        )

    with pytest.raises(IdenticalAssetsError):
        fresh().initialize(ASSET_X, ASSET_X)
    with pytest.raises(ZeroAddressError):
        fresh().initialize(NULL_ADDRESS, ASSET_Y)


def test_balance_overflow_is_fatal_and_rolls_back_shares() -> None:
    ledger = AssetLedger()
    pair = _pair(ledger)
    ledger.credit(pair.address, pair.asset_a, UINT112_MAX + 1)
    ledger.credit(pair.address, pair.asset_b, E18)

    with pytest.raises(BalanceOverflowError):
        pair.mint(ALICE)

    assert pair.total_shares() == 0
    assert pair.share_balance(ALICE) == 0
    assert pair.get_reserves()[:2] == (0, 0)
    assert len(pair.events) == 0


def test_reserves_up_to_the_bound_are_accepted() -> None:
    ledger = AssetLedger()
    pair = _pair(ledger)
    _seed(ledger, pair, UINT112_MAX, UINT112_MAX)
    assert pair.get_reserves()[:2] == (UINT112_MAX, UINT112_MAX)
    assert pair.share_balance(ALICE) == UINT112_MAX - 1000


def test_narrower_reserve_width_from_config() -> None:
    ledger = AssetLedger()
    pair = _pair(ledger, config=PoolConfig(reserve_bits=64))
    ledger.credit(pair.address, pair.asset_a, 1 << 64)
    ledger.credit(pair.address, pair.asset_b, E18)
    with pytest.raises(BalanceOverflowError):
        pair.mint(ALICE)


def test_failed_transfer_rolls_back_burn() -> None:
    ledger = AssetLedger()
    fail_asset = {"asset": None}

    def transfer(asset, sender, to, amount):
        if asset == fail_asset["asset"]:
            return False
        return ledger.transfer(asset, sender, to, amount)

    pair = _pair(ledger, transfer=transfer)
    _seed(ledger, pair, E18, E18)
    fail_asset["asset"] = pair.asset_b
    shares_before = pair.share_balance(ALICE)

    with pytest.raises(TransferFailedError):
        pair.burn(ALICE)

    # asset_a had already left custody; the rollback must bring it back.
    assert ledger.balance_of(pair.asset_a, pair.address) == E18
    assert ledger.balance_of(pair.asset_a, ALICE) == 0
    assert pair.share_balance(ALICE) == shares_before
    assert pair.get_reserves()[:2] == (E18, E18)
    assert pair.events.of_type(Burn) == []


def test_ambiguous_transfer_result_counts_as_failure() -> None:
    ledger = AssetLedger()
    pair = _pair(ledger, transfer=lambda asset, sender, to, amount: None)
    _seed(ledger, pair, E18, E18)
    ledger.credit(pair.address, pair.asset_a, E18 // 10)

    with pytest.raises(TransferFailedError, match="None"):
        pair.swap(0, E18 // 20, TRADER)
    assert pair.get_reserves()[:2] == (E18, E18)


def test_raising_transfer_is_wrapped() -> None:
    ledger = AssetLedger()

    def transfer(asset, sender, to, amount):
        raise RuntimeError("token paused")

    pair = _pair(ledger, transfer=transfer)
    _seed(ledger, pair, E18, E18)
    ledger.credit(pair.address, pair.asset_a, E18 // 10)

    with pytest.raises(TransferFailedError) as exc_info:
        pair.swap(0, E18 // 20, TRADER)
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_reentrant_swap_from_transfer_hook_is_locked_out() -> None:
    ledger = AssetLedger()
    holder = {}

    def hostile_transfer(asset, sender, to, amount):
        # A hostile asset calls back into the pair before the outer swap finishes.
        holder["pair"].swap(0, 1, TRADER)
        return ledger.transfer(asset, sender, to, amount)

    pair = _pair(ledger, transfer=hostile_transfer)
    holder["pair"] = pair
    _seed(ledger, pair, E18, E18)
    ledger.credit(pair.address, pair.asset_a, E18 // 10)

    with pytest.raises(LockedError):
        pair.swap(0, E18 // 20, TRADER)

    assert pair.get_reserves()[:2] == (E18, E18)
    assert ledger.balance_of(pair.asset_b, TRADER) == 0
    assert pair.events.of_type(Swap) == []


def test_pair_is_usable_after_a_rollback() -> None:
    ledger = AssetLedger()
    pair = _pair(ledger)
    _seed(ledger, pair, E18, E18)
    ledger.credit(pair.address, pair.asset_a, E18 // 10)

    with pytest.raises(InvalidKError):
        pair.swap(0, E18 // 2, TRADER)
    pair.swap(0, E18 // 20, TRADER)

    assert ledger.balance_of(pair.asset_b, TRADER) == E18 // 20


def test_locked_shares_at_the_sink_cannot_be_burned() -> None:
    ledger = AssetLedger()
    pair = _pair(ledger)
    _seed(ledger, pair, E18, E18)
    pair.burn(ALICE)

    with pytest.raises(InsufficientLiquidityBurnedError):
        pair.burn(NULL_ADDRESS, to=EVE)

    assert pair.total_shares() == 1000
    assert pair.share_balance(NULL_ADDRESS) == 1000
    assert pair.get_reserves()[:2] == (1000, 1000)
    assert ledger.balance_of(pair.asset_a, EVE) == 0


def test_custom_sink_is_also_locked() -> None:
    ledger = AssetLedger()
    sink = "0x" + "de" * 20
    pair = _pair(ledger, config=PoolConfig(locked_shares_sink=sink))
    _seed(ledger, pair, E18, E18)

    with pytest.raises(InsufficientLiquidityBurnedError):
        pair.burn(sink)
    assert pair.share_balance(sink) == 1000


def test_rollback_leaves_other_pairs_on_the_shared_ledger_alone() -> None:
    ledger = AssetLedger()
    holder = {}

    def hook(asset, sender, to, amount):
        # Another pair settles a swap on the same ledger, then this transfer fails.
        if asset == ASSET_Y:
            ledger.credit(holder["other"].address, ASSET_Y, 1_000)
            holder["other"].swap(0, 900, TRADER)
            return False
        return ledger.transfer(asset, sender, to, amount)

    pair = _pair(ledger, transfer=hook)
    other = _pair(ledger, assets=(ASSET_Y, ASSET_Z))
    holder["other"] = other
    _seed(ledger, pair, 10**6, 10**6)
    _seed(ledger, other, 10**6, 10**6)

    with pytest.raises(TransferFailedError):
        pair.burn(ALICE)

    # The failed burn is fully undone.
    assert pair.get_reserves()[:2] == (10**6, 10**6)
    assert ledger.balance_of(ASSET_X, pair.address) == 10**6
    assert ledger.balance_of(ASSET_X, ALICE) == 0
    # The other pair's committed swap survives.
    assert ledger.balance_of(ASSET_Z, TRADER) == 900
    assert other.get_reserves()[:2] == (10**6 + 1_000, 10**6 - 900)
    assert ledger.balance_of(ASSET_Y, other.address) == 10**6 + 1_000
    assert ledger.balance_of(ASSET_Z, other.address) == 10**6 - 900
    assert other.events.of_type(Swap) != []


def test_unrelated_ledger_writes_survive_a_rollback() -> None:
    ledger = AssetLedger()

    def hook(asset, sender, to, amount):
        ledger.credit(EVE, ASSET_X, 7)
        return False

    pair = _pair(ledger, transfer=hook)
    _seed(ledger, pair, E18, E18)
    ledger.credit(pair.address, pair.asset_a, E18 // 10)

    with pytest.raises(TransferFailedError):
        pair.swap(0, E18 // 20, TRADER)
    assert ledger.balance_of(ASSET_X, EVE) == 7
