"""
Constant Product Market Maker (CPMM) pair math.

This module maps the integer kernels onto the pair's error taxonomy. It is
pure: callers pass in reserves and observed custody balances and receive
typed results or a `PoolError`.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic / Deterministic Rounding
- Time Complexity: O(1) per operation
- Space Complexity: O(1) auxiliary
- Invariant: After each swap, balance_a * balance_b >= reserve_a * reserve_b (zero fee)
"""

from ..kernels.python.cpmm_check import SwapCheckResult
from ..kernels.python.cpmm_check import check_swap as _kernel_check_swap
from ..kernels.python.cpmm_check import max_amount_out as _kernel_max_amount_out
from ..kernels.python.cpmm_check import min_amount_in as _kernel_min_amount_in
from ..kernels.python.cpmm_check import quote as _kernel_quote
from ..kernels.python.share_math import MINIMUM_LOCKED_SHARES, BurnSharesResult, MintSharesResult
from ..kernels.python.share_math import burn_shares as _kernel_burn_shares
from ..kernels.python.share_math import mint_shares as _kernel_mint_shares
from ..state.balances import Amount
from .errors import (
    InsufficientLiquidityBurnedError,
    InsufficientLiquidityError,
    InsufficientLiquidityMintedError,
    InsufficientOutputAmountError,
    InvalidKError,
    UnderflowError,
)


def compute_shares_minted(
    reserve_a: Amount,
    reserve_b: Amount,
    balance_a: Amount,
    balance_b: Amount,
    total_supply: Amount,
    min_locked: int = MINIMUM_LOCKED_SHARES,
) -> MintSharesResult:
    """
    Compute shares to issue for assets pushed into custody.

    For the first deposit (total_supply == 0):
        shares = floor(sqrt(contributed_a * contributed_b)) - min_locked
        (min_locked more shares go to the permanent sink)

    For subsequent deposits:
        shares = min(floor(contributed_a * total_supply / reserve_a),
                     floor(contributed_b * total_supply / reserve_b))

    The minimum prices an unbalanced deposit at its less generous side, so it
    cannot dilute existing holders.

    Args:
        reserve_a: Synced reserve of asset_a
        reserve_b: Synced reserve of asset_b
        balance_a: Observed custody balance of asset_a
        balance_b: Observed custody balance of asset_b
        total_supply: Current share supply
        min_locked: Shares locked on the first deposit

    Returns:
        MintSharesResult with the contributions and shares_minted > 0

    Raises:
        UnderflowError: If a custody balance is below its reserve
        InsufficientLiquidityMintedError: If the deposit earns no shares
    """
    if balance_a < reserve_a or balance_b < reserve_b:
        raise UnderflowError(
            f"custody below reserves: ({balance_a}, {balance_b}) < ({reserve_a}, {reserve_b})"
        )

    res = _kernel_mint_shares(
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        balance_a=balance_a,
        balance_b=balance_b,
        total_supply=total_supply,
        min_locked=min_locked,
    )
    if res.shares_minted <= 0:
        raise InsufficientLiquidityMintedError(
            f"deposit ({res.contributed_a}, {res.contributed_b}) mints {res.shares_minted} shares"
        )
    return res


def compute_burn_amounts(
    liquidity: Amount,
    balance_a: Amount,
    balance_b: Amount,
    total_supply: Amount,
) -> BurnSharesResult:
    """
    Compute asset amounts owed for redeeming `liquidity` shares.

    Formula (against live custody balances, not synced reserves):
        amount_a = floor(liquidity * balance_a / total_supply)
        amount_b = floor(liquidity * balance_b / total_supply)

    Raises:
        InsufficientLiquidityBurnedError: If either amount is zero
    """
    if total_supply <= 0 or liquidity <= 0:
        raise InsufficientLiquidityBurnedError(f"nothing to redeem: liquidity={liquidity}, supply={total_supply}")

    res = _kernel_burn_shares(
        liquidity=liquidity,
        balance_a=balance_a,
        balance_b=balance_b,
        total_supply=total_supply,
    )
    if res.amount_a_out == 0 or res.amount_b_out == 0:
        raise InsufficientLiquidityBurnedError(
            f"redemption pays ({res.amount_a_out}, {res.amount_b_out})"
        )
    return res


def verify_swap(
    reserve_a: Amount,
    reserve_b: Amount,
    custody_a: Amount,
    custody_b: Amount,
    amount_a_out: Amount,
    amount_b_out: Amount,
) -> SwapCheckResult:
    """
    Validate a swap against the constant-product invariant.

    The outputs are treated as already sent:
        balance_a = custody_a - amount_a_out
        balance_b = custody_b - amount_b_out
        require balance_a * balance_b >= reserve_a * reserve_b

    Raises:
        InsufficientOutputAmountError: If both outputs are zero
        InsufficientLiquidityError: If an output is not strictly below its reserve
        UnderflowError: If custody holds less than a requested output
        InvalidKError: If the product would decrease
    """
    if amount_a_out < 0 or amount_b_out < 0:
        raise ValueError(f"Output amounts must be non-negative: ({amount_a_out}, {amount_b_out})")
    if amount_a_out == 0 and amount_b_out == 0:
        raise InsufficientOutputAmountError("swap must request a non-zero output")
    if amount_a_out >= reserve_a or amount_b_out >= reserve_b:
        raise InsufficientLiquidityError(
            f"outputs ({amount_a_out}, {amount_b_out}) exceed reserves ({reserve_a}, {reserve_b})"
        )
    if custody_a < amount_a_out or custody_b < amount_b_out:
        raise UnderflowError(
            f"custody ({custody_a}, {custody_b}) below outputs ({amount_a_out}, {amount_b_out})"
        )

    res = _kernel_check_swap(
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        custody_a=custody_a,
        custody_b=custody_b,
        amount_a_out=amount_a_out,
        amount_b_out=amount_b_out,
    )
    if not res.ok:
        raise InvalidKError(res.k_before, res.k_after)
    return res


def quote(amount_a: Amount, reserve_a: Amount, reserve_b: Amount) -> Amount:
    """Amount of asset_b worth `amount_a` at the current reserve ratio."""
    if reserve_a == 0 or reserve_b == 0:
        raise InsufficientLiquidityError("cannot quote against an empty reserve")
    return _kernel_quote(amount_a=amount_a, reserve_a=reserve_a, reserve_b=reserve_b)


def get_amount_out(amount_in: Amount, reserve_in: Amount, reserve_out: Amount) -> Amount:
    """Largest output a swap accepts for `amount_in` pushed in (zero fee)."""
    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidityError("cannot price against an empty reserve")
    return _kernel_max_amount_out(amount_in=amount_in, reserve_in=reserve_in, reserve_out=reserve_out)


def get_amount_in(amount_out: Amount, reserve_in: Amount, reserve_out: Amount) -> Amount:
    """Smallest input a swap accepts for `amount_out` taken out (zero fee)."""
    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidityError("cannot price against an empty reserve")
    if amount_out >= reserve_out:
        raise InsufficientLiquidityError(f"amount_out ({amount_out}) >= reserve_out ({reserve_out})")
    return _kernel_min_amount_in(amount_out=amount_out, reserve_in=reserve_in, reserve_out=reserve_out)
