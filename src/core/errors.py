"""Exception types for the pair engine and registry.

Every failure aborts the enclosing operation; the pair rolls back any partial
state before the exception reaches the caller.
"""

from __future__ import annotations


class PoolError(Exception):
    """Base class for all pair and registry failures."""


# -- Input validation ---------------------------------------------------------


class IdenticalAssetsError(PoolError):
    """Raised when a pool is requested for an asset paired with itself."""


class ZeroAddressError(PoolError):
    """Raised when the lower asset of an ordered pair is the null address."""


class PoolExistsError(PoolError):
    """Raised when a pool for the ordered pair is already registered."""


class AlreadyInitializedError(PoolError):
    """Raised on a second `initialize` call."""


class NotInitializedError(PoolError):
    """Raised when an operation reaches a pair whose assets are still unset."""


class InsufficientOutputAmountError(PoolError):
    """Raised when a swap requests zero of both assets."""


class InvalidRecipientError(PoolError):
    """Raised when a swap names one of the pair's own assets as recipient."""


class LockedError(PoolError):
    """Raised when a pair operation is re-entered before the current one finishes."""


# -- Liquidity math -----------------------------------------------------------


class InsufficientLiquidityMintedError(PoolError):
    """Raised when a deposit would issue zero (or fewer) shares."""


class InsufficientLiquidityBurnedError(PoolError):
    """Raised when a redemption would pay out zero of either asset."""


# -- Invariant / solvency -----------------------------------------------------


class InsufficientLiquidityError(PoolError):
    """Raised when a requested output is not strictly below its reserve."""


class InvalidKError(PoolError):
    """Raised when post-swap balances multiply to less than the pre-swap reserves."""

    def __init__(self, k_before: int, k_after: int) -> None:
        self.k_before = k_before
        self.k_after = k_after
        super().__init__(f"k decreased: {k_after} < {k_before}")


class BalanceOverflowError(PoolError):
    """Raised when a balance no longer fits the bounded reserve width."""


# -- Collaborator failure -----------------------------------------------------


class TransferFailedError(PoolError):
    """Raised when an asset transfer reports failure or an ambiguous result."""


class UnderflowError(PoolError):
    """Raised when custody holds less than the synced reserve (negative contribution)."""
