"""
Vault Error Taxonomy

Every failure the vault can surface is a distinct, named exception carrying
its parameters in ``.params``. Errors are grouped by category so callers can
catch broadly (``OracleError``) or precisely (``OracleIsDelayedBeyondMax``).

Nothing here is retried or recovered internally: raising any of these inside
a vault operation reverts the whole call (or batch) before it propagates.
"""

from typing import Any, Dict


class VaultError(Exception):
    """Base class. Keyword arguments become ``params`` and the message."""

    def __init__(self, **params: Any):
        self.params: Dict[str, Any] = params
        super().__init__(self._render())

    def _render(self) -> str:
        if not self.params:
            return type(self).__name__
        args = ", ".join(f"{k}={v!r}" for k, v in self.params.items())
        return f"{type(self).__name__}({args})"

    def __reduce__(self):
        return (_rebuild, (type(self), self.params))


def _rebuild(cls, params):
    return cls(**params)


# --- Categories ---

class MathError(VaultError):
    """Fixed-point overflow, underflow or invalid operand."""


class AuthorizationError(VaultError):
    """Caller does not hold the role the operation requires."""


class PhaseError(VaultError):
    """Operation is not legal in the vault's current lifecycle phase."""


class InvariantError(VaultError):
    """Arguments would break a vault invariant."""


class OracleError(VaultError):
    """External price could not be trusted."""


class ResourceError(VaultError):
    """Not enough of something: balance, allowance, claimable fees."""


class ConstructionError(VaultError):
    """Invalid vault parameters at creation time."""


# --- Math ---

class AddOverflow(MathError):
    pass

class SubUnderflow(MathError):
    pass

class MulOverflow(MathError):
    pass

class ZeroDivision(MathError):
    pass

class DivInternal(MathError):
    pass

class OutOfBounds(MathError):
    pass


# --- Authorization ---

class CallerIsNotOwner(AuthorizationError):
    pass

class CallerIsNotManager(AuthorizationError):
    pass

class CallerIsNotOwnerOrManager(AuthorizationError):
    pass

class NotPendingOwner(AuthorizationError):
    pass


# --- Phase ---

class VaultNotInitialized(PhaseError):
    pass

class VaultIsAlreadyInitialized(PhaseError):
    pass

class VaultIsFinalizing(PhaseError):
    pass

class VaultIsFinalized(PhaseError):
    pass

class FinalizationNotInitiated(PhaseError):
    pass

class NoticeTimeoutNotElapsed(PhaseError):
    pass


# --- Invariants ---

class ValueLengthIsNotSame(InvariantError):
    pass

class DifferentTokensInPosition(InvariantError):
    pass

class SumOfWeightIsNotOne(InvariantError):
    pass

class WeightChangeStartTimeIsAboveMax(InvariantError):
    pass

class WeightChangeEndTimeIsAboveMax(InvariantError):
    pass

class WeightChangeEndBeforeStart(InvariantError):
    pass

class WeightChangeDurationIsBelowMin(InvariantError):
    pass

class WeightChangeRatioIsAboveMax(InvariantError):
    pass

class WeightIsBelowMin(InvariantError):
    pass

class AmountIsZero(InvariantError):
    pass

class PoolSwapIsAlreadyEnabled(InvariantError):
    pass

class CannotSetSwapFeeBeforeCooldown(InvariantError):
    pass

class SwapFeePercentageChangeIsAboveMax(InvariantError):
    pass

class SwapFeeIsBelowMin(InvariantError):
    pass

class SwapFeeIsAboveMax(InvariantError):
    pass

class CannotSweepPoolToken(InvariantError):
    pass

class OwnerIsZeroAddress(InvariantError):
    pass

class NoPendingOwnershipTransfer(InvariantError):
    pass

class ManagerIsZeroAddress(InvariantError):
    pass

class ManagerIsOwner(InvariantError):
    pass

class VaultIsNotRenounceable(InvariantError):
    pass

class UnknownCall(InvariantError):
    pass


# --- Oracle ---

class OraclesAreDisabled(OracleError):
    pass

class OracleIsDelayedBeyondMax(OracleError):
    pass

class OraclePriceIsInvalid(OracleError):
    pass

class OracleSpotPriceDivergenceExceedsMax(OracleError):
    pass


# --- Resources ---

class AmountExceedAvailable(ResourceError):
    pass

class NoAvailableFeeForCaller(ResourceError):
    pass

class InsufficientBalance(ResourceError):
    pass


# --- Construction ---

class OracleLengthIsNotSame(ConstructionError):
    pass

class NumeraireAssetIndexExceedsTokenLength(ConstructionError):
    pass

class OracleIsZeroAddress(ConstructionError):
    pass

class NumeraireOracleIsNotZeroAddress(ConstructionError):
    pass

class ManagementFeeIsAboveMax(ConstructionError):
    pass

class MinFeeDurationIsZero(ConstructionError):
    pass

class MinReliableVaultValueIsZero(ConstructionError):
    pass

class MinSignificantDepositValueIsZero(ConstructionError):
    pass

class MaxOracleSpotDivergenceIsZero(ConstructionError):
    pass

class MaxOracleDelayIsZero(ConstructionError):
    pass

class ValidatorIsNotMatched(ConstructionError):
    pass

class UnsortedTokens(ConstructionError):
    pass

class DescriptionIsEmpty(ConstructionError):
    pass
