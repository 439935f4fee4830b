"""Role checks and the two-step ownership transfer."""
from typing import Optional

from loguru import logger

from managed_vault.core.custom_types import Address, is_zero_address
from managed_vault.core.errors import (
    CallerIsNotManager,
    CallerIsNotOwner,
    CallerIsNotOwnerOrManager,
    ManagerIsOwner,
    ManagerIsZeroAddress,
    NoPendingOwnershipTransfer,
    NotPendingOwner,
    OwnerIsZeroAddress,
    VaultIsNotRenounceable,
)
from managed_vault.vault.state import VaultState


def require_owner(state: VaultState, caller: Address) -> None:
    if caller != state.owner:
        raise CallerIsNotOwner(caller=caller)


def require_manager(state: VaultState, caller: Address) -> None:
    if caller != state.manager:
        raise CallerIsNotManager(caller=caller)


def require_owner_or_manager(state: VaultState, caller: Address) -> None:
    if caller != state.owner and caller != state.manager:
        raise CallerIsNotOwnerOrManager(caller=caller)


def check_manager(owner: Address, manager: Optional[Address]) -> None:
    if is_zero_address(manager):
        raise ManagerIsZeroAddress()
    if manager == owner:
        raise ManagerIsOwner(manager=manager)


def offer(state: VaultState, new_owner: Address) -> None:
    if is_zero_address(new_owner):
        raise OwnerIsZeroAddress()
    state.pending_owner = new_owner
    logger.info(f"[Ownership] offered to {new_owner}")


def cancel_offer(state: VaultState) -> Address:
    if state.pending_owner is None:
        raise NoPendingOwnershipTransfer()
    canceled, state.pending_owner = state.pending_owner, None
    return canceled


def accept(state: VaultState, caller: Address) -> Address:
    """Completes a pending transfer; returns the previous owner."""
    if state.pending_owner is None or caller != state.pending_owner:
        raise NotPendingOwner(caller=caller)
    previous, state.owner, state.pending_owner = state.owner, caller, None
    logger.info(f"[Ownership] {previous} -> {caller}")
    return previous


def renounce() -> None:
    raise VaultIsNotRenounceable()
