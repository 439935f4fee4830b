"""
Vault Event Models

Canonical records of every committed vault state transition. Each event
carries the holdings and pool weights immediately before and after it, so an
external observer can reconstruct the vault's history from the event log
alone (see ``persist.replay``).

Events are created inside a transaction, buffered, and only stamped with a
sequence number and dispatched once the outermost transaction commits.
"""

from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class VaultEvent(BaseModel):
    """Fields shared by every event."""
    seq: int = 0
    timestamp: int
    holdings_before: List[int]
    holdings_after: List[int]
    weights_before: List[int]
    weights_after: List[int]


class InitialDepositEvent(VaultEvent):
    event_type: Literal["InitialDeposit"] = "InitialDeposit"
    caller: str
    amounts: List[int]
    weights: List[int]


class DepositEvent(VaultEvent):
    event_type: Literal["Deposit"] = "Deposit"
    caller: str
    amounts: List[int]
    price_type: str


class WithdrawEvent(VaultEvent):
    event_type: Literal["Withdraw"] = "Withdraw"
    caller: str
    requested: List[int]
    amounts: List[int]
    allowances: List[int]


class ManagerFeesCheckpointedEvent(VaultEvent):
    event_type: Literal["ManagerFeesCheckpointed"] = "ManagerFeesCheckpointed"
    manager: str
    fees: List[int]
    fee_index: int


class DistributeManagerFeesEvent(VaultEvent):
    event_type: Literal["DistributeManagerFees"] = "DistributeManagerFees"
    manager: str
    amounts: List[int]


class UpdateWeightsGraduallyEvent(VaultEvent):
    event_type: Literal["UpdateWeightsGradually"] = "UpdateWeightsGradually"
    start_weights: List[int]
    target_weights: List[int]
    start_time: int
    end_time: int


class CancelWeightUpdatesEvent(VaultEvent):
    event_type: Literal["CancelWeightUpdates"] = "CancelWeightUpdates"
    weights: List[int]


class SetSwapEnabledEvent(VaultEvent):
    event_type: Literal["SetSwapEnabled"] = "SetSwapEnabled"
    enabled: bool
    # set when enabling also installed fixed weights
    weights: Optional[List[int]] = None


class SetSwapFeeEvent(VaultEvent):
    event_type: Literal["SetSwapFee"] = "SetSwapFee"
    swap_fee: int


class UpdateWeightsWithOraclePriceEvent(VaultEvent):
    event_type: Literal["UpdateWeightsWithOraclePrice"] = "UpdateWeightsWithOraclePrice"
    weights: List[int]
    prices: List[int]


class SetOraclesEnabledEvent(VaultEvent):
    event_type: Literal["SetOraclesEnabled"] = "SetOraclesEnabled"
    enabled: bool


class ManagerChangedEvent(VaultEvent):
    event_type: Literal["ManagerChanged"] = "ManagerChanged"
    previous_manager: str
    new_manager: str


class OwnershipTransferOfferedEvent(VaultEvent):
    event_type: Literal["OwnershipTransferOffered"] = "OwnershipTransferOffered"
    owner: str
    pending_owner: str


class OwnershipTransferCanceledEvent(VaultEvent):
    event_type: Literal["OwnershipTransferCanceled"] = "OwnershipTransferCanceled"
    owner: str
    canceled_owner: str


class OwnershipTransferredEvent(VaultEvent):
    event_type: Literal["OwnershipTransferred"] = "OwnershipTransferred"
    previous_owner: str
    new_owner: str


class FinalizationInitiatedEvent(VaultEvent):
    event_type: Literal["FinalizationInitiated"] = "FinalizationInitiated"
    notice_timeout_at: int


class FinalizedEvent(VaultEvent):
    event_type: Literal["Finalized"] = "Finalized"
    caller: str
    amounts: List[int]


class SweepEvent(VaultEvent):
    event_type: Literal["Sweep"] = "Sweep"
    token: str
    amount: int


AnyVaultEvent = Annotated[
    Union[
        InitialDepositEvent,
        DepositEvent,
        WithdrawEvent,
        ManagerFeesCheckpointedEvent,
        DistributeManagerFeesEvent,
        UpdateWeightsGraduallyEvent,
        CancelWeightUpdatesEvent,
        SetSwapEnabledEvent,
        SetSwapFeeEvent,
        UpdateWeightsWithOraclePriceEvent,
        SetOraclesEnabledEvent,
        ManagerChangedEvent,
        OwnershipTransferOfferedEvent,
        OwnershipTransferCanceledEvent,
        OwnershipTransferredEvent,
        FinalizationInitiatedEvent,
        FinalizedEvent,
        SweepEvent,
    ],
    Field(discriminator="event_type"),
]

_EVENT_ADAPTER: TypeAdapter = TypeAdapter(AnyVaultEvent)


def parse_event(payload: Dict) -> VaultEvent:
    """Decodes a dumped event dict back into its concrete model."""
    return _EVENT_ADAPTER.validate_python(payload)
