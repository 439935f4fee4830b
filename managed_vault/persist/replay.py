"""Rebuild vault snapshots from the event journal.

``apply_event`` folds one committed event onto a snapshot. Starting from the
newest stored snapshot and folding every later event must reproduce the
live vault's ``snapshot()`` exactly; the test-suite checks this for every
event type.
"""
from __future__ import annotations
from typing import Iterable, Optional

from loguru import logger

from managed_vault.core import events as ev
from managed_vault.core.custom_types import VaultPhase, WeightWindow
from managed_vault.vault.state import VaultSnapshot


class ReplayError(Exception):
    pass


def apply_event(snap: VaultSnapshot, event: ev.VaultEvent) -> VaultSnapshot:
    s = snap.model_copy(deep=True)
    ts = event.timestamp

    if isinstance(event, ev.InitialDepositEvent):
        s.phase = VaultPhase.ACTIVE
        s.window = WeightWindow.static(event.weights, ts)
        s.last_checkpoint = ts
        s.last_holdings_change_at = ts
    elif isinstance(event, (ev.DepositEvent, ev.WithdrawEvent)):
        s.window = WeightWindow.static(event.weights_after, ts)
        s.last_holdings_change_at = ts
    elif isinstance(event, ev.ManagerFeesCheckpointedEvent):
        if any(event.fees):
            owed = s.fee_per_manager.setdefault(event.manager, [0] * len(event.fees))
            for i, fee in enumerate(event.fees):
                s.manager_fee_total[i] += fee
                owed[i] += fee
            s.last_holdings_change_at = ts
        s.last_checkpoint = max(s.last_checkpoint, ts)
    elif isinstance(event, ev.DistributeManagerFeesEvent):
        for i, amount in enumerate(event.amounts):
            s.manager_fee_total[i] -= amount
        s.fee_per_manager.pop(event.manager, None)
    elif isinstance(event, ev.UpdateWeightsGraduallyEvent):
        s.window = WeightWindow(
            start_weights=event.start_weights,
            end_weights=event.target_weights,
            start_time=event.start_time,
            end_time=event.end_time,
        )
    elif isinstance(event, ev.CancelWeightUpdatesEvent):
        s.window = WeightWindow.static(event.weights, ts)
    elif isinstance(event, ev.SetSwapEnabledEvent):
        s.swap_enabled = event.enabled
        if event.weights is not None:
            s.window = WeightWindow.static(event.weights, ts)
    elif isinstance(event, ev.SetSwapFeeEvent):
        s.swap_fee = event.swap_fee
        s.swap_fee_changed_at = ts
    elif isinstance(event, ev.UpdateWeightsWithOraclePriceEvent):
        s.window = WeightWindow.static(event.weights, ts)
    elif isinstance(event, ev.SetOraclesEnabledEvent):
        s.oracles_enabled = event.enabled
    elif isinstance(event, ev.ManagerChangedEvent):
        s.manager = event.new_manager
    elif isinstance(event, ev.OwnershipTransferOfferedEvent):
        s.pending_owner = event.pending_owner
    elif isinstance(event, ev.OwnershipTransferCanceledEvent):
        s.pending_owner = None
    elif isinstance(event, ev.OwnershipTransferredEvent):
        s.owner = event.new_owner
        s.pending_owner = None
    elif isinstance(event, ev.FinalizationInitiatedEvent):
        s.phase = VaultPhase.FINALIZING
        s.notice_timeout_at = event.notice_timeout_at
    elif isinstance(event, ev.FinalizedEvent):
        s.phase = VaultPhase.FINALIZED
        s.window = WeightWindow.static(event.weights_after, ts)
    elif isinstance(event, ev.SweepEvent):
        pass
    else:
        raise ReplayError(f"Unknown event type {type(event).__name__}")

    s.holdings = list(event.holdings_after)
    s.last_seq = event.seq
    return s


def fold(snapshot: VaultSnapshot, events: Iterable[ev.VaultEvent]) -> VaultSnapshot:
    for event in events:
        if event.seq != snapshot.last_seq + 1:
            raise ReplayError(f"Gap in event log: expected seq {snapshot.last_seq + 1}, got {event.seq}")
        snapshot = apply_event(snapshot, event)
    return snapshot


def rebuild_snapshot(journal, upto_seq: Optional[int] = None) -> VaultSnapshot:
    """
    Newest stored snapshot (at or before ``upto_seq``) plus the events after
    it, up to ``upto_seq`` when given.
    """
    base = journal.latest_snapshot(max_seq=upto_seq)
    if base is None:
        raise ReplayError("Journal holds no snapshot to replay from.")
    events = journal.events(after_seq=base.last_seq)
    if upto_seq is not None:
        events = [e for e in events if e.seq <= upto_seq]
    result = fold(base, events)
    logger.info(f"[Replay] rebuilt seq {result.last_seq} from snapshot {base.last_seq} + {len(events)} event(s)")
    return result
