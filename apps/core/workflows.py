"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Workflow state machine for every status-bearing ledger
             entity. A pure function of (current status, requested
             status, linked-entity states) returning the new status, the
             fields to stamp and the side-effect writes on other entities.
-------------------------------------------------------------------------
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from apps.accounting.models import JournalEntryStatus, VoucherStatus
from apps.accounting.validation import ensure_postable
from apps.budgeting.models import BudgetItemStatus, ObligationStatus
from apps.core.exceptions import WorkflowTransitionException
from apps.hris.models import PayrollStatus
from apps.planning.models import AIPItemStatus, AIPStatus
from apps.treasury.models import CollectionStatus, DisbursementStatus


class Entity:
    """Names of the status-bearing entities known to the state machine."""
    AIP = 'aip'
    AIP_ITEM = 'aip_item'
    BUDGET_ITEM = 'budget_item'
    OBLIGATION = 'obligation'
    JOURNAL_ENTRY = 'journal_entry'
    VOUCHER = 'voucher'
    DISBURSEMENT = 'disbursement'
    COLLECTION = 'collection'
    PAYROLL = 'payroll'


MODEL_LABELS = {
    Entity.AIP: 'planning.AnnualInvestmentPlan',
    Entity.AIP_ITEM: 'planning.AIPItem',
    Entity.BUDGET_ITEM: 'budgeting.BudgetItem',
    Entity.OBLIGATION: 'budgeting.BudgetObligation',
    Entity.JOURNAL_ENTRY: 'accounting.JournalEntry',
    Entity.VOUCHER: 'accounting.Voucher',
    Entity.DISBURSEMENT: 'treasury.Disbursement',
    Entity.COLLECTION: 'treasury.Collection',
    Entity.PAYROLL: 'hris.Payroll',
}


# Define valid state transitions
TRANSITIONS = {
    Entity.AIP: {
        AIPStatus.DRAFT: [AIPStatus.SUBMITTED],
        AIPStatus.SUBMITTED: [AIPStatus.APPROVED, AIPStatus.REJECTED],
        AIPStatus.APPROVED: [],
        AIPStatus.REJECTED: [AIPStatus.DRAFT],
    },
    Entity.AIP_ITEM: {
        AIPItemStatus.DRAFT: [AIPItemStatus.APPROVED, AIPItemStatus.REJECTED],
        AIPItemStatus.APPROVED: [AIPItemStatus.IN_PROGRESS, AIPItemStatus.REJECTED],
        AIPItemStatus.IN_PROGRESS: [AIPItemStatus.COMPLETED, AIPItemStatus.REJECTED],
        AIPItemStatus.COMPLETED: [AIPItemStatus.REJECTED],
        AIPItemStatus.REJECTED: [],
    },
    Entity.BUDGET_ITEM: {
        BudgetItemStatus.ACTIVE: [BudgetItemStatus.DEPLETED, BudgetItemStatus.CANCELLED],
        BudgetItemStatus.DEPLETED: [BudgetItemStatus.ACTIVE, BudgetItemStatus.CANCELLED],
        BudgetItemStatus.CANCELLED: [],
    },
    Entity.OBLIGATION: {
        ObligationStatus.PENDING: [ObligationStatus.APPROVED, ObligationStatus.CANCELLED],
        ObligationStatus.APPROVED: [ObligationStatus.PROCESSED],
        ObligationStatus.PROCESSED: [],
        ObligationStatus.CANCELLED: [],
    },
    Entity.JOURNAL_ENTRY: {
        JournalEntryStatus.DRAFT: [JournalEntryStatus.POSTED, JournalEntryStatus.CANCELLED],
        JournalEntryStatus.POSTED: [],
        JournalEntryStatus.CANCELLED: [],
    },
    Entity.VOUCHER: {
        VoucherStatus.DRAFT: [VoucherStatus.APPROVED, VoucherStatus.CANCELLED],
        VoucherStatus.APPROVED: [VoucherStatus.PAID],
        VoucherStatus.PAID: [VoucherStatus.APPROVED],
        VoucherStatus.CANCELLED: [],
    },
    Entity.DISBURSEMENT: {
        DisbursementStatus.ISSUED: [DisbursementStatus.CLEARED],
        DisbursementStatus.CLEARED: [DisbursementStatus.CANCELLED],
        DisbursementStatus.CANCELLED: [],
    },
    Entity.COLLECTION: {
        CollectionStatus.RECORDED: [CollectionStatus.DEPOSITED, CollectionStatus.CANCELLED],
        CollectionStatus.DEPOSITED: [],
        CollectionStatus.CANCELLED: [],
    },
    Entity.PAYROLL: {
        PayrollStatus.DRAFT: [PayrollStatus.FINALIZED],
        PayrollStatus.FINALIZED: [],
    },
}

# Reached only as a side effect of another operation, never requested directly
SYSTEM_ONLY = {
    (Entity.OBLIGATION, ObligationStatus.APPROVED, ObligationStatus.PROCESSED),
    (Entity.VOUCHER, VoucherStatus.APPROVED, VoucherStatus.PAID),
    (Entity.VOUCHER, VoucherStatus.PAID, VoucherStatus.APPROVED),
    (Entity.BUDGET_ITEM, BudgetItemStatus.DEPLETED, BudgetItemStatus.ACTIVE),
}

# Actor/timestamp fields written together with the new status
STAMPS = {
    (Entity.AIP, AIPStatus.APPROVED): ('approved_by', 'approved_at'),
    (Entity.OBLIGATION, ObligationStatus.APPROVED): ('approved_by', 'approved_at'),
    (Entity.OBLIGATION, ObligationStatus.PROCESSED): ('processed_by', 'processed_at'),
    (Entity.JOURNAL_ENTRY, JournalEntryStatus.POSTED): ('posted_by', 'posted_at'),
    (Entity.VOUCHER, VoucherStatus.APPROVED): ('approved_by', 'approved_at'),
    (Entity.DISBURSEMENT, DisbursementStatus.CLEARED): ('cleared_at',),
    (Entity.COLLECTION, CollectionStatus.DEPOSITED): ('deposited_at',),
    (Entity.PAYROLL, PayrollStatus.FINALIZED): ('finalized_by', 'finalized_at'),
}


@dataclass(frozen=True)
class SideEffect:
    """A planned status write on another entity (e.g. the source obligation)."""

    model_label: str
    pk: Any
    plan: 'TransitionPlan'


@dataclass(frozen=True)
class TransitionPlan:
    """
    Outcome of a legal transition request.

    Attributes:
        entity: Entity name.
        current: Status before the transition.
        target: New status.
        stamp_fields: Actor (``*_by``) and timestamp (``*_at``) fields to set.
        side_effects: Writes that must commit in the same unit of work.
    """

    entity: str
    current: str
    target: str
    stamp_fields: Tuple[str, ...] = ()
    side_effects: List[SideEffect] = field(default_factory=list)

    def build_patch(self, actor_id: Optional[int], now: datetime) -> Dict[str, Any]:
        """Field patch for the storage update: status plus stamps."""
        patch = {'status': str(self.target)}
        for name in self.stamp_fields:
            if name.endswith('_by'):
                patch[f'{name}_id'] = actor_id
            else:
                patch[name] = now
        return patch


def get_valid_transitions(entity: str, current_status: str) -> List[str]:
    """
    Get the list of valid next states for an entity in its current status.

    Args:
        entity: One of the Entity names.
        current_status: Current status value.

    Returns:
        List of valid next status values (system-only steps included).
    """
    try:
        table = TRANSITIONS[entity]
    except KeyError:
        raise WorkflowTransitionException(
            f"Unknown workflow entity '{entity}'.",
            details={'entity': entity}
        )
    return table.get(current_status, [])


def can_transition(entity: str, current_status: str, target_status: str, system: bool = False) -> bool:
    """
    Check if a transition from current_status to target_status is reachable.

    Guards that depend on linked entities are not evaluated here.
    """
    if target_status not in get_valid_transitions(entity, current_status):
        return False
    return system or (entity, current_status, target_status) not in SYSTEM_ONLY


def _reject(entity: str, current: str, target: str, message: str, **details: Any) -> None:
    raise WorkflowTransitionException(
        message,
        details={'entity': entity, 'from_status': str(current), 'to_status': str(target), **details}
    )


def plan_transition(
    entity: str,
    current: str,
    target: str,
    context: Optional[Dict[str, Any]] = None,
    system: bool = False
) -> TransitionPlan:
    """
    Validate a status change and plan its writes.

    Pure function: no storage access and no clock. Linked-entity state is
    supplied through ``context``:

    - journal_entry -> posted: ``items``, ``obligation_id``, ``obligation_status``
    - budget_item -> depleted: ``balance``
    - budget_item -> cancelled: ``open_obligations``
    - disbursement -> cancelled: ``voucher_id``, ``voucher_status``
    - payroll -> finalized: ``item_count``

    Args:
        entity: One of the Entity names.
        current: Current status.
        target: Requested status.
        context: Linked-entity state needed by the guards.
        system: True when the engine itself drives the step.

    Returns:
        TransitionPlan describing the new status, stamps and side effects.

    Raises:
        WorkflowTransitionException: If the step is unreachable, system-only,
            or a linked entity is not in the required state.
        UnbalancedEntryException: If a journal entry does not balance.
        ValidationException: If a journal entry has no items or zero totals.
    """
    context = context or {}

    if target not in get_valid_transitions(entity, current):
        _reject(entity, current, target, f"Cannot move {entity} from '{current}' to '{target}'.")

    if not system and (entity, current, target) in SYSTEM_ONLY:
        _reject(
            entity, current, target,
            f"The '{current}' to '{target}' step of {entity} is performed automatically."
        )

    side_effects: List[SideEffect] = []

    if entity == Entity.JOURNAL_ENTRY and target == JournalEntryStatus.POSTED:
        obligation_id = context.get('obligation_id')
        if obligation_id is not None:
            obligation_status = context.get('obligation_status')
            if obligation_status != ObligationStatus.APPROVED:
                _reject(
                    entity, current, target,
                    f"The linked obligation must be approved before posting (it is '{obligation_status}').",
                    obligation_id=obligation_id
                )
        ensure_postable(context.get('items', []))
        if obligation_id is not None:
            side_effects.append(SideEffect(
                model_label=MODEL_LABELS[Entity.OBLIGATION],
                pk=obligation_id,
                plan=plan_transition(
                    Entity.OBLIGATION, obligation_status, ObligationStatus.PROCESSED, system=True
                ),
            ))

    elif entity == Entity.BUDGET_ITEM and target == BudgetItemStatus.DEPLETED:
        balance = context.get('balance')
        if balance is None or Decimal(balance) != 0:
            _reject(
                entity, current, target,
                f"Budget item still has an unobligated balance of PHP {balance}.",
                balance=str(balance)
            )

    elif entity == Entity.BUDGET_ITEM and target == BudgetItemStatus.CANCELLED:
        open_obligations = context.get('open_obligations', 0)
        if open_obligations:
            _reject(
                entity, current, target,
                f"Budget item has {open_obligations} pending or approved obligation(s).",
                open_obligations=open_obligations
            )

    elif entity == Entity.DISBURSEMENT and target == DisbursementStatus.CANCELLED:
        voucher_id = context.get('voucher_id')
        if voucher_id is not None:
            side_effects.append(SideEffect(
                model_label=MODEL_LABELS[Entity.VOUCHER],
                pk=voucher_id,
                plan=plan_transition(
                    Entity.VOUCHER, context.get('voucher_status'), VoucherStatus.APPROVED, system=True
                ),
            ))

    elif entity == Entity.PAYROLL and target == PayrollStatus.FINALIZED:
        if context.get('item_count', 0) < 1:
            _reject(entity, current, target, "Cannot finalize a payroll without items.", item_count=0)

    return TransitionPlan(
        entity=entity,
        current=current,
        target=target,
        stamp_fields=STAMPS.get((entity, target), ()),
        side_effects=side_effects,
    )
