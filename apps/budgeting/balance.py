"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Balance Engine. The only code that mutates
             BudgetItem.balance: reserving an obligation decrements it,
             releasing a cancelled obligation restores it. Each change
             runs in its own unit of work with the budget item locked.
-------------------------------------------------------------------------
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from apps.budgeting.models import BudgetItem, BudgetItemStatus, BudgetObligation, ObligationStatus
from apps.core.exceptions import (
    InsufficientBalanceException,
    NotFoundException,
    ValidationException,
    WorkflowTransitionException,
)
from apps.core.logging import WorkflowLogger
from apps.core.storage import StoragePort
from apps.core.workflows import Entity, plan_transition


@dataclass(frozen=True)
class ObligationResult:
    """The obligation created and the budget item after its decrement."""

    obligation: BudgetObligation
    budget_item: BudgetItem


class BalanceEngine:
    """
    Maintains BudgetItem.balance as obligations are created or reversed.

    Invariant: 0 <= balance <= amount. The check and the write happen
    while the budget item row is locked, so concurrent obligations on the
    same item are serialised and cannot drive the balance negative.
    """

    def __init__(self, storage: StoragePort) -> None:
        self.storage = storage

    def _lock_item(self, budget_item_id: Any) -> BudgetItem:
        item = self.storage.get(BudgetItem, budget_item_id, for_update=True)
        if item is None:
            raise NotFoundException(
                f"Budget item #{budget_item_id} was not found.",
                details={'budget_item_id': budget_item_id}
            )
        return item

    def apply_obligation(
        self,
        budget_item_id: Any,
        amount: Decimal,
        actor_id: Optional[int] = None,
        **obligation_fields: Any
    ) -> ObligationResult:
        """
        Reserve an amount against a budget item.

        Creates the BudgetObligation and decrements the balance in the same
        unit of work; both succeed or both roll back.

        Args:
            budget_item_id: Budget item to charge.
            amount: Strictly positive Decimal amount.
            actor_id: User recorded as creator of the obligation.
            **obligation_fields: obligation_number, payee, description,
                obligation_date.

        Returns:
            ObligationResult with the new obligation and updated item.

        Raises:
            NotFoundException: If the budget item does not exist.
            WorkflowTransitionException: If the budget item is not active.
            InsufficientBalanceException: If amount exceeds the balance.
        """
        if not isinstance(amount, Decimal) or amount <= 0:
            raise ValidationException(
                "Obligation amount must be a positive decimal.",
                details={'amount': str(amount)}
            )

        with self.storage.unit_of_work():
            item = self._lock_item(budget_item_id)

            if item.status != BudgetItemStatus.ACTIVE:
                raise WorkflowTransitionException(
                    f"Cannot obligate against a {item.status} budget item.",
                    details={'budget_item_id': item.pk, 'status': str(item.status)}
                )

            if not item.can_obligate(amount):
                raise InsufficientBalanceException(
                    f"Requested PHP {amount} exceeds the available balance of PHP {item.balance}.",
                    details={
                        'budget_item_id': item.pk,
                        'requested': str(amount),
                        'available': str(item.balance),
                    }
                )

            item = self.storage.update(
                BudgetItem,
                item.pk,
                balance=item.balance - amount,
                version=item.version + 1,
                updated_by_id=actor_id,
            )
            obligation = self.storage.create(
                BudgetObligation,
                budget_item_id=item.pk,
                amount=amount,
                status=ObligationStatus.PENDING,
                created_by_id=actor_id,
                **obligation_fields
            )

        self.storage.on_commit(lambda: WorkflowLogger.log_obligation_applied(obligation, item, actor_id))
        return ObligationResult(obligation=obligation, budget_item=item)

    def release_obligation(self, obligation: BudgetObligation, actor_id: Optional[int] = None) -> BudgetItem:
        """
        Restore the amount held by an obligation to its budget item.

        Compensating operation for a cancelled obligation. A depleted item
        that regains a balance is reactivated.

        Raises:
            NotFoundException: If the budget item does not exist.
            ValidationException: If the release would exceed the original allocation.
        """
        with self.storage.unit_of_work():
            item = self._lock_item(obligation.budget_item_id)
            new_balance = item.balance + obligation.amount

            if new_balance > item.amount:
                raise ValidationException(
                    "Releasing this obligation would exceed the original allocation.",
                    details={
                        'budget_item_id': item.pk,
                        'obligation_id': obligation.pk,
                        'balance': str(item.balance),
                        'amount': str(item.amount),
                    }
                )

            patch = {
                'balance': new_balance,
                'version': item.version + 1,
                'updated_by_id': actor_id,
            }
            if item.status == BudgetItemStatus.DEPLETED and new_balance > 0:
                plan = plan_transition(Entity.BUDGET_ITEM, item.status, BudgetItemStatus.ACTIVE, system=True)
                patch['status'] = str(plan.target)

            item = self.storage.update(BudgetItem, item.pk, **patch)

        self.storage.on_commit(lambda: WorkflowLogger.log_obligation_released(obligation, item, actor_id))
        return item
