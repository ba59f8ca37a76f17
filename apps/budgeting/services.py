"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Budgeting service: funding of budget items from approved
             AIP projects and the obligation lifecycle. Balance changes
             are delegated to the Balance Engine.
-------------------------------------------------------------------------
"""
from typing import Any, Dict, List, Optional

from django.conf import settings

from apps.budgeting.balance import BalanceEngine, ObligationResult
from apps.budgeting.models import BudgetItem, BudgetItemStatus, BudgetObligation, ObligationStatus
from apps.core.exceptions import WorkflowTransitionException
from apps.core.logging import WorkflowLogger
from apps.core.services import WorkflowService
from apps.core.storage import StoragePort
from apps.core.validators import clean_amount, only_fields, require_fields
from apps.core.workflows import Entity, plan_transition
from apps.planning.models import AIPItem, AIPItemStatus
from apps.users.models import RoleModule
from apps.users.permissions import Actor


BUDGET_ITEM_FIELDS = ('aip_item_id', 'fiscal_year', 'account_code', 'description', 'amount')
BUDGET_ITEM_EDITABLE_FIELDS = ('account_code', 'description')
OBLIGATION_FIELDS = ('obligation_number', 'payee', 'description', 'amount', 'obligation_date')

FUNDABLE_AIP_ITEM_STATUSES = (AIPItemStatus.APPROVED, AIPItemStatus.IN_PROGRESS)


class BudgetService(WorkflowService):
    """
    Service for budget items and obligations.

    Example:
        >>> service = BudgetService()
        >>> result = service.create_obligation(
        ...     actor, budget_item_id=1, obligation_number='OBR-2026-0001',
        ...     payee='ABC Construction', amount='60000.00',
        ...     obligation_date=date(2026, 3, 1))
        >>> result.budget_item.balance
        Decimal('40000.00')
    """

    module = RoleModule.BUDGET

    def __init__(self, storage: Optional[StoragePort] = None) -> None:
        super().__init__(storage)
        self.engine = BalanceEngine(self.storage)

    # ------------------------------------------------------------------
    # Budget items
    # ------------------------------------------------------------------

    def create_budget_item(self, actor: Actor, **data: Any) -> BudgetItem:
        """
        Fund a new budget item. Its balance starts equal to its amount.

        Required: fiscal_year, account_code, description, amount.
        Optional: aip_item_id (must be an approved or in-progress project).
        """
        self._authorize(actor)
        require_fields(data, 'fiscal_year', 'account_code', 'description', 'amount')
        data = only_fields(data, BUDGET_ITEM_FIELDS, 'a budget item')
        data['amount'] = clean_amount(data['amount'])

        def _create():
            aip_item_id = data.get('aip_item_id')
            if aip_item_id is not None:
                aip_item = self._get_or_404(AIPItem, aip_item_id, for_update=True)
                if aip_item.status not in FUNDABLE_AIP_ITEM_STATUSES:
                    raise WorkflowTransitionException(
                        f"Cannot fund a {aip_item.status} AIP item.",
                        details={'aip_item_id': aip_item.pk, 'status': str(aip_item.status)}
                    )

            item = self.storage.create(
                BudgetItem,
                balance=data['amount'],
                status=BudgetItemStatus.ACTIVE,
                version=0,
                created_by_id=actor.user_id,
                **data
            )
            self.storage.on_commit(lambda: WorkflowLogger.log_created(Entity.BUDGET_ITEM, item, actor))
            return item

        return self._atomic(actor, 'create_budget_item', _create)

    def update_budget_item(self, actor: Actor, budget_item_id: int, **patch: Any) -> BudgetItem:
        """Edit the description or account code of an active budget item."""
        self._authorize(actor)
        patch = only_fields(patch, BUDGET_ITEM_EDITABLE_FIELDS, 'a budget item')
        return self._atomic(
            actor, 'update_budget_item', self._edit_draft,
            actor, BudgetItem, budget_item_id, BudgetItemStatus.ACTIVE, patch
        )

    def mark_budget_item_depleted(self, actor: Actor, budget_item_id: int) -> BudgetItem:
        """Close a fully obligated budget item."""
        return self._request_transition(
            actor, BudgetItem, budget_item_id, Entity.BUDGET_ITEM, BudgetItemStatus.DEPLETED,
            context=lambda item: {'balance': item.balance}
        )

    def cancel_budget_item(self, actor: Actor, budget_item_id: int) -> BudgetItem:
        """Withdraw a budget item that has no open obligations."""
        return self._request_transition(
            actor, BudgetItem, budget_item_id, Entity.BUDGET_ITEM, BudgetItemStatus.CANCELLED,
            context=lambda item: {'open_obligations': self._count_open_obligations(item.pk)}
        )

    def _count_open_obligations(self, budget_item_id: int) -> int:
        return sum(
            len(self.storage.filter(BudgetObligation, budget_item_id=budget_item_id, status=status))
            for status in (ObligationStatus.PENDING, ObligationStatus.APPROVED)
        )

    def list_budget_items(
        self,
        fiscal_year: Optional[int] = None,
        aip_item_id: Optional[int] = None
    ) -> List[BudgetItem]:
        lookups: Dict[str, Any] = {}
        if fiscal_year is not None:
            lookups['fiscal_year'] = fiscal_year
        if aip_item_id is not None:
            lookups['aip_item_id'] = aip_item_id
        return self.storage.filter(BudgetItem, **lookups)

    # ------------------------------------------------------------------
    # Obligations
    # ------------------------------------------------------------------

    def create_obligation(self, actor: Actor, budget_item_id: int, **data: Any) -> ObligationResult:
        """
        Reserve part of a budget item's balance for a payee.

        Required: obligation_number, payee, amount, obligation_date.

        Raises:
            InsufficientBalanceException: If amount exceeds the balance.
        """
        self._authorize(actor)
        require_fields(data, 'obligation_number', 'payee', 'amount', 'obligation_date')
        data = only_fields(data, OBLIGATION_FIELDS, 'an obligation')
        amount = clean_amount(data.pop('amount'))

        return self._atomic(
            actor, 'create_obligation', self.engine.apply_obligation,
            budget_item_id, amount, actor_id=actor.user_id, **data
        )

    def approve_obligation(self, actor: Actor, obligation_id: int) -> BudgetObligation:
        return self._request_transition(
            actor, BudgetObligation, obligation_id, Entity.OBLIGATION, ObligationStatus.APPROVED
        )

    def cancel_obligation(self, actor: Actor, obligation_id: int) -> BudgetObligation:
        """
        Cancel a pending obligation.

        The held amount goes back to the budget item in the same unit of
        work unless FMS_RELEASE_BALANCE_ON_CANCEL is turned off.
        """
        def _cancel():
            obligation = self._get_or_404(BudgetObligation, obligation_id, for_update=True)
            plan = plan_transition(Entity.OBLIGATION, obligation.status, ObligationStatus.CANCELLED)
            if getattr(settings, 'FMS_RELEASE_BALANCE_ON_CANCEL', True):
                self.engine.release_obligation(obligation, actor_id=actor.user_id)
            return self._apply_plan(actor, BudgetObligation, obligation.pk, plan)

        return self._atomic(actor, 'cancel_obligation', _cancel)

    def list_obligations(
        self,
        budget_item_id: Optional[int] = None,
        status: Optional[str] = None
    ) -> List[BudgetObligation]:
        lookups: Dict[str, Any] = {}
        if budget_item_id is not None:
            lookups['budget_item_id'] = budget_item_id
        if status is not None:
            lookups['status'] = status
        return self.storage.filter(BudgetObligation, **lookups)
