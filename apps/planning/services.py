"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Planning service: preparation and approval of the Annual
             Investment Plan and the lifecycle of its projects.
-------------------------------------------------------------------------
"""
from typing import Any, List, Optional

from apps.core.exceptions import ValidationException, WorkflowTransitionException
from apps.core.logging import WorkflowLogger
from apps.core.services import WorkflowService
from apps.core.validators import clean_amount, clean_choice, only_fields, require_fields
from apps.core.workflows import Entity
from apps.planning.models import AIPItem, AIPItemStatus, AIPStatus, AnnualInvestmentPlan, Sector
from apps.users.models import RoleModule
from apps.users.permissions import Actor


AIP_EDITABLE_FIELDS = ('fiscal_year', 'title', 'description', 'total_budget')
AIP_ITEM_EDITABLE_FIELDS = (
    'project_name', 'sector', 'description', 'location', 'budget', 'start_date', 'end_date'
)


def _clean_aip_fields(data: dict) -> dict:
    if 'total_budget' in data:
        data['total_budget'] = clean_amount(data['total_budget'], 'total_budget', allow_zero=True)
    return data


def _clean_aip_item_fields(data: dict) -> dict:
    if 'budget' in data:
        data['budget'] = clean_amount(data['budget'], 'budget')
    if 'sector' in data:
        data['sector'] = clean_choice(data['sector'], Sector.values, 'sector')
    start, end = data.get('start_date'), data.get('end_date')
    if start and end and end < start:
        raise ValidationException(
            "End date cannot be earlier than start date.",
            details={'start_date': str(start), 'end_date': str(end)}
        )
    return data


class PlanningService(WorkflowService):
    """
    Service for the Annual Investment Plan (AIP).

    The AIP is prepared in draft, submitted to the council and either
    approved or returned. Its projects are approved individually and are
    the funding source of budget items.
    """

    module = RoleModule.PLANNING

    # ------------------------------------------------------------------
    # Annual Investment Plan
    # ------------------------------------------------------------------

    def create_aip(self, actor: Actor, **data: Any) -> AnnualInvestmentPlan:
        """
        Create a draft AIP.

        Required: fiscal_year, title, total_budget.
        """
        self._authorize(actor)
        require_fields(data, 'fiscal_year', 'title', 'total_budget')
        data = _clean_aip_fields(only_fields(data, AIP_EDITABLE_FIELDS, 'an AIP'))

        def _create():
            aip = self.storage.create(
                AnnualInvestmentPlan,
                status=AIPStatus.DRAFT,
                created_by_id=actor.user_id,
                **data
            )
            self.storage.on_commit(lambda: WorkflowLogger.log_created(Entity.AIP, aip, actor))
            return aip

        return self._atomic(actor, 'create_aip', _create)

    def update_aip(self, actor: Actor, aip_id: int, **patch: Any) -> AnnualInvestmentPlan:
        """Edit a draft AIP."""
        self._authorize(actor)
        patch = _clean_aip_fields(only_fields(patch, AIP_EDITABLE_FIELDS, 'an AIP'))
        return self._atomic(
            actor, 'update_aip', self._edit_draft, actor, AnnualInvestmentPlan, aip_id, AIPStatus.DRAFT, patch
        )

    def submit_aip(self, actor: Actor, aip_id: int) -> AnnualInvestmentPlan:
        return self._request_transition(actor, AnnualInvestmentPlan, aip_id, Entity.AIP, AIPStatus.SUBMITTED)

    def approve_aip(self, actor: Actor, aip_id: int) -> AnnualInvestmentPlan:
        return self._request_transition(actor, AnnualInvestmentPlan, aip_id, Entity.AIP, AIPStatus.APPROVED)

    def reject_aip(self, actor: Actor, aip_id: int) -> AnnualInvestmentPlan:
        return self._request_transition(actor, AnnualInvestmentPlan, aip_id, Entity.AIP, AIPStatus.REJECTED)

    def reopen_aip(self, actor: Actor, aip_id: int) -> AnnualInvestmentPlan:
        """Return a rejected AIP to draft for rework."""
        return self._request_transition(actor, AnnualInvestmentPlan, aip_id, Entity.AIP, AIPStatus.DRAFT)

    def list_aips(self, fiscal_year: Optional[int] = None) -> List[AnnualInvestmentPlan]:
        if fiscal_year is None:
            return self.storage.filter(AnnualInvestmentPlan)
        return self.storage.filter(AnnualInvestmentPlan, fiscal_year=fiscal_year)

    # ------------------------------------------------------------------
    # AIP items (projects)
    # ------------------------------------------------------------------

    def add_aip_item(self, actor: Actor, aip_id: int, **data: Any) -> AIPItem:
        """
        Add a project to a draft AIP.

        Required: project_name, budget.
        """
        self._authorize(actor)
        require_fields(data, 'project_name', 'budget')
        data = _clean_aip_item_fields(only_fields(data, AIP_ITEM_EDITABLE_FIELDS, 'an AIP item'))

        def _add():
            aip = self._get_or_404(AnnualInvestmentPlan, aip_id, for_update=True)
            if aip.status != AIPStatus.DRAFT:
                raise WorkflowTransitionException(
                    "Projects can only be added to a draft AIP.",
                    details={'aip_id': aip.pk, 'status': str(aip.status)}
                )
            item = self.storage.create(
                AIPItem,
                aip_id=aip.pk,
                status=AIPItemStatus.DRAFT,
                created_by_id=actor.user_id,
                **data
            )
            self.storage.on_commit(lambda: WorkflowLogger.log_created(Entity.AIP_ITEM, item, actor))
            return item

        return self._atomic(actor, 'add_aip_item', _add)

    def update_aip_item(self, actor: Actor, item_id: int, **patch: Any) -> AIPItem:
        """Edit a draft project."""
        self._authorize(actor)
        patch = _clean_aip_item_fields(only_fields(patch, AIP_ITEM_EDITABLE_FIELDS, 'an AIP item'))
        return self._atomic(
            actor, 'update_aip_item', self._edit_draft, actor, AIPItem, item_id, AIPItemStatus.DRAFT, patch
        )

    def approve_aip_item(self, actor: Actor, item_id: int) -> AIPItem:
        return self._request_transition(actor, AIPItem, item_id, Entity.AIP_ITEM, AIPItemStatus.APPROVED)

    def start_aip_item(self, actor: Actor, item_id: int) -> AIPItem:
        return self._request_transition(actor, AIPItem, item_id, Entity.AIP_ITEM, AIPItemStatus.IN_PROGRESS)

    def complete_aip_item(self, actor: Actor, item_id: int) -> AIPItem:
        return self._request_transition(actor, AIPItem, item_id, Entity.AIP_ITEM, AIPItemStatus.COMPLETED)

    def reject_aip_item(self, actor: Actor, item_id: int) -> AIPItem:
        return self._request_transition(actor, AIPItem, item_id, Entity.AIP_ITEM, AIPItemStatus.REJECTED)

    def list_aip_items(self, aip_id: int) -> List[AIPItem]:
        return self.storage.filter(AIPItem, aip_id=aip_id)
