"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Tests for the Annual Investment Plan workflow.
-------------------------------------------------------------------------
"""
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from apps.core.exceptions import (
    NotFoundException,
    UnauthorizedRoleException,
    ValidationException,
    WorkflowTransitionException,
)
from apps.core.storage_memory import MemoryStorage
from apps.planning.models import AIPItemStatus, AIPStatus, AnnualInvestmentPlan, Sector
from apps.planning.services import PlanningService
from apps.users.models import Role, RoleModule
from apps.users.permissions import Actor


class PlanningServiceTestCase(SimpleTestCase):
    """Test cases for AIP preparation and approval."""

    def setUp(self):
        """Set up test data."""
        self.storage = MemoryStorage()
        self.service = PlanningService(storage=self.storage)
        self.planner = Actor(
            user_id=3,
            role=Role(name='Planning Officer', module=RoleModule.PLANNING)
        )
        self.aip = self.service.create_aip(
            self.planner,
            fiscal_year=2026,
            title='Annual Investment Plan 2026',
            total_budget='5000000.00',
        )

    def _add_project(self, **overrides):
        data = {
            'project_name': 'Farm-to-Market Road',
            'sector': Sector.INFRASTRUCTURE,
            'budget': '1500000.00',
            'start_date': date(2026, 2, 1),
            'end_date': date(2026, 11, 30),
        }
        data.update(overrides)
        return self.service.add_aip_item(self.planner, self.aip.pk, **data)

    def test_create_aip_starts_in_draft(self):
        self.assertEqual(self.aip.status, AIPStatus.DRAFT)
        self.assertEqual(self.aip.total_budget, Decimal('5000000.00'))
        self.assertEqual(self.aip.created_by_id, 3)

    def test_aip_approval_flow(self):
        """draft -> submitted -> approved stamps the approver."""
        aip = self.service.submit_aip(self.planner, self.aip.pk)
        self.assertEqual(aip.status, AIPStatus.SUBMITTED)

        aip = self.service.approve_aip(self.planner, self.aip.pk)
        self.assertEqual(aip.status, AIPStatus.APPROVED)
        self.assertEqual(aip.approved_by_id, 3)
        self.assertIsNotNone(aip.approved_at)

        with self.assertRaises(WorkflowTransitionException):
            self.service.reject_aip(self.planner, self.aip.pk)

    def test_draft_cannot_be_approved_directly(self):
        with self.assertRaises(WorkflowTransitionException):
            self.service.approve_aip(self.planner, self.aip.pk)
        self.assertEqual(self.storage.get(AnnualInvestmentPlan, self.aip.pk).status, AIPStatus.DRAFT)

    def test_rejected_aip_can_be_reopened(self):
        self.service.submit_aip(self.planner, self.aip.pk)
        self.service.reject_aip(self.planner, self.aip.pk)
        aip = self.service.reopen_aip(self.planner, self.aip.pk)
        self.assertEqual(aip.status, AIPStatus.DRAFT)

        aip = self.service.update_aip(self.planner, self.aip.pk, title='AIP 2026 (Revised)')
        self.assertEqual(aip.title, 'AIP 2026 (Revised)')

    def test_submitted_aip_is_read_only(self):
        self.service.submit_aip(self.planner, self.aip.pk)
        with self.assertRaises(WorkflowTransitionException):
            self.service.update_aip(self.planner, self.aip.pk, title='Changed')
        with self.assertRaises(WorkflowTransitionException):
            self._add_project()

    def test_aip_item_lifecycle(self):
        """Projects go draft -> approved -> in_progress -> completed, and any -> rejected."""
        item = self._add_project()
        self.assertEqual(item.status, AIPItemStatus.DRAFT)
        self.assertEqual(item.aip_id, self.aip.pk)

        self.assertEqual(self.service.approve_aip_item(self.planner, item.pk).status, AIPItemStatus.APPROVED)
        self.assertEqual(self.service.start_aip_item(self.planner, item.pk).status, AIPItemStatus.IN_PROGRESS)
        self.assertEqual(self.service.complete_aip_item(self.planner, item.pk).status, AIPItemStatus.COMPLETED)

        # Completed projects can still be rejected; rejection is terminal
        self.assertEqual(self.service.reject_aip_item(self.planner, item.pk).status, AIPItemStatus.REJECTED)
        with self.assertRaises(WorkflowTransitionException):
            self.service.approve_aip_item(self.planner, item.pk)

    def test_aip_item_cannot_skip_approval(self):
        item = self._add_project()
        with self.assertRaises(WorkflowTransitionException):
            self.service.start_aip_item(self.planner, item.pk)

    def test_aip_item_validation(self):
        with self.assertRaises(ValidationException):
            self._add_project(end_date=date(2026, 1, 1))
        with self.assertRaises(ValidationException):
            self._add_project(sector='defense')
        with self.assertRaises(ValidationException):
            self._add_project(budget='0.00')
        self.assertEqual(self.service.list_aip_items(self.aip.pk), [])

    def test_update_aip_item_only_in_draft(self):
        item = self._add_project()
        item = self.service.update_aip_item(self.planner, item.pk, location='Poblacion')
        self.assertEqual(item.location, 'Poblacion')

        self.service.approve_aip_item(self.planner, item.pk)
        with self.assertRaises(WorkflowTransitionException):
            self.service.update_aip_item(self.planner, item.pk, budget='10.00')

    def test_unknown_aip(self):
        with self.assertRaises(NotFoundException):
            self.service.submit_aip(self.planner, 404)

    def test_budget_role_cannot_plan(self):
        budget_officer = Actor(user_id=4, role=Role(name='Budget Officer', module=RoleModule.BUDGET))
        with self.assertRaises(UnauthorizedRoleException):
            self.service.submit_aip(budget_officer, self.aip.pk)
        self.assertEqual(self.storage.get(AnnualInvestmentPlan, self.aip.pk).status, AIPStatus.DRAFT)

    def test_list_aips_by_fiscal_year(self):
        self.service.create_aip(self.planner, fiscal_year=2027, title='AIP 2027', total_budget='0')
        self.assertEqual(len(self.service.list_aips()), 2)
        self.assertEqual([a.title for a in self.service.list_aips(fiscal_year=2027)], ['AIP 2027'])
