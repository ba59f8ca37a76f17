"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: End-to-end tests of the fiscal chain (AIP -> budget item ->
             obligation -> journal entry -> voucher -> disbursement)
             against the database, one role per office.
-------------------------------------------------------------------------
"""
from datetime import date
from decimal import Decimal

from django.test import TestCase

from apps.accounting.models import JournalEntry, JournalEntryStatus, Voucher, VoucherStatus
from apps.accounting.services import AccountingService
from apps.budgeting.models import BudgetItem, BudgetObligation, ObligationStatus
from apps.budgeting.services import BudgetService
from apps.core.exceptions import UnauthorizedRoleException, UnbalancedEntryException
from apps.core.storage_django import DjangoStorage
from apps.planning.models import AIPItemStatus
from apps.planning.services import PlanningService
from apps.treasury.models import Disbursement, DisbursementStatus
from apps.treasury.services import TreasuryService
from apps.users.models import CustomUser, Role, RoleModule
from apps.users.permissions import resolve_actor


class FiscalWorkflowChainTestCase(TestCase):
    """Test cases for the full expenditure cycle across modules."""

    def setUp(self):
        """Set up test data."""
        self.storage = DjangoStorage()
        self.planning = PlanningService(storage=self.storage)
        self.budget = BudgetService(storage=self.storage)
        self.accounting = AccountingService(storage=self.storage)
        self.treasury = TreasuryService(storage=self.storage)

        self.planner = self._actor('mpdc', 'Planning Officer', RoleModule.PLANNING)
        self.budget_officer = self._actor('mbo', 'Budget Officer', RoleModule.BUDGET)
        self.accountant = self._actor('macco', 'Municipal Accountant', RoleModule.ACCOUNTING)
        self.treasurer = self._actor('mto', 'Municipal Treasurer', RoleModule.TREASURY)

    def _actor(self, username, role_name, module):
        role = Role.objects.create(name=role_name, module=module)
        user = CustomUser.objects.create_user(username=username, password='testpass123', role=role)
        return resolve_actor(self.storage, user.pk, user.role_id)

    def _fund_project(self):
        aip = self.planning.create_aip(
            self.planner, fiscal_year=2026, title='AIP 2026', total_budget='5000000.00'
        )
        project = self.planning.add_aip_item(
            self.planner, aip.pk, project_name='Health Center Equipment', sector='health', budget='100000.00'
        )
        self.planning.submit_aip(self.planner, aip.pk)
        self.planning.approve_aip(self.planner, aip.pk)
        project = self.planning.approve_aip_item(self.planner, project.pk)
        self.assertEqual(project.status, AIPItemStatus.APPROVED)

        return self.budget.create_budget_item(
            self.budget_officer,
            aip_item_id=project.pk,
            fiscal_year=2026,
            account_code='1-07-05-030',
            description='Medical Equipment',
            amount='100000.00',
        )

    def _journal_entry(self, obligation, debit='60000.00', credit='60000.00'):
        entry = self.accounting.create_journal_entry(
            self.accountant,
            obligation_id=obligation.pk,
            entry_number='JEV-2026-0001',
            entry_date=date(2026, 4, 2),
            description='To record purchase of medical equipment',
        )
        self.accounting.add_journal_entry_item(
            self.accountant, entry.pk,
            account_code='1-07-05-030', account_title='Medical Equipment', debit=debit
        )
        self.accounting.add_journal_entry_item(
            self.accountant, entry.pk,
            account_code='2-01-01-010', account_title='Accounts Payable', credit=credit
        )
        return entry

    def test_full_expenditure_cycle(self):
        item = self._fund_project()
        result = self.budget.create_obligation(
            self.budget_officer,
            item.pk,
            obligation_number='OBR-2026-0001',
            payee='MedSupply Inc.',
            amount='60000.00',
            obligation_date=date(2026, 4, 1),
        )
        self.budget.approve_obligation(self.budget_officer, result.obligation.pk)

        entry = self._journal_entry(result.obligation)
        self.accounting.post_journal_entry(self.accountant, entry.pk)

        obligation = BudgetObligation.objects.get(pk=result.obligation.pk)
        self.assertEqual(obligation.status, ObligationStatus.PROCESSED)
        self.assertEqual(obligation.processed_by_id, self.accountant.user_id)

        voucher = self.accounting.create_voucher(
            self.accountant,
            journal_entry_id=entry.pk,
            voucher_number='DV-2026-0001',
            payee='MedSupply Inc.',
            description='Payment for medical equipment',
            amount='60000.00',
            voucher_date=date(2026, 4, 5),
        )
        self.accounting.approve_voucher(self.accountant, voucher.pk)

        disbursement = self.treasury.disburse(
            self.treasurer,
            voucher.pk,
            check_number='0004521',
            bank_account='LBP-1234-5678',
            amount='60000.00',
            disbursement_date=date(2026, 4, 8),
        )
        self.assertEqual(Voucher.objects.get(pk=voucher.pk).status, VoucherStatus.PAID)

        self.treasury.clear_disbursement(self.treasurer, disbursement.pk)
        self.treasury.cancel_disbursement(self.treasurer, disbursement.pk)
        self.assertEqual(Disbursement.objects.get(pk=disbursement.pk).status, DisbursementStatus.CANCELLED)
        self.assertEqual(Voucher.objects.get(pk=voucher.pk).status, VoucherStatus.APPROVED)

        # Balance reflects the obligation only
        self.assertEqual(BudgetItem.objects.get(pk=item.pk).balance, Decimal('40000.00'))

    def test_unbalanced_posting_rolls_back(self):
        item = self._fund_project()
        result = self.budget.create_obligation(
            self.budget_officer,
            item.pk,
            obligation_number='OBR-2026-0001',
            payee='MedSupply Inc.',
            amount='60000.00',
            obligation_date=date(2026, 4, 1),
        )
        self.budget.approve_obligation(self.budget_officer, result.obligation.pk)
        entry = self._journal_entry(result.obligation, credit='59000.00')

        with self.assertRaises(UnbalancedEntryException):
            self.accounting.post_journal_entry(self.accountant, entry.pk)

        self.assertEqual(JournalEntry.objects.get(pk=entry.pk).status, JournalEntryStatus.DRAFT)
        self.assertEqual(
            BudgetObligation.objects.get(pk=result.obligation.pk).status,
            ObligationStatus.APPROVED
        )

    def test_cross_module_request_is_refused_without_writes(self):
        """A budget role posting an entry is refused and nothing changes."""
        item = self._fund_project()
        result = self.budget.create_obligation(
            self.budget_officer,
            item.pk,
            obligation_number='OBR-2026-0001',
            payee='MedSupply Inc.',
            amount='60000.00',
            obligation_date=date(2026, 4, 1),
        )
        self.budget.approve_obligation(self.budget_officer, result.obligation.pk)
        entry = self._journal_entry(result.obligation)

        with self.assertRaises(UnauthorizedRoleException):
            self.accounting.post_journal_entry(self.budget_officer, entry.pk)
        with self.assertRaises(UnauthorizedRoleException):
            self.budget.create_obligation(
                self.treasurer,
                item.pk,
                obligation_number='OBR-2026-0002',
                payee='MedSupply Inc.',
                amount='100.00',
                obligation_date=date(2026, 4, 1),
            )

        self.assertEqual(JournalEntry.objects.get(pk=entry.pk).status, JournalEntryStatus.DRAFT)
        self.assertEqual(BudgetObligation.objects.count(), 1)
        self.assertEqual(BudgetItem.objects.get(pk=item.pk).balance, Decimal('40000.00'))
