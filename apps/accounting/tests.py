"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Tests for the double-entry validator, journal entry posting
             and voucher preparation.
-------------------------------------------------------------------------
"""
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from apps.accounting.models import JournalEntry, JournalEntryItem, JournalEntryStatus, VoucherStatus
from apps.accounting.services import AccountingService
from apps.accounting.validation import ensure_postable, is_balanced, totals
from apps.budgeting.models import BudgetObligation, ObligationStatus
from apps.budgeting.services import BudgetService
from apps.core.exceptions import (
    UnauthorizedRoleException,
    UnbalancedEntryException,
    ValidationException,
    WorkflowTransitionException,
)
from apps.core.storage_memory import MemoryStorage
from apps.users.models import Role, RoleModule
from apps.users.permissions import Actor


class DoubleEntryValidatorTestCase(SimpleTestCase):
    """Test cases for debit/credit totals."""

    def _line(self, debit='0.00', credit='0.00'):
        return JournalEntryItem(debit=Decimal(debit), credit=Decimal(credit))

    def test_totals(self):
        items = [self._line(debit='60.00'), self._line(debit='40.00'), self._line(credit='100.00')]
        self.assertEqual(totals(items), (Decimal('100.00'), Decimal('100.00')))
        self.assertTrue(is_balanced(items))

    def test_empty_entry_is_balanced_but_not_postable(self):
        self.assertTrue(is_balanced([]))
        with self.assertRaises(ValidationException):
            ensure_postable([])

    def test_unbalanced_entry(self):
        items = [self._line(debit='100.00'), self._line(credit='90.00')]
        self.assertFalse(is_balanced(items))
        with self.assertRaises(UnbalancedEntryException) as ctx:
            ensure_postable(items)
        self.assertEqual(ctx.exception.details['debit_total'], '100.00')
        self.assertEqual(ctx.exception.details['credit_total'], '90.00')

    def test_zero_totals_not_postable(self):
        with self.assertRaises(ValidationException):
            ensure_postable([self._line(), self._line()])


class AccountingServiceTestCase(SimpleTestCase):
    """Test cases for journal entries and vouchers on an in-memory store."""

    def setUp(self):
        """Set up test data."""
        self.storage = MemoryStorage()
        self.budget = BudgetService(storage=self.storage)
        self.service = AccountingService(storage=self.storage)
        self.budget_officer = Actor(user_id=1, role=Role(name='Budget Officer', module=RoleModule.BUDGET))
        self.accountant = Actor(user_id=2, role=Role(name='Municipal Accountant', module=RoleModule.ACCOUNTING))

        item = self.budget.create_budget_item(
            self.budget_officer,
            fiscal_year=2026,
            account_code='5-02-03-010',
            description='Office Supplies Expenses',
            amount='100000.00',
        )
        self.obligation = self.budget.create_obligation(
            self.budget_officer,
            item.pk,
            obligation_number='OBR-2026-0001',
            payee='ABC Trading',
            amount='100.00',
            obligation_date=date(2026, 3, 1),
        ).obligation
        self.entry = self.service.create_journal_entry(
            self.accountant,
            obligation_id=self.obligation.pk,
            entry_number='JEV-2026-0001',
            entry_date=date(2026, 3, 5),
            description='To record purchase of office supplies',
        )

    def _add_lines(self, debit='100.00', credit='100.00'):
        self.service.add_journal_entry_item(
            self.accountant, self.entry.pk,
            account_code='5-02-03-010', account_title='Office Supplies Expenses', debit=debit
        )
        self.service.add_journal_entry_item(
            self.accountant, self.entry.pk,
            account_code='2-01-01-010', account_title='Accounts Payable', credit=credit
        )

    def _approve_obligation(self):
        self.budget.approve_obligation(self.budget_officer, self.obligation.pk)

    def _obligation_status(self):
        return self.storage.get(BudgetObligation, self.obligation.pk).status

    def test_post_balanced_entry_processes_obligation(self):
        """Posting stamps the entry and marks the obligation processed."""
        self._approve_obligation()
        self._add_lines()

        entry = self.service.post_journal_entry(self.accountant, self.entry.pk)
        self.assertEqual(entry.status, JournalEntryStatus.POSTED)
        self.assertEqual(entry.posted_by_id, 2)
        self.assertIsNotNone(entry.posted_at)

        obligation = self.storage.get(BudgetObligation, self.obligation.pk)
        self.assertEqual(obligation.status, ObligationStatus.PROCESSED)
        self.assertEqual(obligation.processed_by_id, 2)
        self.assertIsNotNone(obligation.processed_at)

    def test_unbalanced_entry_is_not_posted(self):
        """100 debit against 90 credit leaves every status unchanged."""
        self._approve_obligation()
        self._add_lines(credit='90.00')

        with self.assertRaises(UnbalancedEntryException):
            self.service.post_journal_entry(self.accountant, self.entry.pk)

        self.assertEqual(self.storage.get(JournalEntry, self.entry.pk).status, JournalEntryStatus.DRAFT)
        self.assertEqual(self._obligation_status(), ObligationStatus.APPROVED)
        self.assertEqual(
            self.service.journal_entry_totals(self.entry.pk),
            (Decimal('100.00'), Decimal('90.00'))
        )

    def test_pending_obligation_blocks_posting(self):
        self._add_lines()
        with self.assertRaises(WorkflowTransitionException):
            self.service.post_journal_entry(self.accountant, self.entry.pk)
        self.assertEqual(self._obligation_status(), ObligationStatus.PENDING)

    def test_posted_entry_is_final(self):
        """Posting again, cancelling, adding lines or editing all fail."""
        self._approve_obligation()
        self._add_lines()
        self.service.post_journal_entry(self.accountant, self.entry.pk)

        with self.assertRaises(WorkflowTransitionException):
            self.service.post_journal_entry(self.accountant, self.entry.pk)
        with self.assertRaises(WorkflowTransitionException):
            self.service.cancel_journal_entry(self.accountant, self.entry.pk)
        with self.assertRaises(WorkflowTransitionException):
            self.service.add_journal_entry_item(
                self.accountant, self.entry.pk,
                account_code='1-01-01-010', account_title='Cash', debit='5.00'
            )
        with self.assertRaises(WorkflowTransitionException):
            self.service.update_journal_entry(self.accountant, self.entry.pk, description='Changed')

        self.assertEqual(len(self.service.list_journal_entry_items(self.entry.pk)), 2)

    def test_journal_line_needs_exactly_one_side(self):
        with self.assertRaises(ValidationException):
            self.service.add_journal_entry_item(
                self.accountant, self.entry.pk,
                account_code='1-01-01-010', account_title='Cash', debit='5.00', credit='5.00'
            )
        with self.assertRaises(ValidationException):
            self.service.add_journal_entry_item(
                self.accountant, self.entry.pk, account_code='1-01-01-010', account_title='Cash'
            )

    def test_standalone_entry_can_be_posted(self):
        """Entries without an obligation are gated only by the validator."""
        entry = self.service.create_journal_entry(
            self.accountant,
            entry_number='JEV-2026-0002',
            entry_date=date(2026, 3, 6),
            description='Adjusting entry',
        )
        self.service.add_journal_entry_item(
            self.accountant, entry.pk, account_code='1-01-01-010', account_title='Cash', debit='25.00'
        )
        self.service.add_journal_entry_item(
            self.accountant, entry.pk, account_code='4-01-01-010', account_title='Real Property Tax', credit='25.00'
        )
        posted = self.service.post_journal_entry(self.accountant, entry.pk)
        self.assertEqual(posted.status, JournalEntryStatus.POSTED)

    def test_entry_against_cancelled_obligation(self):
        self.budget.cancel_obligation(self.budget_officer, self.obligation.pk)
        with self.assertRaises(WorkflowTransitionException):
            self.service.create_journal_entry(
                self.accountant,
                obligation_id=self.obligation.pk,
                entry_number='JEV-2026-0003',
                entry_date=date(2026, 3, 7),
                description='Late entry',
            )

    def test_cancel_draft_entry(self):
        entry = self.service.cancel_journal_entry(self.accountant, self.entry.pk)
        self.assertEqual(entry.status, JournalEntryStatus.CANCELLED)
        self.assertEqual(self._obligation_status(), ObligationStatus.PENDING)

    def test_voucher_requires_posted_entry(self):
        voucher_data = {
            'journal_entry_id': self.entry.pk,
            'voucher_number': 'DV-2026-0001',
            'payee': 'ABC Trading',
            'description': 'Payment for office supplies',
            'amount': '100.00',
            'voucher_date': date(2026, 3, 10),
        }
        with self.assertRaises(WorkflowTransitionException):
            self.service.create_voucher(self.accountant, **voucher_data)

        self._approve_obligation()
        self._add_lines()
        self.service.post_journal_entry(self.accountant, self.entry.pk)

        voucher = self.service.create_voucher(self.accountant, **voucher_data)
        self.assertEqual(voucher.status, VoucherStatus.DRAFT)

        voucher = self.service.update_voucher(self.accountant, voucher.pk, payee='ABC Trading Corp.')
        self.assertEqual(voucher.payee, 'ABC Trading Corp.')

        voucher = self.service.approve_voucher(self.accountant, voucher.pk)
        self.assertEqual(voucher.status, VoucherStatus.APPROVED)
        self.assertEqual(voucher.approved_by_id, 2)
        self.assertEqual(self.service.list_vouchers(status=VoucherStatus.APPROVED), [voucher])

        # Paying is done by treasury, never requested here
        with self.assertRaises(WorkflowTransitionException):
            self.service.cancel_voucher(self.accountant, voucher.pk)
        with self.assertRaises(WorkflowTransitionException):
            self.service.update_voucher(self.accountant, voucher.pk, amount='1.00')

    def test_budget_role_cannot_post(self):
        """Authorization is checked before any state is read or changed."""
        self._approve_obligation()
        self._add_lines()
        with self.assertRaises(UnauthorizedRoleException):
            self.service.post_journal_entry(self.budget_officer, self.entry.pk)
        self.assertEqual(self.storage.get(JournalEntry, self.entry.pk).status, JournalEntryStatus.DRAFT)
        self.assertEqual(self._obligation_status(), ObligationStatus.APPROVED)

    def test_list_journal_entries_by_obligation(self):
        self.assertEqual(self.service.list_journal_entries(obligation_id=self.obligation.pk), [self.entry])
        self.assertEqual(self.service.list_journal_entries(obligation_id=999), [])

    def test_vouchers_cannot_exceed_entry_debit_total(self):
        """Open vouchers drawn from one entry stay within its debits."""
        self._approve_obligation()
        self._add_lines()
        self.service.post_journal_entry(self.accountant, self.entry.pk)

        def draw(number, amount):
            return self.service.create_voucher(
                self.accountant,
                journal_entry_id=self.entry.pk,
                voucher_number=number,
                payee='ABC Trading',
                description='Payment for office supplies',
                amount=amount,
                voucher_date=date(2026, 3, 10),
            )

        first = draw('DV-2026-0001', '60.00')
        with self.assertRaises(ValidationException) as ctx:
            draw('DV-2026-0002', '40.01')
        self.assertEqual(ctx.exception.details['drawn'], '60.00')
        second = draw('DV-2026-0002', '40.00')

        with self.assertRaises(ValidationException):
            self.service.update_voucher(self.accountant, first.pk, amount='60.01')
        self.service.update_voucher(self.accountant, first.pk, amount='55.00')

        # A cancelled voucher frees its share
        self.service.cancel_voucher(self.accountant, second.pk)
        draw('DV-2026-0003', '45.00')
        self.assertEqual(len(self.service.list_vouchers(journal_entry_id=self.entry.pk)), 3)
