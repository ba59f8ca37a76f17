"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Tests for disbursements and the collections ledger.
-------------------------------------------------------------------------
"""
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from apps.accounting.models import JournalEntry, JournalEntryStatus, Voucher, VoucherStatus
from apps.core.exceptions import (
    NotFoundException,
    UnauthorizedRoleException,
    ValidationException,
    WorkflowTransitionException,
)
from apps.core.storage_memory import MemoryStorage
from apps.treasury.models import Collection, CollectionStatus, CollectionType, Disbursement, DisbursementStatus
from apps.treasury.services import TreasuryService
from apps.users.models import Role, RoleModule
from apps.users.permissions import Actor


class DisbursementTestCase(SimpleTestCase):
    """Test cases for releasing funds against vouchers."""

    def setUp(self):
        """Set up test data."""
        self.storage = MemoryStorage()
        self.service = TreasuryService(storage=self.storage)
        self.treasurer = Actor(user_id=4, role=Role(name='Municipal Treasurer', module=RoleModule.TREASURY))

        entry = self.storage.create(
            JournalEntry,
            entry_number='JEV-2026-0001',
            entry_date=date(2026, 3, 5),
            description='To record purchase of office supplies',
            status=JournalEntryStatus.POSTED,
            created_by_id=2,
        )
        self.voucher = self._voucher(entry.pk, 'DV-2026-0001', VoucherStatus.APPROVED)
        self.draft_voucher = self._voucher(entry.pk, 'DV-2026-0002', VoucherStatus.DRAFT)

    def _voucher(self, entry_id, number, status):
        return self.storage.create(
            Voucher,
            journal_entry_id=entry_id,
            voucher_number=number,
            payee='ABC Trading',
            description='Payment for office supplies',
            amount=Decimal('100.00'),
            voucher_date=date(2026, 3, 10),
            status=status,
            created_by_id=2,
        )

    def _disburse(self, voucher_id, amount='100.00', actor=None):
        return self.service.disburse(
            actor or self.treasurer,
            voucher_id,
            check_number='0001234',
            bank_account='LBP-1234-5678',
            amount=amount,
            disbursement_date=date(2026, 3, 12),
        )

    def _voucher_status(self, voucher_id):
        return self.storage.get(Voucher, voucher_id).status

    def test_disburse_pays_voucher(self):
        """Issuing a disbursement flips the voucher to paid in the same unit of work."""
        disbursement = self._disburse(self.voucher.pk)
        self.assertEqual(disbursement.status, DisbursementStatus.ISSUED)
        self.assertEqual(disbursement.amount, Decimal('100.00'))
        self.assertEqual(disbursement.created_by_id, 4)
        self.assertEqual(self._voucher_status(self.voucher.pk), VoucherStatus.PAID)

    def test_draft_voucher_cannot_be_disbursed(self):
        with self.assertRaises(WorkflowTransitionException):
            self._disburse(self.draft_voucher.pk)
        self.assertEqual(self.storage.filter(Disbursement), [])
        self.assertEqual(self._voucher_status(self.draft_voucher.pk), VoucherStatus.DRAFT)

    def test_paid_voucher_cannot_be_disbursed_twice(self):
        self._disburse(self.voucher.pk)
        with self.assertRaises(WorkflowTransitionException):
            self._disburse(self.voucher.pk)
        self.assertEqual(len(self.service.list_disbursements(voucher_id=self.voucher.pk)), 1)

    def test_amount_must_match_voucher(self):
        with self.assertRaises(ValidationException):
            self._disburse(self.voucher.pk, amount='99.99')
        self.assertEqual(self.storage.filter(Disbursement), [])
        self.assertEqual(self._voucher_status(self.voucher.pk), VoucherStatus.APPROVED)

    def test_unknown_voucher(self):
        with self.assertRaises(NotFoundException):
            self._disburse(404)

    def test_cancel_disbursement_reverts_voucher(self):
        disbursement = self._disburse(self.voucher.pk)
        self.service.clear_disbursement(self.treasurer, disbursement.pk)
        cancelled = self.service.cancel_disbursement(self.treasurer, disbursement.pk)
        self.assertEqual(cancelled.status, DisbursementStatus.CANCELLED)
        self.assertEqual(self._voucher_status(self.voucher.pk), VoucherStatus.APPROVED)

        # The voucher can be paid again with a new check
        self._disburse(self.voucher.pk)
        self.assertEqual(self._voucher_status(self.voucher.pk), VoucherStatus.PAID)

    def test_issued_disbursement_cannot_be_cancelled(self):
        """A check must clear before it can be cancelled."""
        disbursement = self._disburse(self.voucher.pk)
        with self.assertRaises(WorkflowTransitionException):
            self.service.cancel_disbursement(self.treasurer, disbursement.pk)
        self.assertEqual(self.storage.get(Disbursement, disbursement.pk).status, DisbursementStatus.ISSUED)
        self.assertEqual(self._voucher_status(self.voucher.pk), VoucherStatus.PAID)

    def test_clear_disbursement(self):
        disbursement = self._disburse(self.voucher.pk)
        cleared = self.service.clear_disbursement(self.treasurer, disbursement.pk)
        self.assertEqual(cleared.status, DisbursementStatus.CLEARED)
        self.assertIsNotNone(cleared.cleared_at)

        with self.assertRaises(WorkflowTransitionException):
            self.service.clear_disbursement(self.treasurer, disbursement.pk)

    def test_accounting_role_cannot_disburse(self):
        accountant = Actor(user_id=2, role=Role(name='Municipal Accountant', module=RoleModule.ACCOUNTING))
        with self.assertRaises(UnauthorizedRoleException):
            self._disburse(self.voucher.pk, actor=accountant)
        self.assertEqual(self._voucher_status(self.voucher.pk), VoucherStatus.APPROVED)
        self.assertEqual(self.storage.filter(Disbursement), [])


class CollectionTestCase(SimpleTestCase):
    """Test cases for revenue collections."""

    def setUp(self):
        """Set up test data."""
        self.storage = MemoryStorage()
        self.service = TreasuryService(storage=self.storage)
        self.cashier = Actor(user_id=5, role=Role(name='Revenue Collector', module=RoleModule.TREASURY))

    def _record(self, receipt_number='OR-0000001', **overrides):
        data = {
            'receipt_number': receipt_number,
            'collection_date': date(2026, 1, 20),
            'payor': 'Juan Dela Cruz',
            'description': 'Business permit renewal',
            'amount': '1500.00',
            'collection_type': CollectionType.PERMIT,
            'account_code': '4-01-03-030',
        }
        data.update(overrides)
        return self.service.record_collection(self.cashier, **data)

    def test_record_and_deposit(self):
        collection = self._record()
        self.assertEqual(collection.status, CollectionStatus.RECORDED)
        self.assertEqual(collection.amount, Decimal('1500.00'))

        deposited = self.service.deposit_collection(self.cashier, collection.pk)
        self.assertEqual(deposited.status, CollectionStatus.DEPOSITED)
        self.assertIsNotNone(deposited.deposited_at)

        with self.assertRaises(WorkflowTransitionException):
            self.service.cancel_collection(self.cashier, collection.pk)

    def test_cancel_recorded_collection(self):
        collection = self._record()
        cancelled = self.service.cancel_collection(self.cashier, collection.pk)
        self.assertEqual(cancelled.status, CollectionStatus.CANCELLED)

    def test_receipt_numbers_are_unique(self):
        self._record()
        with self.assertRaises(ValidationException):
            self._record()
        self.assertEqual(len(self.storage.filter(Collection)), 1)

    def test_invalid_collection_type(self):
        with self.assertRaises(ValidationException):
            self._record(collection_type='donation')

    def test_list_collections_by_type(self):
        self._record()
        self._record('OR-0000002', collection_type=CollectionType.TAX, amount='25000.00')
        self.assertEqual(len(self.service.list_collections()), 2)
        taxes = self.service.list_collections(collection_type=CollectionType.TAX)
        self.assertEqual([c.receipt_number for c in taxes], ['OR-0000002'])
