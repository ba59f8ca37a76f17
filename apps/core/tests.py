"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Tests for the core engine: payload validators, the workflow
             state machine, the exception hierarchy and both Storage
             Port adapters including the retry policy.
-------------------------------------------------------------------------
"""
from datetime import date
from decimal import Decimal
from unittest import mock

from django.db import OperationalError, transaction
from django.db.models.query import QuerySet
from django.test import SimpleTestCase, TestCase, override_settings

from apps.accounting.models import JournalEntryItem
from apps.budgeting.models import BudgetItem, BudgetObligation
from apps.core.exceptions import (
    FMSException,
    InsufficientBalanceException,
    StorageFailureException,
    UnbalancedEntryException,
    ValidationException,
    WorkflowTransitionException,
)
from apps.core.logging import WorkflowLogger
from apps.core.storage import get_storage
from apps.core.storage_django import DjangoStorage
from apps.core.storage_memory import MemoryStorage
from apps.core.validators import clean_amount, clean_choice, only_fields, require_fields
from apps.core.workflows import (
    Entity,
    can_transition,
    get_valid_transitions,
    plan_transition,
)
from apps.hris.models import PayrollItem
from apps.treasury.models import Collection, CollectionStatus, CollectionType
from apps.treasury.services import TreasuryService
from apps.users.models import CustomUser, Role, RoleModule
from apps.users.permissions import Actor


class ValidatorTestCase(SimpleTestCase):
    """Tests for monetary and payload validators."""

    def test_clean_amount_accepts_exact_values(self):
        """Strings, ints and Decimals are parsed to two-place Decimals."""
        self.assertEqual(clean_amount('100000'), Decimal('100000.00'))
        self.assertEqual(clean_amount(250), Decimal('250.00'))
        self.assertEqual(clean_amount(Decimal('12.5')), Decimal('12.50'))
        self.assertEqual(clean_amount('1.500'), Decimal('1.50'))

    def test_clean_amount_rejects_float(self):
        """Floats are never accepted as money."""
        with self.assertRaises(ValidationException):
            clean_amount(100.0)

    def test_clean_amount_rejects_extra_precision(self):
        """More than two decimal places is rejected."""
        with self.assertRaises(ValidationException) as ctx:
            clean_amount('10.005')
        self.assertEqual(ctx.exception.details['field'], 'amount')

    def test_clean_amount_rejects_non_positive(self):
        """Zero and negatives are rejected unless zero is allowed."""
        with self.assertRaises(ValidationException):
            clean_amount('0')
        with self.assertRaises(ValidationException):
            clean_amount('-5.00')
        self.assertEqual(clean_amount('0', allow_zero=True), Decimal('0.00'))

    def test_clean_amount_rejects_garbage(self):
        with self.assertRaises(ValidationException):
            clean_amount('abc')
        with self.assertRaises(ValidationException):
            clean_amount('NaN')

    def test_clean_amount_rejects_out_of_range(self):
        """Huge exponents are reported as validation errors, not decimal errors."""
        with self.assertRaises(ValidationException) as ctx:
            clean_amount('1e30')
        self.assertEqual(ctx.exception.details['field'], 'amount')
        with self.assertRaises(ValidationException):
            clean_amount(Decimal('-1E+30'))
        with self.assertRaises(ValidationException):
            clean_amount('10000000000000.00')
        self.assertEqual(clean_amount('9999999999999.99'), Decimal('9999999999999.99'))

    def test_require_fields_lists_missing(self):
        """All missing or blank fields are reported together."""
        with self.assertRaises(ValidationException) as ctx:
            require_fields({'payee': '  ', 'amount': '1'}, 'payee', 'amount', 'obligation_number')
        self.assertEqual(ctx.exception.details['fields'], ['payee', 'obligation_number'])

    def test_only_fields_rejects_status_edit(self):
        """Free-form edits cannot touch status."""
        with self.assertRaises(ValidationException):
            only_fields({'status': 'posted'}, ('description',))

    def test_clean_choice(self):
        self.assertEqual(clean_choice('tax', ['tax', 'fee'], 'collection_type'), 'tax')
        with self.assertRaises(ValidationException):
            clean_choice('bribe', ['tax', 'fee'], 'collection_type')


class ExceptionTestCase(SimpleTestCase):
    """Tests for the exception hierarchy."""

    def test_default_message_and_dict(self):
        """Exceptions carry an error code and serialise to a dict."""
        exc = InsufficientBalanceException(details={'available': '40000.00'})
        self.assertIsInstance(exc, FMSException)
        self.assertEqual(
            exc.to_dict(),
            {
                'error_code': 'ERR_INSUFFICIENT_BALANCE',
                'message': exc.default_message,
                'details': {'available': '40000.00'},
            }
        )

    def test_storage_failure_is_distinct_from_business_errors(self):
        exc = StorageFailureException()
        self.assertEqual(exc.error_code, 'ERR_STORAGE_FAILURE')
        self.assertNotIsInstance(exc, ValidationException)


class WorkflowStateMachineTestCase(SimpleTestCase):
    """Tests for the pure transition planner."""

    def _line(self, debit='0', credit='0'):
        return JournalEntryItem(debit=Decimal(debit), credit=Decimal(credit))

    def test_valid_transitions_of_voucher(self):
        self.assertEqual(get_valid_transitions(Entity.VOUCHER, 'draft'), ['approved', 'cancelled'])
        self.assertEqual(get_valid_transitions(Entity.JOURNAL_ENTRY, 'posted'), [])

    def test_unknown_entity(self):
        with self.assertRaises(WorkflowTransitionException):
            get_valid_transitions('invoice', 'draft')

    def test_can_transition_hides_system_steps(self):
        """System-only steps are reachable only for the engine."""
        self.assertFalse(can_transition(Entity.VOUCHER, 'approved', 'paid'))
        self.assertTrue(can_transition(Entity.VOUCHER, 'approved', 'paid', system=True))
        self.assertFalse(can_transition(Entity.VOUCHER, 'draft', 'paid', system=True))

    def test_illegal_transition_raises(self):
        """Out-of-order requests fail instead of mutating state."""
        with self.assertRaises(WorkflowTransitionException) as ctx:
            plan_transition(Entity.AIP_ITEM, 'draft', 'completed')
        self.assertEqual(ctx.exception.details['from_status'], 'draft')
        self.assertEqual(ctx.exception.details['to_status'], 'completed')

    def test_repeat_transition_raises(self):
        """Posting an already-posted entry is not a legal step."""
        with self.assertRaises(WorkflowTransitionException):
            plan_transition(Entity.JOURNAL_ENTRY, 'posted', 'posted')

    def test_system_only_transition_refused_for_callers(self):
        with self.assertRaises(WorkflowTransitionException):
            plan_transition(Entity.OBLIGATION, 'approved', 'processed')

    def test_posting_plans_obligation_side_effect(self):
        """Posting an entry with an approved obligation marks it processed."""
        plan = plan_transition(
            Entity.JOURNAL_ENTRY, 'draft', 'posted',
            {
                'items': [self._line(debit='100'), self._line(credit='100')],
                'obligation_id': 7,
                'obligation_status': 'approved',
            }
        )
        self.assertEqual(plan.target, 'posted')
        self.assertEqual(plan.stamp_fields, ('posted_by', 'posted_at'))
        self.assertEqual(len(plan.side_effects), 1)
        effect = plan.side_effects[0]
        self.assertEqual(effect.model_label, 'budgeting.BudgetObligation')
        self.assertEqual(effect.pk, 7)
        self.assertEqual(effect.plan.target, 'processed')
        self.assertEqual(effect.plan.stamp_fields, ('processed_by', 'processed_at'))

    def test_posting_requires_approved_obligation(self):
        with self.assertRaises(WorkflowTransitionException):
            plan_transition(
                Entity.JOURNAL_ENTRY, 'draft', 'posted',
                {
                    'items': [self._line(debit='100'), self._line(credit='100')],
                    'obligation_id': 7,
                    'obligation_status': 'pending',
                }
            )

    def test_posting_unbalanced_entry(self):
        with self.assertRaises(UnbalancedEntryException) as ctx:
            plan_transition(
                Entity.JOURNAL_ENTRY, 'draft', 'posted',
                {'items': [self._line(debit='100'), self._line(credit='90')]}
            )
        self.assertEqual(ctx.exception.details['difference'], '10.00')

    def test_posting_without_items(self):
        with self.assertRaises(ValidationException):
            plan_transition(Entity.JOURNAL_ENTRY, 'draft', 'posted', {'items': []})

    def test_budget_item_depletion_guard(self):
        with self.assertRaises(WorkflowTransitionException):
            plan_transition(Entity.BUDGET_ITEM, 'active', 'depleted', {'balance': Decimal('0.01')})
        plan = plan_transition(Entity.BUDGET_ITEM, 'active', 'depleted', {'balance': Decimal('0.00')})
        self.assertEqual(plan.target, 'depleted')

    def test_budget_item_cancel_guard(self):
        with self.assertRaises(WorkflowTransitionException):
            plan_transition(Entity.BUDGET_ITEM, 'active', 'cancelled', {'open_obligations': 2})

    def test_disbursement_cancel_reverts_voucher(self):
        plan = plan_transition(
            Entity.DISBURSEMENT, 'cleared', 'cancelled', {'voucher_id': 3, 'voucher_status': 'paid'}
        )
        self.assertEqual(plan.side_effects[0].model_label, 'accounting.Voucher')
        self.assertEqual(plan.side_effects[0].plan.target, 'approved')

    def test_issued_disbursement_must_clear_before_cancel(self):
        with self.assertRaises(WorkflowTransitionException):
            plan_transition(
                Entity.DISBURSEMENT, 'issued', 'cancelled', {'voucher_id': 3, 'voucher_status': 'paid'}
            )

    def test_payroll_requires_items(self):
        with self.assertRaises(WorkflowTransitionException):
            plan_transition(Entity.PAYROLL, 'draft', 'finalized', {'item_count': 0})

    def test_build_patch(self):
        """Stamps map actor fields to attnames and time fields to now."""
        now = mock.sentinel.now
        plan = plan_transition(Entity.VOUCHER, 'draft', 'approved')
        self.assertEqual(
            plan.build_patch(5, now),
            {'status': 'approved', 'approved_by_id': 5, 'approved_at': now}
        )
        plan = plan_transition(Entity.COLLECTION, 'recorded', 'deposited')
        self.assertEqual(plan.build_patch(5, now), {'status': 'deposited', 'deposited_at': now})


class FlakyMemoryStorage(MemoryStorage):
    """MemoryStorage whose operations can be made to fail transiently."""

    transient_errors = (OperationalError,)


class MemoryStorageTestCase(SimpleTestCase):
    """Tests for the in-memory Storage Port adapter."""

    def setUp(self):
        """Set up an empty store."""
        self.storage = MemoryStorage()

    def _create_item(self, **overrides):
        fields = {
            'fiscal_year': 2026,
            'account_code': '5-02-03-010',
            'description': 'Office Supplies',
            'amount': Decimal('1000.00'),
            'balance': Decimal('1000.00'),
            'created_by_id': 1,
        }
        fields.update(overrides)
        return self.storage.create(BudgetItem, **fields)

    def test_create_get_filter_update(self):
        item = self._create_item()
        self.assertEqual(item.pk, 1)
        self.assertIsNotNone(item.created_at)

        fetched = self.storage.get(BudgetItem, item.pk)
        self.assertEqual(fetched.balance, Decimal('1000.00'))
        self.assertEqual(fetched.status, 'active')

        self._create_item(fiscal_year=2027)
        self.assertEqual([i.fiscal_year for i in self.storage.filter(BudgetItem)], [2026, 2027])
        self.assertEqual(len(self.storage.filter(BudgetItem, fiscal_year=2027)), 1)

        updated = self.storage.update(BudgetItem, item.pk, balance=Decimal('400.00'))
        self.assertEqual(updated.balance, Decimal('400.00'))
        self.assertIsNone(self.storage.update(BudgetItem, 99, balance=Decimal('1.00')))
        self.assertIsNone(self.storage.get(BudgetItem, 99))

    def test_returned_instances_are_copies(self):
        """Mutating a returned instance does not change stored state."""
        item = self._create_item()
        item.balance = Decimal('0.00')
        self.assertEqual(self.storage.get(BudgetItem, item.pk).balance, Decimal('1000.00'))

    def test_unique_field_enforced(self):
        fields = {
            'budget_item_id': 1,
            'obligation_number': 'OBR-0001',
            'payee': 'ABC Construction',
            'amount': Decimal('10.00'),
            'obligation_date': date(2026, 3, 1),
            'created_by_id': 1,
        }
        self.storage.create(BudgetObligation, **fields)
        with self.assertRaises(ValidationException):
            self.storage.create(BudgetObligation, **fields)

    def test_unique_together_enforced(self):
        fields = {
            'payroll_id': 1,
            'employee_id': 4,
            'basic_pay': Decimal('20000.00'),
            'net_pay': Decimal('20000.00'),
        }
        self.storage.create(PayrollItem, **fields)
        with self.assertRaises(ValidationException):
            self.storage.create(PayrollItem, **fields)

    def test_unit_of_work_rolls_back_on_error(self):
        """Any exception leaving the block discards the writes."""
        item = self._create_item()
        with self.assertRaises(InsufficientBalanceException):
            with self.storage.unit_of_work():
                self.storage.update(BudgetItem, item.pk, balance=Decimal('0.00'))
                self._create_item(fiscal_year=2030)
                raise InsufficientBalanceException()

        self.assertEqual(self.storage.get(BudgetItem, item.pk).balance, Decimal('1000.00'))
        self.assertEqual(len(self.storage.filter(BudgetItem)), 1)

    def test_nested_rollback_keeps_outer_work(self):
        """A failed inner unit of work behaves like a savepoint."""
        with self.storage.unit_of_work():
            self._create_item()
            try:
                with self.storage.unit_of_work():
                    self._create_item(fiscal_year=2030)
                    raise ValidationException()
            except ValidationException:
                pass
        self.assertEqual([i.fiscal_year for i in self.storage.filter(BudgetItem)], [2026])

    @mock.patch('apps.core.storage.time.sleep')
    def test_run_atomic_retries_transient_error_once(self, mock_sleep):
        """A transient failure is retried after the backoff delay."""
        storage = FlakyMemoryStorage(retry_attempts=1, retry_backoff=0.05)
        calls = []

        def operation():
            calls.append(1)
            storage.create(
                BudgetItem, fiscal_year=2026, account_code='X', description='X',
                amount=Decimal('1.00'), balance=Decimal('1.00'), created_by_id=1
            )
            if len(calls) == 1:
                raise OperationalError('database is locked')
            return 'done'

        self.assertEqual(storage.run_atomic(operation), 'done')
        self.assertEqual(len(calls), 2)
        mock_sleep.assert_called_once_with(0.05)
        # The failed attempt left nothing behind
        self.assertEqual(len(storage.filter(BudgetItem)), 1)

    @mock.patch('apps.core.storage.time.sleep')
    def test_run_atomic_surfaces_storage_failure(self, mock_sleep):
        """Exhausted retries surface as StorageFailureException."""
        storage = FlakyMemoryStorage(retry_attempts=1, retry_backoff=0.05)

        def operation():
            raise OperationalError('could not obtain lock')

        with self.assertRaises(StorageFailureException) as ctx:
            storage.run_atomic(operation)
        self.assertEqual(ctx.exception.details['attempts'], 2)
        self.assertIsInstance(ctx.exception.__cause__, OperationalError)
        mock_sleep.assert_called_once_with(0.05)

    @mock.patch('apps.core.storage.time.sleep')
    def test_run_atomic_backoff_is_exponential(self, mock_sleep):
        storage = FlakyMemoryStorage(retry_attempts=3, retry_backoff=0.1)

        def operation():
            raise OperationalError('timeout')

        with self.assertRaises(StorageFailureException):
            storage.run_atomic(operation)
        self.assertEqual([c.args[0] for c in mock_sleep.call_args_list], [0.1, 0.2, 0.4])

    @mock.patch('apps.core.storage.time.sleep')
    def test_business_errors_are_not_retried(self, mock_sleep):
        storage = FlakyMemoryStorage()

        def operation():
            raise InsufficientBalanceException()

        with self.assertRaises(InsufficientBalanceException):
            storage.run_atomic(operation)
        mock_sleep.assert_not_called()

    def test_on_commit_waits_for_outermost_unit_of_work(self):
        """Callbacks from nested calls run once, after the outer commit."""
        committed = []

        def inner():
            self.storage.on_commit(lambda: committed.append('inner'))

        def outer():
            self.storage.run_atomic(inner)
            self.assertEqual(committed, [])
            return 'done'

        self.assertEqual(self.storage.run_atomic(outer), 'done')
        self.assertEqual(committed, ['inner'])

        # Outside a unit of work callbacks run straight away
        self.storage.on_commit(lambda: committed.append('now'))
        self.assertEqual(committed, ['inner', 'now'])

    def test_on_commit_discarded_on_rollback(self):
        committed = []

        def operation():
            self.storage.on_commit(lambda: committed.append('posted'))
            raise UnbalancedEntryException()

        with self.assertRaises(UnbalancedEntryException):
            self.storage.run_atomic(operation)
        self.storage.run_atomic(lambda: None)
        self.assertEqual(committed, [])

    @mock.patch('apps.core.storage.time.sleep')
    def test_on_commit_of_failed_attempt_is_not_replayed(self, mock_sleep):
        storage = FlakyMemoryStorage(retry_attempts=1, retry_backoff=0.05)
        attempts = []
        committed = []

        def operation():
            attempts.append(1)
            storage.on_commit(lambda attempt=len(attempts): committed.append(attempt))
            if len(attempts) == 1:
                raise OperationalError('database is locked')

        storage.run_atomic(operation)
        self.assertEqual(committed, [2])

    @override_settings(FMS_STORAGE_RETRY_ATTEMPTS=4, FMS_STORAGE_RETRY_BACKOFF=0.5)
    def test_retry_policy_read_from_settings(self):
        storage = MemoryStorage()
        self.assertEqual(storage.retry_attempts, 4)
        self.assertEqual(storage.retry_backoff, 0.5)

    @override_settings(FMS_STORAGE_BACKEND='apps.core.storage_memory.MemoryStorage')
    def test_get_storage_uses_configured_backend(self):
        self.assertIsInstance(get_storage(), MemoryStorage)
        self.assertIsInstance(get_storage('apps.core.storage_django.DjangoStorage'), DjangoStorage)


class DjangoStorageTestCase(TestCase):
    """Tests for the Django ORM Storage Port adapter."""

    def setUp(self):
        """Set up a user and a budget item."""
        self.user = CustomUser.objects.create_user(username='budget.officer', password='testpass123')
        self.storage = DjangoStorage()
        self.item = self.storage.create(
            BudgetItem,
            fiscal_year=2026,
            account_code='5-02-03-010',
            description='Office Supplies',
            amount=Decimal('1000.00'),
            balance=Decimal('1000.00'),
            created_by_id=self.user.pk,
        )

    def test_create_get_update(self):
        self.assertEqual(BudgetItem.objects.count(), 1)
        updated = self.storage.update(BudgetItem, self.item.pk, balance=Decimal('250.00'), updated_by_id=self.user.pk)
        self.assertEqual(updated.balance, Decimal('250.00'))
        self.item.refresh_from_db()
        self.assertEqual(self.item.balance, Decimal('250.00'))
        self.assertEqual(self.item.updated_by, self.user)
        self.assertIsNone(self.storage.get(BudgetItem, 9999))
        self.assertIsNone(self.storage.update(BudgetItem, 9999, balance=Decimal('1.00')))

    def test_filter_and_exists(self):
        self.assertEqual(self.storage.filter(BudgetItem, fiscal_year=2026), [self.item])
        self.assertTrue(self.storage.exists(BudgetItem, account_code='5-02-03-010'))
        self.assertFalse(self.storage.exists(BudgetItem, fiscal_year=1999))

    def test_get_for_update_locks_row(self):
        """Locked reads go through select_for_update."""
        with mock.patch.object(QuerySet, 'select_for_update', autospec=True,
                               side_effect=lambda qs, **kwargs: qs) as mock_lock:
            with transaction.atomic():
                locked = self.storage.get(BudgetItem, self.item.pk, for_update=True)
        self.assertEqual(locked, self.item)
        mock_lock.assert_called_once()

    def test_integrity_error_becomes_validation_error(self):
        fields = {
            'budget_item_id': self.item.pk,
            'obligation_number': 'OBR-0001',
            'payee': 'ABC Construction',
            'amount': Decimal('10.00'),
            'obligation_date': date(2026, 3, 1),
            'created_by_id': self.user.pk,
        }
        self.storage.create(BudgetObligation, **fields)
        with self.assertRaises(ValidationException):
            self.storage.create(BudgetObligation, **fields)
        # The outer transaction is still usable
        self.assertEqual(BudgetObligation.objects.count(), 1)

    def test_unit_of_work_rollback(self):
        with self.assertRaises(InsufficientBalanceException):
            with self.storage.unit_of_work():
                self.storage.update(BudgetItem, self.item.pk, balance=Decimal('0.00'))
                raise InsufficientBalanceException()
        self.item.refresh_from_db()
        self.assertEqual(self.item.balance, Decimal('1000.00'))

    @mock.patch('apps.core.storage.time.sleep')
    def test_operational_error_retried_then_fails(self, mock_sleep):
        """Lock contention is retried once and then reported as StorageFailure."""
        calls = []

        def operation():
            calls.append(1)
            raise OperationalError('deadlock detected')

        with self.assertRaises(StorageFailureException):
            self.storage.run_atomic(operation)
        self.assertEqual(len(calls), 2)
        mock_sleep.assert_called_once()

    def test_on_commit_waits_for_transaction(self):
        committed = []
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            self.storage.run_atomic(self.storage.on_commit, lambda: committed.append('ok'))
            self.assertEqual(committed, [])
        self.assertEqual(len(callbacks), 1)
        self.assertEqual(committed, ['ok'])

    def test_on_commit_dropped_on_rollback(self):
        committed = []

        def operation():
            self.storage.on_commit(lambda: committed.append('lost'))
            raise InsufficientBalanceException()

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            with self.assertRaises(InsufficientBalanceException):
                self.storage.run_atomic(operation)
        self.assertEqual(callbacks, [])
        self.assertEqual(committed, [])


class TransitionLoggingTestCase(SimpleTestCase):
    """Tests that transitions are logged only once they are committed."""

    def setUp(self):
        """Set up a recorded collection."""
        self.storage = MemoryStorage()
        self.service = TreasuryService(storage=self.storage)
        self.cashier = Actor(user_id=5, role=Role(name='Revenue Collector', module=RoleModule.TREASURY))
        self.collection = self.service.record_collection(
            self.cashier,
            receipt_number='OR-0000001',
            collection_date=date(2026, 1, 20),
            payor='Juan Dela Cruz',
            description='Business permit renewal',
            amount='1500.00',
            collection_type=CollectionType.PERMIT,
            account_code='4-01-03-030',
        )

    def test_committed_transition_is_logged(self):
        with self.assertLogs('fms.workflow', level='INFO') as logs:
            self.service.deposit_collection(self.cashier, self.collection.pk)
        self.assertEqual(len(logs.output), 1)
        self.assertIn('Transition applied', logs.output[0])

    def test_rolled_back_transition_is_not_logged(self):
        def deposit_then_fail():
            self.service._transition(
                self.cashier, Collection, self.collection.pk, Entity.COLLECTION, CollectionStatus.DEPOSITED
            )
            raise ValidationException('Deposit slip does not match the receipt.')

        with mock.patch.object(WorkflowLogger, 'log_transition') as log_transition:
            with self.assertRaises(ValidationException):
                self.storage.run_atomic(deposit_then_fail)

        log_transition.assert_not_called()
        self.assertEqual(self.storage.get(Collection, self.collection.pk).status, CollectionStatus.RECORDED)
