"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Tests for the Balance Engine and the budgeting service.
-------------------------------------------------------------------------
"""
import threading
from datetime import date
from decimal import Decimal

from django.db import connection
from django.test import SimpleTestCase, TestCase, TransactionTestCase, override_settings

from apps.budgeting.balance import BalanceEngine
from apps.budgeting.models import BudgetItem, BudgetItemStatus, BudgetObligation, ObligationStatus
from apps.budgeting.services import BudgetService
from apps.core.exceptions import (
    InsufficientBalanceException,
    NotFoundException,
    StorageFailureException,
    UnauthorizedRoleException,
    ValidationException,
    WorkflowTransitionException,
)
from apps.core.storage_django import DjangoStorage
from apps.core.storage_memory import MemoryStorage
from apps.planning.models import AIPItem, AIPItemStatus, AnnualInvestmentPlan, Sector
from apps.users.models import CustomUser, Role, RoleModule
from apps.users.permissions import Actor


class BudgetServiceTestCase(SimpleTestCase):
    """Tests for obligations against an in-memory store."""

    def setUp(self):
        """Set up test data."""
        self.storage = MemoryStorage()
        self.service = BudgetService(storage=self.storage)
        self.budget_officer = Actor(
            user_id=1,
            role=Role(name='Budget Officer', module=RoleModule.BUDGET)
        )
        self.item = self.service.create_budget_item(
            self.budget_officer,
            fiscal_year=2026,
            account_code='5-02-03-010',
            description='Office Supplies Expenses',
            amount='100000.00',
        )
        self._sequence = 0

    def _obligate(self, amount, actor=None, budget_item_id=None):
        self._sequence += 1
        return self.service.create_obligation(
            actor or self.budget_officer,
            budget_item_id or self.item.pk,
            obligation_number=f'OBR-2026-{self._sequence:04d}',
            payee='ABC Trading',
            description='Supplies',
            amount=amount,
            obligation_date=date(2026, 3, 1),
        )

    def _balance(self):
        return self.storage.get(BudgetItem, self.item.pk).balance

    def test_new_item_balance_equals_amount(self):
        self.assertEqual(self.item.amount, Decimal('100000.00'))
        self.assertEqual(self.item.balance, Decimal('100000.00'))
        self.assertEqual(self.item.status, BudgetItemStatus.ACTIVE)
        self.assertEqual(self.item.version, 0)

    def test_sequential_obligations(self):
        """60,000 fits, 50,000 is refused, 40,000 uses up the rest."""
        result = self._obligate('60000.00')
        self.assertEqual(result.budget_item.balance, Decimal('40000.00'))
        self.assertEqual(result.obligation.status, ObligationStatus.PENDING)
        self.assertEqual(result.obligation.amount, Decimal('60000.00'))

        with self.assertRaises(InsufficientBalanceException) as ctx:
            self._obligate('50000.00')
        self.assertEqual(ctx.exception.details['requested'], '50000.00')
        self.assertEqual(ctx.exception.details['available'], '40000.00')
        self.assertEqual(self._balance(), Decimal('40000.00'))
        self.assertEqual(len(self.service.list_obligations(budget_item_id=self.item.pk)), 1)

        result = self._obligate('40000.00')
        self.assertEqual(result.budget_item.balance, Decimal('0.00'))
        self.assertEqual(result.budget_item.version, 2)

    def test_out_of_range_amount_is_refused(self):
        with self.assertRaises(ValidationException):
            self._obligate('1e30')
        self.assertEqual(self._balance(), Decimal('100000.00'))
        self.assertEqual(self.service.list_obligations(budget_item_id=self.item.pk), [])

    def test_balance_is_amount_minus_open_obligations(self):
        """After any sequence of operations balance equals amount minus obligations."""
        for amount in ('12500.50', '7000.25', '30000.00', '99999.00', '0.25'):
            try:
                self._obligate(amount)
            except InsufficientBalanceException:
                pass

        obligations = self.service.list_obligations(budget_item_id=self.item.pk)
        obligated = sum((o.amount for o in obligations), Decimal('0.00'))
        self.assertEqual(obligated, Decimal('49501.00'))
        self.assertEqual(self._balance(), Decimal('100000.00') - obligated)

    def test_concurrent_obligations_never_overdraw(self):
        """Ten parallel 15,000 requests against 100,000: six succeed, four fail."""
        successes = []
        failures = []
        guard = threading.Lock()

        def worker(number):
            try:
                self.service.create_obligation(
                    self.budget_officer,
                    self.item.pk,
                    obligation_number=f'OBR-T-{number:02d}',
                    payee='Parallel Payee',
                    amount='15000.00',
                    obligation_date=date(2026, 4, 1),
                )
            except InsufficientBalanceException as exc:
                with guard:
                    failures.append(exc)
            else:
                with guard:
                    successes.append(number)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(successes), 6)
        self.assertEqual(len(failures), 4)
        self.assertEqual(self._balance(), Decimal('10000.00'))
        self.assertEqual(len(self.service.list_obligations(budget_item_id=self.item.pk)), 6)

    def test_amount_validation(self):
        """Zero, negative and float amounts are rejected without writes."""
        for amount in ('0', '-100.00', 100.0, '1.001'):
            with self.assertRaises(ValidationException):
                self._obligate(amount)
        self.assertEqual(self._balance(), Decimal('100000.00'))

    def test_unknown_budget_item(self):
        with self.assertRaises(NotFoundException):
            self._obligate('10.00', budget_item_id=999)

    def test_wrong_module_is_refused(self):
        """An accounting role cannot create obligations."""
        accountant = Actor(user_id=2, role=Role(name='Accountant', module=RoleModule.ACCOUNTING))
        with self.assertRaises(UnauthorizedRoleException):
            self._obligate('10.00', actor=accountant)
        self.assertEqual(self._balance(), Decimal('100000.00'))
        self.assertEqual(self.service.list_obligations(), [])

    def test_admin_may_obligate(self):
        admin = Actor(user_id=9, role=Role(name='Administrator', module=RoleModule.ADMIN))
        result = self._obligate('10.00', actor=admin)
        self.assertEqual(result.obligation.created_by_id, 9)

    def test_approve_obligation(self):
        obligation = self._obligate('500.00').obligation
        approved = self.service.approve_obligation(self.budget_officer, obligation.pk)
        self.assertEqual(approved.status, ObligationStatus.APPROVED)
        self.assertEqual(approved.approved_by_id, 1)
        self.assertIsNotNone(approved.approved_at)

        # Approving twice is not a legal step
        with self.assertRaises(WorkflowTransitionException):
            self.service.approve_obligation(self.budget_officer, obligation.pk)

    def test_cancel_obligation_restores_balance(self):
        obligation = self._obligate('60000.00').obligation
        cancelled = self.service.cancel_obligation(self.budget_officer, obligation.pk)
        self.assertEqual(cancelled.status, ObligationStatus.CANCELLED)
        self.assertEqual(self._balance(), Decimal('100000.00'))

    @override_settings(FMS_RELEASE_BALANCE_ON_CANCEL=False)
    def test_cancel_without_release(self):
        obligation = self._obligate('60000.00').obligation
        self.service.cancel_obligation(self.budget_officer, obligation.pk)
        self.assertEqual(self._balance(), Decimal('40000.00'))

    def test_only_pending_obligations_can_be_cancelled(self):
        obligation = self._obligate('100.00').obligation
        self.service.approve_obligation(self.budget_officer, obligation.pk)
        with self.assertRaises(WorkflowTransitionException):
            self.service.cancel_obligation(self.budget_officer, obligation.pk)
        self.assertEqual(self._balance(), Decimal('99900.00'))

    def test_depleted_item_lifecycle(self):
        """A depleted item refuses obligations until a release reactivates it."""
        with self.assertRaises(WorkflowTransitionException):
            self.service.mark_budget_item_depleted(self.budget_officer, self.item.pk)

        obligation = self._obligate('100000.00').obligation
        item = self.service.mark_budget_item_depleted(self.budget_officer, self.item.pk)
        self.assertEqual(item.status, BudgetItemStatus.DEPLETED)

        with self.assertRaises(WorkflowTransitionException):
            self._obligate('1.00')

        self.service.cancel_obligation(self.budget_officer, obligation.pk)
        item = self.storage.get(BudgetItem, self.item.pk)
        self.assertEqual(item.status, BudgetItemStatus.ACTIVE)
        self.assertEqual(item.balance, Decimal('100000.00'))

    def test_cancel_budget_item_requires_no_open_obligations(self):
        obligation = self._obligate('100.00').obligation
        with self.assertRaises(WorkflowTransitionException) as ctx:
            self.service.cancel_budget_item(self.budget_officer, self.item.pk)
        self.assertEqual(ctx.exception.details['open_obligations'], 1)

        self.service.cancel_obligation(self.budget_officer, obligation.pk)
        item = self.service.cancel_budget_item(self.budget_officer, self.item.pk)
        self.assertEqual(item.status, BudgetItemStatus.CANCELLED)

        with self.assertRaises(WorkflowTransitionException):
            self._obligate('1.00')

    def test_update_budget_item(self):
        item = self.service.update_budget_item(self.budget_officer, self.item.pk, description='Office Supplies')
        self.assertEqual(item.description, 'Office Supplies')
        self.assertEqual(item.updated_by_id, 1)

        # Balance is owned by the engine
        with self.assertRaises(ValidationException):
            self.service.update_budget_item(self.budget_officer, self.item.pk, balance='1.00')

    def test_list_budget_items(self):
        self.service.create_budget_item(
            self.budget_officer, fiscal_year=2027, account_code='5-02-01-010',
            description='Travelling Expenses', amount='5000.00'
        )
        self.assertEqual(len(self.service.list_budget_items()), 2)
        self.assertEqual(
            [i.account_code for i in self.service.list_budget_items(fiscal_year=2027)],
            ['5-02-01-010']
        )

    def test_create_budget_item_requires_fields(self):
        with self.assertRaises(ValidationException) as ctx:
            self.service.create_budget_item(self.budget_officer, fiscal_year=2026, amount='10.00')
        self.assertEqual(ctx.exception.details['fields'], ['account_code', 'description'])


class BalanceEngineTestCase(SimpleTestCase):
    """Tests for the engine used directly, without the service layer."""

    def setUp(self):
        """Set up test data."""
        self.storage = MemoryStorage()
        self.engine = BalanceEngine(self.storage)
        self.item = self.storage.create(
            BudgetItem,
            fiscal_year=2026,
            account_code='5-02-13-050',
            description='Repairs and Maintenance',
            amount=Decimal('1000.00'),
            balance=Decimal('1000.00'),
            created_by_id=1,
        )

    def _apply(self, amount, number='OBR-1'):
        return self.engine.apply_obligation(
            self.item.pk,
            Decimal(amount),
            actor_id=1,
            obligation_number=number,
            payee='Payee',
            obligation_date=date(2026, 1, 15),
        )

    def test_exact_balance_is_allowed(self):
        result = self._apply('1000.00')
        self.assertEqual(result.budget_item.balance, Decimal('0.00'))

    def test_one_cent_over_is_refused(self):
        with self.assertRaises(InsufficientBalanceException):
            self._apply('1000.01')
        self.assertEqual(self.storage.filter(BudgetObligation), [])

    def test_duplicate_number_rolls_back_decrement(self):
        """If the obligation cannot be stored the balance is left unchanged."""
        self._apply('100.00')
        with self.assertRaises(ValidationException):
            self._apply('100.00')
        self.assertEqual(self.storage.get(BudgetItem, self.item.pk).balance, Decimal('900.00'))

    def test_release_cannot_exceed_allocation(self):
        stray = BudgetObligation(budget_item_id=self.item.pk, amount=Decimal('5.00'))
        with self.assertRaises(ValidationException):
            self.engine.release_obligation(stray, actor_id=1)


class BudgetServiceDatabaseTestCase(TestCase):
    """Tests for the budgeting service against the Django ORM adapter."""

    def setUp(self):
        """Set up test data."""
        self.role = Role.objects.create(name='Budget Officer', module=RoleModule.BUDGET)
        self.user = CustomUser.objects.create_user(
            username='budget.officer',
            password='testpass123',
            role=self.role,
        )
        self.actor = Actor(user_id=self.user.pk, role=self.role)
        self.service = BudgetService(storage=DjangoStorage())

        self.aip = AnnualInvestmentPlan.objects.create(
            fiscal_year=2026,
            title='AIP 2026',
            total_budget=Decimal('5000000.00'),
            created_by=self.user,
        )
        self.aip_item = AIPItem.objects.create(
            aip=self.aip,
            project_name='Farm-to-Market Road',
            sector=Sector.INFRASTRUCTURE,
            location='Barangay San Isidro',
            budget=Decimal('100000.00'),
            start_date=date(2026, 2, 1),
            end_date=date(2026, 11, 30),
            created_by=self.user,
        )

    def _fund(self):
        return self.service.create_budget_item(
            self.actor,
            aip_item_id=self.aip_item.pk,
            fiscal_year=2026,
            account_code='5-01-01-010',
            description='Road Concreting',
            amount='100000.00',
        )

    def test_draft_aip_item_cannot_be_funded(self):
        with self.assertRaises(WorkflowTransitionException):
            self._fund()
        self.assertFalse(BudgetItem.objects.exists())

    def test_obligations_persist_with_audit_fields(self):
        self.aip_item.status = AIPItemStatus.APPROVED
        self.aip_item.save()

        item = self._fund()
        self.assertEqual(item.aip_item, self.aip_item)
        self.assertEqual(item.created_by, self.user)

        result = self.service.create_obligation(
            self.actor,
            item.pk,
            obligation_number='OBR-2026-0001',
            payee='ABC Construction',
            amount='60000.00',
            obligation_date=date(2026, 3, 1),
        )
        with self.assertRaises(InsufficientBalanceException):
            self.service.create_obligation(
                self.actor,
                item.pk,
                obligation_number='OBR-2026-0002',
                payee='ABC Construction',
                amount='50000.00',
                obligation_date=date(2026, 3, 2),
            )

        item.refresh_from_db()
        self.assertEqual(item.balance, Decimal('40000.00'))
        self.assertEqual(item.obligated_amount, Decimal('60000.00'))
        self.assertEqual(item.version, 1)
        self.assertEqual(BudgetObligation.objects.count(), 1)
        self.assertEqual(result.obligation.created_by, self.user)
        self.assertEqual(list(self.aip_item.budget_items.all()), [item])


class ConcurrentObligationDatabaseTestCase(TransactionTestCase):
    """Parallel obligations against one budget item on the ORM adapter."""

    def setUp(self):
        """Set up a funded budget item."""
        self.user = CustomUser.objects.create_user(username='budget.officer', password='testpass123')
        self.actor = Actor(user_id=self.user.pk, role=Role(name='Budget Officer', module=RoleModule.BUDGET))
        self.service = BudgetService(storage=DjangoStorage(retry_attempts=3, retry_backoff=0.01))
        self.item = self.service.create_budget_item(
            self.actor,
            fiscal_year=2026,
            account_code='5-02-03-010',
            description='Office Supplies Expenses',
            amount='100000.00',
        )

    def test_parallel_obligations_conserve_balance(self):
        """
        Ten parallel 15,000 requests against 100,000.

        With row locks six succeed and four are refused for balance.
        Without them (SQLite) some requests fail on lock contention
        instead, but the balance never goes negative and always equals
        the allocation minus what was obligated.
        """
        successes = []
        failures = []
        guard = threading.Lock()

        def worker(number):
            try:
                self.service.create_obligation(
                    self.actor,
                    self.item.pk,
                    obligation_number=f'OBR-T-{number:02d}',
                    payee='Parallel Payee',
                    amount='15000.00',
                    obligation_date=date(2026, 4, 1),
                )
            except (InsufficientBalanceException, StorageFailureException) as exc:
                with guard:
                    failures.append(exc)
            else:
                with guard:
                    successes.append(number)
            finally:
                connection.close()

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(successes) + len(failures), 10)
        self.assertLessEqual(len(successes), 6)

        item = BudgetItem.objects.get(pk=self.item.pk)
        self.assertGreaterEqual(item.balance, Decimal('0.00'))
        self.assertEqual(item.balance, Decimal('100000.00') - Decimal('15000.00') * len(successes))
        self.assertEqual(BudgetObligation.objects.filter(budget_item=item).count(), len(successes))

        if connection.features.has_select_for_update:
            self.assertEqual(len(successes), 6)
            self.assertTrue(all(isinstance(exc, InsufficientBalanceException) for exc in failures))
