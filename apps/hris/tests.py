"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Tests for employee records and payroll preparation.
-------------------------------------------------------------------------
"""
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from apps.core.exceptions import UnauthorizedRoleException, ValidationException, WorkflowTransitionException
from apps.core.storage_memory import MemoryStorage
from apps.hris.models import Employee, EmployeeStatus, Gender, Payroll, PayrollItem, PayrollStatus
from apps.hris.services import HRISService
from apps.users.models import Role, RoleModule
from apps.users.permissions import Actor


class PayrollItemTestCase(SimpleTestCase):
    """Test cases for net pay computation."""

    def test_compute_net_pay(self):
        self.assertEqual(
            PayrollItem.compute_net_pay(
                Decimal('25000.00'), Decimal('1500.00'), Decimal('2000.00'), Decimal('3250.50')
            ),
            Decimal('25249.50')
        )

    def test_full_name_skips_blank_middle_name(self):
        employee = Employee(first_name='Maria', middle_name='', last_name='Santos')
        self.assertEqual(employee.get_full_name(), 'Maria Santos')


class HRISServiceTestCase(SimpleTestCase):
    """Test cases for employees and payroll runs."""

    def setUp(self):
        """Set up test data."""
        self.storage = MemoryStorage()
        self.service = HRISService(storage=self.storage)
        self.hr_officer = Actor(user_id=6, role=Role(name='HR Officer', module=RoleModule.HRIS))
        self.employee = self._hire('EMP-0001', 'Maria', 'Santos')
        self.payroll = self.service.create_payroll(
            self.hr_officer,
            payroll_period='2026-03 1st half',
            start_date=date(2026, 3, 1),
            end_date=date(2026, 3, 15),
        )

    def _hire(self, employee_no, first_name, last_name, department='Municipal Treasurer\'s Office'):
        return self.service.create_employee(
            self.hr_officer,
            employee_no=employee_no,
            first_name=first_name,
            last_name=last_name,
            birth_date=date(1990, 5, 17),
            gender=Gender.FEMALE,
            address='Poblacion',
            contact_number='09171234567',
            department=department,
            position='Revenue Collection Clerk',
            salary='25000.00',
            date_hired=date(2020, 1, 6),
        )

    def test_create_employee(self):
        self.assertEqual(self.employee.status, EmployeeStatus.ACTIVE)
        self.assertEqual(self.employee.salary, Decimal('25000.00'))
        with self.assertRaises(ValidationException):
            self._hire('EMP-0001', 'Jose', 'Reyes')

    def test_employee_no_is_immutable(self):
        with self.assertRaises(ValidationException):
            self.service.update_employee(self.hr_officer, self.employee.pk, employee_no='EMP-9999')
        employee = self.service.update_employee(self.hr_officer, self.employee.pk, position='Cashier I')
        self.assertEqual(employee.position, 'Cashier I')
        self.assertEqual(employee.employee_no, 'EMP-0001')

    def test_list_employees_by_department(self):
        self._hire('EMP-0002', 'Jose', 'Reyes', department='Municipal Accounting Office')
        self.assertEqual(len(self.service.list_employees()), 2)
        self.assertEqual(
            [e.employee_no for e in self.service.list_employees(department='Municipal Accounting Office')],
            ['EMP-0002']
        )

    def test_add_payroll_item_updates_total(self):
        item = self.service.add_payroll_item(
            self.hr_officer, self.payroll.pk, self.employee.pk,
            basic_pay='12500.00', overtime='500.00', deductions='1250.00'
        )
        self.assertEqual(item.net_pay, Decimal('11750.00'))

        second = self._hire('EMP-0002', 'Jose', 'Reyes')
        self.service.add_payroll_item(self.hr_officer, self.payroll.pk, second.pk, basic_pay='10000.00')

        payroll = self.storage.get(Payroll, self.payroll.pk)
        self.assertEqual(payroll.total_amount, Decimal('21750.00'))
        self.assertEqual(len(self.service.list_payroll_items(self.payroll.pk)), 2)

    def test_negative_net_pay_is_rejected(self):
        with self.assertRaises(ValidationException):
            self.service.add_payroll_item(
                self.hr_officer, self.payroll.pk, self.employee.pk,
                basic_pay='1000.00', deductions='1000.01'
            )

    def test_employee_only_once_per_payroll(self):
        self.service.add_payroll_item(self.hr_officer, self.payroll.pk, self.employee.pk, basic_pay='12500.00')
        with self.assertRaises(ValidationException):
            self.service.add_payroll_item(self.hr_officer, self.payroll.pk, self.employee.pk, basic_pay='12500.00')
        self.assertEqual(self.storage.get(Payroll, self.payroll.pk).total_amount, Decimal('12500.00'))

    def test_inactive_employee_is_not_paid(self):
        self.service.set_employee_status(self.hr_officer, self.employee.pk, EmployeeStatus.INACTIVE)
        with self.assertRaises(ValidationException):
            self.service.add_payroll_item(self.hr_officer, self.payroll.pk, self.employee.pk, basic_pay='12500.00')

    def test_finalize_payroll(self):
        """Empty payrolls cannot be finalized; finalized ones are locked."""
        with self.assertRaises(WorkflowTransitionException):
            self.service.finalize_payroll(self.hr_officer, self.payroll.pk)

        self.service.add_payroll_item(self.hr_officer, self.payroll.pk, self.employee.pk, basic_pay='12500.00')
        payroll = self.service.finalize_payroll(self.hr_officer, self.payroll.pk)
        self.assertEqual(payroll.status, PayrollStatus.FINALIZED)
        self.assertEqual(payroll.finalized_by_id, 6)

        second = self._hire('EMP-0002', 'Jose', 'Reyes')
        with self.assertRaises(WorkflowTransitionException):
            self.service.add_payroll_item(self.hr_officer, self.payroll.pk, second.pk, basic_pay='10000.00')

    def test_payroll_dates(self):
        with self.assertRaises(ValidationException):
            self.service.create_payroll(
                self.hr_officer,
                payroll_period='Bad period',
                start_date=date(2026, 3, 15),
                end_date=date(2026, 3, 1),
            )

    def test_budget_role_cannot_run_payroll(self):
        budget_officer = Actor(user_id=1, role=Role(name='Budget Officer', module=RoleModule.BUDGET))
        with self.assertRaises(UnauthorizedRoleException):
            self.service.add_payroll_item(budget_officer, self.payroll.pk, self.employee.pk, basic_pay='1.00')
        self.assertEqual(self.service.list_payroll_items(self.payroll.pk), [])
