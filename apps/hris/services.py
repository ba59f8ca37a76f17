"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: HRIS service: employee records and payroll preparation.
-------------------------------------------------------------------------
"""
from decimal import Decimal
from typing import Any, List, Optional

from apps.core.exceptions import ValidationException, WorkflowTransitionException
from apps.core.logging import WorkflowLogger
from apps.core.services import WorkflowService
from apps.core.validators import clean_amount, clean_choice, only_fields, require_fields
from apps.core.workflows import Entity
from apps.hris.models import (
    Employee,
    EmployeeStatus,
    Gender,
    Payroll,
    PayrollItem,
    PayrollStatus,
)
from apps.users.models import RoleModule
from apps.users.permissions import Actor


EMPLOYEE_FIELDS = (
    'employee_no', 'first_name', 'middle_name', 'last_name', 'birth_date', 'gender', 'address',
    'contact_number', 'email', 'department', 'position', 'salary', 'date_hired'
)
EMPLOYEE_REQUIRED_FIELDS = (
    'employee_no', 'first_name', 'last_name', 'birth_date', 'gender', 'address',
    'contact_number', 'department', 'position', 'salary', 'date_hired'
)
PAYROLL_FIELDS = ('payroll_period', 'start_date', 'end_date')
PAY_COMPONENTS = ('overtime', 'allowances', 'deductions')


def _clean_employee_fields(data: dict) -> dict:
    if 'salary' in data:
        data['salary'] = clean_amount(data['salary'], 'salary', allow_zero=True)
    if 'gender' in data:
        data['gender'] = clean_choice(data['gender'], Gender.values, 'gender')
    return data


class HRISService(WorkflowService):
    """Service for employees and payroll runs."""

    module = RoleModule.HRIS

    # ------------------------------------------------------------------
    # Employees
    # ------------------------------------------------------------------

    def create_employee(self, actor: Actor, **data: Any) -> Employee:
        self._authorize(actor)
        require_fields(data, *EMPLOYEE_REQUIRED_FIELDS)
        data = _clean_employee_fields(only_fields(data, EMPLOYEE_FIELDS, 'an employee'))

        def _create():
            employee = self.storage.create(
                Employee,
                status=EmployeeStatus.ACTIVE,
                created_by_id=actor.user_id,
                **data
            )
            self.storage.on_commit(lambda: WorkflowLogger.log_created('employee', employee, actor))
            return employee

        return self._atomic(actor, 'create_employee', _create)

    def update_employee(self, actor: Actor, employee_id: int, **patch: Any) -> Employee:
        """Edit an employee record (employee_no is immutable)."""
        self._authorize(actor)
        editable = [name for name in EMPLOYEE_FIELDS if name != 'employee_no']
        patch = _clean_employee_fields(only_fields(patch, editable, 'an employee'))

        def _update():
            employee = self._get_or_404(Employee, employee_id, for_update=True)
            if not patch:
                return employee
            return self.storage.update(Employee, employee.pk, updated_by_id=actor.user_id, **patch)

        return self._atomic(actor, 'update_employee', _update)

    def set_employee_status(self, actor: Actor, employee_id: int, status: str) -> Employee:
        """Change employment status (active, inactive, on leave)."""
        self._authorize(actor)
        status = clean_choice(status, EmployeeStatus.values, 'status')

        def _set_status():
            employee = self._get_or_404(Employee, employee_id, for_update=True)
            return self.storage.update(Employee, employee.pk, status=status, updated_by_id=actor.user_id)

        return self._atomic(actor, 'set_employee_status', _set_status)

    def list_employees(self, department: Optional[str] = None) -> List[Employee]:
        if department is None:
            return self.storage.filter(Employee)
        return self.storage.filter(Employee, department=department)

    # ------------------------------------------------------------------
    # Payroll
    # ------------------------------------------------------------------

    def create_payroll(self, actor: Actor, **data: Any) -> Payroll:
        self._authorize(actor)
        require_fields(data, *PAYROLL_FIELDS)
        data = only_fields(data, PAYROLL_FIELDS, 'a payroll')
        if data['end_date'] < data['start_date']:
            raise ValidationException(
                "Payroll end date cannot be earlier than its start date.",
                details={'start_date': str(data['start_date']), 'end_date': str(data['end_date'])}
            )

        def _create():
            payroll = self.storage.create(
                Payroll,
                status=PayrollStatus.DRAFT,
                total_amount=Decimal('0.00'),
                created_by_id=actor.user_id,
                **data
            )
            self.storage.on_commit(lambda: WorkflowLogger.log_created(Entity.PAYROLL, payroll, actor))
            return payroll

        return self._atomic(actor, 'create_payroll', _create)

    def add_payroll_item(self, actor: Actor, payroll_id: int, employee_id: int, **pay: Any) -> PayrollItem:
        """
        Add an employee's pay to a draft payroll.

        Required: basic_pay. Optional: overtime, allowances, deductions.
        Net pay is computed and must not be negative; the payroll total is
        recomputed in the same unit of work.
        """
        self._authorize(actor)
        require_fields(pay, 'basic_pay')
        pay = only_fields(pay, ('basic_pay',) + PAY_COMPONENTS, 'a payroll item')
        amounts = {
            name: clean_amount(pay.get(name, Decimal('0.00')), name, allow_zero=True)
            for name in ('basic_pay',) + PAY_COMPONENTS
        }
        net_pay = PayrollItem.compute_net_pay(**amounts)
        if net_pay < 0:
            raise ValidationException(
                f"Deductions exceed gross pay (net pay PHP {net_pay}).",
                details={'net_pay': str(net_pay)}
            )

        def _add():
            payroll = self._get_or_404(Payroll, payroll_id, for_update=True)
            if payroll.status != PayrollStatus.DRAFT:
                raise WorkflowTransitionException(
                    "Items can only be added to a draft payroll.",
                    details={'payroll_id': payroll.pk, 'status': str(payroll.status)}
                )

            employee = self._get_or_404(Employee, employee_id)
            if employee.status != EmployeeStatus.ACTIVE:
                raise ValidationException(
                    f"Employee {employee.employee_no} is not active.",
                    details={'employee_id': employee.pk, 'status': str(employee.status)}
                )

            if self.storage.exists(PayrollItem, payroll_id=payroll.pk, employee_id=employee.pk):
                raise ValidationException(
                    f"Employee {employee.employee_no} is already in this payroll.",
                    details={'payroll_id': payroll.pk, 'employee_id': employee.pk}
                )

            item = self.storage.create(
                PayrollItem,
                payroll_id=payroll.pk,
                employee_id=employee.pk,
                net_pay=net_pay,
                **amounts
            )
            total = sum(
                (line.net_pay for line in self.storage.filter(PayrollItem, payroll_id=payroll.pk)),
                Decimal('0.00')
            )
            self.storage.update(Payroll, payroll.pk, total_amount=total, updated_by_id=actor.user_id)
            return item

        return self._atomic(actor, 'add_payroll_item', _add)

    def finalize_payroll(self, actor: Actor, payroll_id: int) -> Payroll:
        """Lock a payroll that has at least one item."""
        return self._request_transition(
            actor, Payroll, payroll_id, Entity.PAYROLL, PayrollStatus.FINALIZED,
            context=lambda payroll: {'item_count': len(self.list_payroll_items(payroll.pk))}
        )

    def list_payroll_items(self, payroll_id: int) -> List[PayrollItem]:
        return self.storage.filter(PayrollItem, payroll_id=payroll_id)
