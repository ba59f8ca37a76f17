"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: HRIS models for employee records and payroll aggregation.
             Payroll is not linked to the fiscal ledger.
-------------------------------------------------------------------------
"""
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.mixins import AuditLogMixin, TimeStampedMixin


class EmployeeStatus(models.TextChoices):
    ACTIVE = 'active', _('Active')
    INACTIVE = 'inactive', _('Inactive')
    ON_LEAVE = 'on_leave', _('On Leave')


class Gender(models.TextChoices):
    MALE = 'male', _('Male')
    FEMALE = 'female', _('Female')
    OTHER = 'other', _('Other')


class PayrollStatus(models.TextChoices):
    DRAFT = 'draft', _('Draft')
    FINALIZED = 'finalized', _('Finalized')


class Employee(AuditLogMixin):
    """
    Municipal employee record.

    Attributes:
        employee_no: Unique personnel number
        salary: Monthly basic salary
        status: Employment status (only active employees are paid)
    """

    employee_no = models.CharField(
        max_length=30,
        unique=True,
        verbose_name=_('Employee No.')
    )
    first_name = models.CharField(
        max_length=100,
        verbose_name=_('First Name')
    )
    middle_name = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Middle Name')
    )
    last_name = models.CharField(
        max_length=100,
        verbose_name=_('Last Name')
    )
    birth_date = models.DateField(
        verbose_name=_('Birth Date')
    )
    gender = models.CharField(
        max_length=10,
        choices=Gender.choices,
        verbose_name=_('Gender')
    )
    address = models.TextField(
        verbose_name=_('Address')
    )
    contact_number = models.CharField(
        max_length=20,
        verbose_name=_('Contact Number')
    )
    email = models.EmailField(
        blank=True,
        verbose_name=_('Email')
    )
    department = models.CharField(
        max_length=100,
        verbose_name=_('Department')
    )
    position = models.CharField(
        max_length=100,
        verbose_name=_('Position')
    )
    salary = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name=_('Monthly Salary')
    )
    date_hired = models.DateField(
        verbose_name=_('Date Hired')
    )
    status = models.CharField(
        max_length=20,
        choices=EmployeeStatus.choices,
        default=EmployeeStatus.ACTIVE,
        verbose_name=_('Status')
    )

    class Meta:
        verbose_name = _('Employee')
        verbose_name_plural = _('Employees')
        ordering = ['last_name', 'first_name']

    def __str__(self) -> str:
        return f"{self.employee_no} - {self.get_full_name()}"

    def get_full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return ' '.join(part for part in parts if part)


class Payroll(AuditLogMixin):
    """
    Payroll run for one pay period.

    total_amount is the sum of the net pay of its items and is kept
    current as items are added.
    """

    payroll_period = models.CharField(
        max_length=50,
        verbose_name=_('Payroll Period'),
        help_text=_('Label of the pay period (e.g., "2026-10 1st half").')
    )
    start_date = models.DateField(
        verbose_name=_('Start Date')
    )
    end_date = models.DateField(
        verbose_name=_('End Date')
    )
    total_amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        verbose_name=_('Total Amount')
    )
    status = models.CharField(
        max_length=20,
        choices=PayrollStatus.choices,
        default=PayrollStatus.DRAFT,
        verbose_name=_('Status')
    )
    finalized_by = models.ForeignKey(
        'users.CustomUser',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='finalized_payrolls',
        verbose_name=_('Finalized By')
    )
    finalized_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Finalized At')
    )

    class Meta:
        verbose_name = _('Payroll')
        verbose_name_plural = _('Payrolls')
        ordering = ['-start_date']

    def __str__(self) -> str:
        return f"Payroll {self.payroll_period} - PHP {self.total_amount}"


class PayrollItem(TimeStampedMixin):
    """
    Pay of one employee within a payroll.

    net_pay = basic_pay + overtime + allowances - deductions
    """

    payroll = models.ForeignKey(
        Payroll,
        on_delete=models.PROTECT,
        related_name='items',
        verbose_name=_('Payroll')
    )
    employee = models.ForeignKey(
        Employee,
        on_delete=models.PROTECT,
        related_name='payroll_items',
        verbose_name=_('Employee')
    )
    basic_pay = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name=_('Basic Pay')
    )
    overtime = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name=_('Overtime')
    )
    allowances = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name=_('Allowances')
    )
    deductions = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name=_('Deductions')
    )
    net_pay = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        verbose_name=_('Net Pay')
    )

    class Meta:
        verbose_name = _('Payroll Item')
        verbose_name_plural = _('Payroll Items')
        ordering = ['payroll', 'id']
        unique_together = ['payroll', 'employee']

    def __str__(self) -> str:
        return f"{self.employee_id} - PHP {self.net_pay}"

    @staticmethod
    def compute_net_pay(
        basic_pay: Decimal,
        overtime: Decimal = Decimal('0.00'),
        allowances: Decimal = Decimal('0.00'),
        deductions: Decimal = Decimal('0.00')
    ) -> Decimal:
        """Net pay of a payroll line."""
        return basic_pay + overtime + allowances - deductions
