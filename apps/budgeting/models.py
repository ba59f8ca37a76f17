"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Budgeting models for funded budget items and the
             obligations reserved against them. The running balance of
             a budget item is mutated only by the Balance Engine.
-------------------------------------------------------------------------
"""
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.mixins import AuditLogMixin


class BudgetItemStatus(models.TextChoices):
    """
    Status choices for a budget item.

    ACTIVE: Open for obligations
    DEPLETED: Balance fully obligated
    CANCELLED: Appropriation withdrawn (logical deletion)
    """
    ACTIVE = 'active', _('Active')
    DEPLETED = 'depleted', _('Depleted')
    CANCELLED = 'cancelled', _('Cancelled')


class ObligationStatus(models.TextChoices):
    """
    Status choices for a budget obligation.

    PENDING: Obligation request recorded, balance already reserved
    APPROVED: Obligation approved by the budget office
    PROCESSED: Journal entry referencing it has been posted
    CANCELLED: Obligation withdrawn
    """
    PENDING = 'pending', _('Pending')
    APPROVED = 'approved', _('Approved')
    PROCESSED = 'processed', _('Processed')
    CANCELLED = 'cancelled', _('Cancelled')


class BudgetItem(AuditLogMixin):
    """
    A funded budget line for a fiscal year.

    Invariant: 0 <= balance <= amount at all times.

    Attributes:
        aip_item: The AIP project this line funds (optional)
        fiscal_year: Year of the appropriation
        account_code: Chart of accounts code charged
        amount: Original allocation
        balance: Remaining unobligated amount
        version: Incremented on every balance change
    """

    aip_item = models.ForeignKey(
        'planning.AIPItem',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='budget_items',
        verbose_name=_('AIP Item')
    )
    fiscal_year = models.PositiveIntegerField(
        verbose_name=_('Fiscal Year')
    )
    account_code = models.CharField(
        max_length=50,
        verbose_name=_('Account Code')
    )
    description = models.CharField(
        max_length=255,
        verbose_name=_('Description')
    )
    amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        verbose_name=_('Amount'),
        help_text=_('Original allocation.')
    )
    balance = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name=_('Balance'),
        help_text=_('Remaining unobligated amount.')
    )
    status = models.CharField(
        max_length=20,
        choices=BudgetItemStatus.choices,
        default=BudgetItemStatus.ACTIVE,
        verbose_name=_('Status')
    )
    version = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Version'),
        help_text=_('Incremented on every balance change.')
    )

    class Meta:
        verbose_name = _('Budget Item')
        verbose_name_plural = _('Budget Items')
        ordering = ['fiscal_year', 'account_code']
        indexes = [
            models.Index(fields=['fiscal_year', 'account_code'], name='budgeting_item_fy_code_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.account_code} ({self.fiscal_year}) - PHP {self.balance} of {self.amount}"

    @property
    def obligated_amount(self) -> Decimal:
        return self.amount - self.balance

    def can_obligate(self, amount: Decimal) -> bool:
        """Check if the requested amount fits within the remaining balance."""
        return amount <= self.balance


class BudgetObligation(AuditLogMixin):
    """
    A commitment to pay, reserved against a budget item.

    The obligated amount is deducted from the budget item balance in the
    same transaction that creates the obligation.
    """

    budget_item = models.ForeignKey(
        BudgetItem,
        on_delete=models.PROTECT,
        related_name='obligations',
        verbose_name=_('Budget Item')
    )
    obligation_number = models.CharField(
        max_length=50,
        unique=True,
        verbose_name=_('Obligation Number')
    )
    payee = models.CharField(
        max_length=200,
        verbose_name=_('Payee')
    )
    description = models.TextField(
        blank=True,
        verbose_name=_('Description')
    )
    amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        verbose_name=_('Amount')
    )
    obligation_date = models.DateField(
        verbose_name=_('Obligation Date')
    )
    status = models.CharField(
        max_length=20,
        choices=ObligationStatus.choices,
        default=ObligationStatus.PENDING,
        verbose_name=_('Status')
    )
    approved_by = models.ForeignKey(
        'users.CustomUser',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='approved_obligations',
        verbose_name=_('Approved By')
    )
    approved_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Approved At')
    )
    processed_by = models.ForeignKey(
        'users.CustomUser',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='processed_obligations',
        verbose_name=_('Processed By')
    )
    processed_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Processed At')
    )

    class Meta:
        verbose_name = _('Budget Obligation')
        verbose_name_plural = _('Budget Obligations')
        ordering = ['-obligation_date', 'obligation_number']

    def __str__(self) -> str:
        return f"{self.obligation_number} - {self.payee} - PHP {self.amount}"
