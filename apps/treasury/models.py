"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Treasury models. Disbursements release funds against
             approved vouchers; collections are a standalone revenue
             ledger not linked to the obligation chain.
-------------------------------------------------------------------------
"""
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.mixins import AuditLogMixin


class DisbursementStatus(models.TextChoices):
    ISSUED = 'issued', _('Issued')
    CLEARED = 'cleared', _('Cleared')
    CANCELLED = 'cancelled', _('Cancelled')


class CollectionStatus(models.TextChoices):
    RECORDED = 'recorded', _('Recorded')
    DEPOSITED = 'deposited', _('Deposited')
    CANCELLED = 'cancelled', _('Cancelled')


class CollectionType(models.TextChoices):
    TAX = 'tax', _('Tax')
    FEE = 'fee', _('Fee')
    FINE = 'fine', _('Fine')
    PERMIT = 'permit', _('Permit')
    OTHER = 'other', _('Other')


class Disbursement(AuditLogMixin):
    """
    Actual release of funds (check or bank transfer) against a voucher.

    Creating a disbursement marks its voucher as paid in the same
    transaction; cancelling it returns the voucher to approved.
    """

    voucher = models.ForeignKey(
        'accounting.Voucher',
        on_delete=models.PROTECT,
        related_name='disbursements',
        verbose_name=_('Voucher')
    )
    check_number = models.CharField(
        max_length=50,
        verbose_name=_('Check Number')
    )
    bank_account = models.CharField(
        max_length=50,
        verbose_name=_('Bank Account')
    )
    amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        verbose_name=_('Amount')
    )
    disbursement_date = models.DateField(
        verbose_name=_('Disbursement Date')
    )
    status = models.CharField(
        max_length=20,
        choices=DisbursementStatus.choices,
        default=DisbursementStatus.ISSUED,
        verbose_name=_('Status')
    )
    cleared_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Cleared At')
    )

    class Meta:
        verbose_name = _('Disbursement')
        verbose_name_plural = _('Disbursements')
        ordering = ['-disbursement_date', 'check_number']

    def __str__(self) -> str:
        return f"Check {self.check_number} - PHP {self.amount}"


class Collection(AuditLogMixin):
    """Revenue receipt (tax, fee, fine) recorded by the treasury."""

    receipt_number = models.CharField(
        max_length=50,
        unique=True,
        verbose_name=_('Receipt Number')
    )
    collection_date = models.DateField(
        verbose_name=_('Collection Date')
    )
    payor = models.CharField(
        max_length=200,
        verbose_name=_('Payor')
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
    collection_type = models.CharField(
        max_length=20,
        choices=CollectionType.choices,
        verbose_name=_('Collection Type')
    )
    account_code = models.CharField(
        max_length=50,
        verbose_name=_('Account Code')
    )
    status = models.CharField(
        max_length=20,
        choices=CollectionStatus.choices,
        default=CollectionStatus.RECORDED,
        verbose_name=_('Status')
    )
    deposited_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Deposited At')
    )

    class Meta:
        verbose_name = _('Collection')
        verbose_name_plural = _('Collections')
        ordering = ['-collection_date', 'receipt_number']

    def __str__(self) -> str:
        return f"OR {self.receipt_number} - {self.payor} - PHP {self.amount}"
