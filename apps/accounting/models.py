"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Accounting models for double-entry journal entries and the
             payment vouchers drawn from posted entries.
-------------------------------------------------------------------------
"""
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.mixins import AuditLogMixin


class JournalEntryStatus(models.TextChoices):
    """
    Status choices for a journal entry.

    DRAFT: Items may still be added
    POSTED: Balanced and recorded in the books (terminal)
    CANCELLED: Withdrawn before posting (terminal)
    """
    DRAFT = 'draft', _('Draft')
    POSTED = 'posted', _('Posted')
    CANCELLED = 'cancelled', _('Cancelled')


class VoucherStatus(models.TextChoices):
    DRAFT = 'draft', _('Draft')
    APPROVED = 'approved', _('Approved')
    PAID = 'paid', _('Paid')
    CANCELLED = 'cancelled', _('Cancelled')


class JournalEntry(AuditLogMixin):
    """
    Double-entry bookkeeping record.

    A journal entry may reference the obligation it settles; posting the
    entry marks that obligation as processed in the same transaction.
    """

    obligation = models.ForeignKey(
        'budgeting.BudgetObligation',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='journal_entries',
        verbose_name=_('Obligation')
    )
    entry_number = models.CharField(
        max_length=50,
        unique=True,
        verbose_name=_('Entry Number')
    )
    entry_date = models.DateField(
        verbose_name=_('Entry Date')
    )
    description = models.TextField(
        verbose_name=_('Description')
    )
    status = models.CharField(
        max_length=20,
        choices=JournalEntryStatus.choices,
        default=JournalEntryStatus.DRAFT,
        verbose_name=_('Status')
    )
    posted_by = models.ForeignKey(
        'users.CustomUser',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='posted_journal_entries',
        verbose_name=_('Posted By')
    )
    posted_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Posted At')
    )

    class Meta:
        verbose_name = _('Journal Entry')
        verbose_name_plural = _('Journal Entries')
        ordering = ['-entry_date', 'entry_number']

    def __str__(self) -> str:
        return f"JE {self.entry_number} - {self.get_status_display()}"


class JournalEntryItem(models.Model):
    """
    One debit or credit line of a journal entry.

    By convention exactly one of debit/credit is non-zero.
    """

    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        related_name='items',
        verbose_name=_('Journal Entry')
    )
    account_code = models.CharField(
        max_length=50,
        verbose_name=_('Account Code')
    )
    account_title = models.CharField(
        max_length=255,
        verbose_name=_('Account Title')
    )
    debit = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name=_('Debit')
    )
    credit = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name=_('Credit')
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name=_('Created At')
    )

    class Meta:
        verbose_name = _('Journal Entry Item')
        verbose_name_plural = _('Journal Entry Items')
        ordering = ['journal_entry', 'id']

    def __str__(self) -> str:
        side = f"Dr {self.debit}" if self.debit else f"Cr {self.credit}"
        return f"{self.account_code} {side}"


class Voucher(AuditLogMixin):
    """
    Approved payment instruction derived from a posted journal entry.

    Workflow: draft -> approved -> paid; draft -> cancelled. The paid
    status is only reached by issuing a disbursement.
    """

    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        related_name='vouchers',
        verbose_name=_('Journal Entry')
    )
    voucher_number = models.CharField(
        max_length=50,
        unique=True,
        verbose_name=_('Voucher Number')
    )
    payee = models.CharField(
        max_length=200,
        verbose_name=_('Payee')
    )
    description = models.TextField(
        verbose_name=_('Description')
    )
    amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        verbose_name=_('Amount')
    )
    voucher_date = models.DateField(
        verbose_name=_('Voucher Date')
    )
    status = models.CharField(
        max_length=20,
        choices=VoucherStatus.choices,
        default=VoucherStatus.DRAFT,
        verbose_name=_('Status')
    )
    approved_by = models.ForeignKey(
        'users.CustomUser',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='approved_vouchers',
        verbose_name=_('Approved By')
    )
    approved_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Approved At')
    )

    class Meta:
        verbose_name = _('Voucher')
        verbose_name_plural = _('Vouchers')
        ordering = ['-voucher_date', 'voucher_number']

    def __str__(self) -> str:
        return f"{self.voucher_number} - {self.payee} - PHP {self.amount}"
