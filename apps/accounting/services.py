"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Accounting service: journal entries with their debit and
             credit lines, posting against obligations, and payment
             vouchers drawn from posted entries.
-------------------------------------------------------------------------
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from apps.accounting.models import (
    JournalEntry,
    JournalEntryItem,
    JournalEntryStatus,
    Voucher,
    VoucherStatus,
)
from apps.accounting.validation import totals
from apps.budgeting.models import BudgetObligation, ObligationStatus
from apps.core.exceptions import ValidationException, WorkflowTransitionException
from apps.core.logging import WorkflowLogger
from apps.core.services import WorkflowService
from apps.core.validators import clean_amount, only_fields, require_fields
from apps.core.workflows import Entity
from apps.users.models import RoleModule
from apps.users.permissions import Actor


JOURNAL_ENTRY_FIELDS = ('obligation_id', 'entry_number', 'entry_date', 'description')
JOURNAL_ENTRY_EDITABLE_FIELDS = ('entry_date', 'description')
JOURNAL_ENTRY_ITEM_FIELDS = ('account_code', 'account_title', 'debit', 'credit')
VOUCHER_FIELDS = ('journal_entry_id', 'voucher_number', 'payee', 'description', 'amount', 'voucher_date')
VOUCHER_EDITABLE_FIELDS = ('payee', 'description', 'amount', 'voucher_date')

CLOSED_OBLIGATION_STATUSES = (ObligationStatus.CANCELLED, ObligationStatus.PROCESSED)


class AccountingService(WorkflowService):
    """
    Service for journal entries and vouchers.

    Posting a journal entry is gated by the double-entry validator and,
    when the entry settles an obligation, marks that obligation processed
    in the same unit of work.
    """

    module = RoleModule.ACCOUNTING

    # ------------------------------------------------------------------
    # Journal entries
    # ------------------------------------------------------------------

    def create_journal_entry(self, actor: Actor, **data: Any) -> JournalEntry:
        """
        Open a draft journal entry.

        Required: entry_number, entry_date, description.
        Optional: obligation_id (must exist and still be open).
        """
        self._authorize(actor)
        require_fields(data, 'entry_number', 'entry_date', 'description')
        data = only_fields(data, JOURNAL_ENTRY_FIELDS, 'a journal entry')

        def _create():
            obligation_id = data.get('obligation_id')
            if obligation_id is not None:
                obligation = self._get_or_404(BudgetObligation, obligation_id)
                if obligation.status in CLOSED_OBLIGATION_STATUSES:
                    raise WorkflowTransitionException(
                        f"Cannot record a journal entry against a {obligation.status} obligation.",
                        details={'obligation_id': obligation.pk, 'status': str(obligation.status)}
                    )

            entry = self.storage.create(
                JournalEntry,
                status=JournalEntryStatus.DRAFT,
                created_by_id=actor.user_id,
                **data
            )
            self.storage.on_commit(lambda: WorkflowLogger.log_created(Entity.JOURNAL_ENTRY, entry, actor))
            return entry

        return self._atomic(actor, 'create_journal_entry', _create)

    def update_journal_entry(self, actor: Actor, entry_id: int, **patch: Any) -> JournalEntry:
        """Edit the date or description of a draft entry."""
        self._authorize(actor)
        patch = only_fields(patch, JOURNAL_ENTRY_EDITABLE_FIELDS, 'a journal entry')
        return self._atomic(
            actor, 'update_journal_entry', self._edit_draft,
            actor, JournalEntry, entry_id, JournalEntryStatus.DRAFT, patch
        )

    def add_journal_entry_item(self, actor: Actor, entry_id: int, **data: Any) -> JournalEntryItem:
        """
        Add a debit or credit line to a draft entry.

        Required: account_code, account_title, and exactly one non-zero
        side among debit/credit.
        """
        self._authorize(actor)
        require_fields(data, 'account_code', 'account_title')
        data = only_fields(data, JOURNAL_ENTRY_ITEM_FIELDS, 'a journal entry item')
        debit = clean_amount(data.get('debit', Decimal('0.00')), 'debit', allow_zero=True)
        credit = clean_amount(data.get('credit', Decimal('0.00')), 'credit', allow_zero=True)
        if (debit > 0) == (credit > 0):
            raise ValidationException(
                "A journal entry line must have exactly one non-zero side (debit or credit).",
                details={'debit': str(debit), 'credit': str(credit)}
            )
        data.update(debit=debit, credit=credit)

        def _add():
            entry = self._get_or_404(JournalEntry, entry_id, for_update=True)
            if entry.status != JournalEntryStatus.DRAFT:
                raise WorkflowTransitionException(
                    f"Cannot add items to a {entry.status} journal entry.",
                    details={'entry_id': entry.pk, 'status': str(entry.status)}
                )
            return self.storage.create(JournalEntryItem, journal_entry_id=entry.pk, **data)

        return self._atomic(actor, 'add_journal_entry_item', _add)

    def journal_entry_totals(self, entry_id: int) -> Tuple[Decimal, Decimal]:
        """Return (debit_total, credit_total) of a journal entry."""
        entry = self._get_or_404(JournalEntry, entry_id)
        return totals(self.list_journal_entry_items(entry.pk))

    def list_journal_entry_items(self, entry_id: int) -> List[JournalEntryItem]:
        return self.storage.filter(JournalEntryItem, journal_entry_id=entry_id)

    def _posting_context(self, entry: JournalEntry) -> Dict[str, Any]:
        context = {
            'items': self.list_journal_entry_items(entry.pk),
            'obligation_id': entry.obligation_id,
            'obligation_status': None,
        }
        if entry.obligation_id is not None:
            obligation = self._get_or_404(BudgetObligation, entry.obligation_id, for_update=True)
            context['obligation_status'] = obligation.status
        return context

    def post_journal_entry(self, actor: Actor, entry_id: int) -> JournalEntry:
        """
        Post a balanced journal entry.

        Raises:
            UnbalancedEntryException: If debits and credits differ.
            ValidationException: If the entry has no items.
            WorkflowTransitionException: If the entry is not draft or its
                obligation is not approved.
        """
        return self._request_transition(
            actor, JournalEntry, entry_id, Entity.JOURNAL_ENTRY, JournalEntryStatus.POSTED,
            context=self._posting_context
        )

    def cancel_journal_entry(self, actor: Actor, entry_id: int) -> JournalEntry:
        return self._request_transition(
            actor, JournalEntry, entry_id, Entity.JOURNAL_ENTRY, JournalEntryStatus.CANCELLED
        )

    def list_journal_entries(self, obligation_id: Optional[int] = None) -> List[JournalEntry]:
        if obligation_id is None:
            return self.storage.filter(JournalEntry)
        return self.storage.filter(JournalEntry, obligation_id=obligation_id)

    # ------------------------------------------------------------------
    # Vouchers
    # ------------------------------------------------------------------

    def _ensure_voucher_cover(
        self,
        entry: JournalEntry,
        amount: Decimal,
        exclude_voucher_id: Optional[int] = None
    ) -> None:
        """
        Keep the vouchers drawn from an entry within its debit total.

        Cancelled vouchers do not count. The entry must be locked by the caller.

        Raises:
            ValidationException: If amount does not fit in what is left.
        """
        debit_total, _ = totals(self.list_journal_entry_items(entry.pk))
        drawn = sum(
            (v.amount for v in self.storage.filter(Voucher, journal_entry_id=entry.pk)
             if v.status != VoucherStatus.CANCELLED and v.pk != exclude_voucher_id),
            Decimal('0.00')
        )
        if drawn + amount > debit_total:
            raise ValidationException(
                f"Voucher amount PHP {amount} exceeds the PHP {debit_total - drawn} left on the journal entry.",
                details={
                    'journal_entry_id': entry.pk,
                    'debit_total': str(debit_total),
                    'drawn': str(drawn),
                    'requested': str(amount),
                }
            )

    def create_voucher(self, actor: Actor, **data: Any) -> Voucher:
        """
        Draw a draft voucher from a posted journal entry.

        Required: journal_entry_id, voucher_number, payee, description,
        amount, voucher_date. Open vouchers of an entry may not exceed
        its debit total.
        """
        self._authorize(actor)
        require_fields(data, *VOUCHER_FIELDS)
        data = only_fields(data, VOUCHER_FIELDS, 'a voucher')
        data['amount'] = clean_amount(data['amount'])

        def _create():
            entry = self._get_or_404(JournalEntry, data['journal_entry_id'], for_update=True)
            if entry.status != JournalEntryStatus.POSTED:
                raise WorkflowTransitionException(
                    f"Vouchers can only be drawn from a posted journal entry (it is '{entry.status}').",
                    details={'journal_entry_id': entry.pk, 'status': str(entry.status)}
                )
            self._ensure_voucher_cover(entry, data['amount'])
            voucher = self.storage.create(
                Voucher,
                status=VoucherStatus.DRAFT,
                created_by_id=actor.user_id,
                **data
            )
            self.storage.on_commit(lambda: WorkflowLogger.log_created(Entity.VOUCHER, voucher, actor))
            return voucher

        return self._atomic(actor, 'create_voucher', _create)

    def update_voucher(self, actor: Actor, voucher_id: int, **patch: Any) -> Voucher:
        """Edit a draft voucher."""
        self._authorize(actor)
        patch = only_fields(patch, VOUCHER_EDITABLE_FIELDS, 'a voucher')
        if 'amount' in patch:
            patch['amount'] = clean_amount(patch['amount'])

        def _update():
            voucher = self._get_or_404(Voucher, voucher_id, for_update=True)
            if 'amount' in patch and voucher.status == VoucherStatus.DRAFT:
                entry = self._get_or_404(JournalEntry, voucher.journal_entry_id, for_update=True)
                self._ensure_voucher_cover(entry, patch['amount'], exclude_voucher_id=voucher.pk)
            return self._edit_draft(actor, Voucher, voucher.pk, VoucherStatus.DRAFT, patch)

        return self._atomic(actor, 'update_voucher', _update)

    def approve_voucher(self, actor: Actor, voucher_id: int) -> Voucher:
        return self._request_transition(actor, Voucher, voucher_id, Entity.VOUCHER, VoucherStatus.APPROVED)

    def cancel_voucher(self, actor: Actor, voucher_id: int) -> Voucher:
        return self._request_transition(actor, Voucher, voucher_id, Entity.VOUCHER, VoucherStatus.CANCELLED)

    def list_vouchers(
        self,
        journal_entry_id: Optional[int] = None,
        status: Optional[str] = None
    ) -> List[Voucher]:
        lookups: Dict[str, Any] = {}
        if journal_entry_id is not None:
            lookups['journal_entry_id'] = journal_entry_id
        if status is not None:
            lookups['status'] = status
        return self.storage.filter(Voucher, **lookups)
