"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Treasury service: disbursements against approved vouchers
             and the standalone collections ledger.
-------------------------------------------------------------------------
"""
from typing import Any, List, Optional

from apps.accounting.models import Voucher, VoucherStatus
from apps.core.exceptions import ValidationException
from apps.core.logging import WorkflowLogger
from apps.core.services import WorkflowService
from apps.core.validators import clean_amount, clean_choice, only_fields, require_fields
from apps.core.workflows import Entity, plan_transition
from apps.treasury.models import (
    Collection,
    CollectionStatus,
    CollectionType,
    Disbursement,
    DisbursementStatus,
)
from apps.users.models import RoleModule
from apps.users.permissions import Actor


DISBURSEMENT_FIELDS = ('check_number', 'bank_account', 'amount', 'disbursement_date')
COLLECTION_FIELDS = (
    'receipt_number', 'collection_date', 'payor', 'description', 'amount', 'collection_type', 'account_code'
)


class TreasuryService(WorkflowService):
    """
    Service for disbursements and collections.

    Issuing a disbursement flips its voucher to paid in the same unit of
    work; no state in between is ever visible.
    """

    module = RoleModule.TREASURY

    # ------------------------------------------------------------------
    # Disbursements
    # ------------------------------------------------------------------

    def disburse(self, actor: Actor, voucher_id: int, **data: Any) -> Disbursement:
        """
        Release funds against an approved voucher.

        Required: check_number, bank_account, amount, disbursement_date.
        The amount must equal the voucher amount.

        Raises:
            WorkflowTransitionException: If the voucher is not approved.
            ValidationException: If the amount differs from the voucher.
        """
        self._authorize(actor)
        require_fields(data, *DISBURSEMENT_FIELDS)
        data = only_fields(data, DISBURSEMENT_FIELDS, 'a disbursement')
        data['amount'] = clean_amount(data['amount'])

        def _disburse():
            voucher = self._get_or_404(Voucher, voucher_id, for_update=True)
            plan = plan_transition(Entity.VOUCHER, voucher.status, VoucherStatus.PAID, system=True)

            if data['amount'] != voucher.amount:
                raise ValidationException(
                    f"Disbursement amount PHP {data['amount']} does not match the voucher amount PHP {voucher.amount}.",
                    details={'voucher_id': voucher.pk, 'amount': str(data['amount']), 'voucher_amount': str(voucher.amount)}
                )

            disbursement = self.storage.create(
                Disbursement,
                voucher_id=voucher.pk,
                status=DisbursementStatus.ISSUED,
                created_by_id=actor.user_id,
                **data
            )
            self._apply_plan(actor, Voucher, voucher.pk, plan)
            self.storage.on_commit(lambda: WorkflowLogger.log_created(Entity.DISBURSEMENT, disbursement, actor))
            return disbursement

        return self._atomic(actor, 'disburse', _disburse)

    def clear_disbursement(self, actor: Actor, disbursement_id: int) -> Disbursement:
        return self._request_transition(
            actor, Disbursement, disbursement_id, Entity.DISBURSEMENT, DisbursementStatus.CLEARED
        )

    def cancel_disbursement(self, actor: Actor, disbursement_id: int) -> Disbursement:
        """Cancel a disbursement and return its voucher to approved."""
        return self._request_transition(
            actor, Disbursement, disbursement_id, Entity.DISBURSEMENT, DisbursementStatus.CANCELLED,
            context=self._cancellation_context
        )

    def _cancellation_context(self, disbursement: Disbursement) -> dict:
        voucher = self._get_or_404(Voucher, disbursement.voucher_id, for_update=True)
        return {'voucher_id': voucher.pk, 'voucher_status': voucher.status}

    def list_disbursements(self, voucher_id: Optional[int] = None) -> List[Disbursement]:
        if voucher_id is None:
            return self.storage.filter(Disbursement)
        return self.storage.filter(Disbursement, voucher_id=voucher_id)

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def record_collection(self, actor: Actor, **data: Any) -> Collection:
        """
        Record a revenue receipt.

        Required: receipt_number, collection_date, payor, amount,
        collection_type, account_code.
        """
        self._authorize(actor)
        require_fields(
            data, 'receipt_number', 'collection_date', 'payor', 'amount', 'collection_type', 'account_code'
        )
        data = only_fields(data, COLLECTION_FIELDS, 'a collection')
        data['amount'] = clean_amount(data['amount'])
        data['collection_type'] = clean_choice(data['collection_type'], CollectionType.values, 'collection_type')

        def _record():
            collection = self.storage.create(
                Collection,
                status=CollectionStatus.RECORDED,
                created_by_id=actor.user_id,
                **data
            )
            self.storage.on_commit(lambda: WorkflowLogger.log_created(Entity.COLLECTION, collection, actor))
            return collection

        return self._atomic(actor, 'record_collection', _record)

    def deposit_collection(self, actor: Actor, collection_id: int) -> Collection:
        return self._request_transition(
            actor, Collection, collection_id, Entity.COLLECTION, CollectionStatus.DEPOSITED
        )

    def cancel_collection(self, actor: Actor, collection_id: int) -> Collection:
        return self._request_transition(
            actor, Collection, collection_id, Entity.COLLECTION, CollectionStatus.CANCELLED
        )

    def list_collections(self, collection_type: Optional[str] = None) -> List[Collection]:
        if collection_type is None:
            return self.storage.filter(Collection)
        return self.storage.filter(Collection, collection_type=collection_type)
