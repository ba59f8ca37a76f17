"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Centralized logging for fiscal workflow operations.
-------------------------------------------------------------------------
"""
import logging
from typing import Any, Dict

logger = logging.getLogger('fms.workflow')


class WorkflowLogger:
    """Centralized logging for workflow transitions and balance changes"""

    @staticmethod
    def log_transition(plan, pk: Any, actor):
        """Log an applied status transition and its side effects"""
        logger.info(
            f"Transition applied: {plan.entity} #{pk} | "
            f"{plan.current} -> {plan.target} | "
            f"Side effects: {len(plan.side_effects)} | "
            f"By user: {actor.user_id}",
            extra={
                'entity': plan.entity,
                'entity_id': pk,
                'from_status': str(plan.current),
                'to_status': str(plan.target),
                'side_effects': [
                    f"{effect.model_label}#{effect.pk}:{effect.plan.target}"
                    for effect in plan.side_effects
                ],
                'user_id': actor.user_id,
            }
        )

    @staticmethod
    def log_created(entity: str, instance, actor):
        """Log creation of a ledger record"""
        logger.info(
            f"Created: {entity} #{instance.pk} | By user: {actor.user_id}",
            extra={
                'entity': entity,
                'entity_id': instance.pk,
                'user_id': actor.user_id,
            }
        )

    @staticmethod
    def log_obligation_applied(obligation, budget_item, actor_id: int):
        """Log an obligation reserved against a budget item"""
        logger.info(
            f"Obligation applied: {obligation.obligation_number} | "
            f"Budget item: {budget_item.account_code} | "
            f"Amount: PHP {obligation.amount} | "
            f"Remaining balance: PHP {budget_item.balance}",
            extra={
                'obligation_id': obligation.pk,
                'budget_item_id': budget_item.pk,
                'amount': str(obligation.amount),
                'balance': str(budget_item.balance),
                'version': budget_item.version,
                'user_id': actor_id,
            }
        )

    @staticmethod
    def log_obligation_released(obligation, budget_item, actor_id: int):
        """Log the balance restored by a cancelled obligation"""
        logger.info(
            f"Obligation released: {obligation.obligation_number} | "
            f"Budget item: {budget_item.account_code} | "
            f"Restored: PHP {obligation.amount} | "
            f"Balance: PHP {budget_item.balance}",
            extra={
                'obligation_id': obligation.pk,
                'budget_item_id': budget_item.pk,
                'amount': str(obligation.amount),
                'balance': str(budget_item.balance),
                'version': budget_item.version,
                'user_id': actor_id,
            }
        )

    @staticmethod
    def log_rejected(operation: str, error: Exception, context: Dict[str, Any]):
        """Log a business-rule rejection (not an infrastructure failure)"""
        logger.warning(
            f"Rejected {operation}: {error}",
            extra={'operation': operation, 'error_code': getattr(error, 'error_code', None), **context}
        )
