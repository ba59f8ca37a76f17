"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Shared service-layer plumbing for the module services:
             access gating, guarded lookups, atomic execution with the
             storage retry policy, and application of transition plans.
-------------------------------------------------------------------------
"""
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from django.apps import apps
from django.db import models
from django.utils import timezone

from apps.core.exceptions import (
    FMSException,
    NotFoundException,
    StorageFailureException,
    WorkflowTransitionException,
)
from apps.core.logging import WorkflowLogger
from apps.core.storage import StoragePort, get_storage
from apps.core.workflows import TransitionPlan, plan_transition
from apps.users.permissions import Actor, ensure_module_access

T = TypeVar('T')


class WorkflowService:
    """
    Base class of the module services.

    Every mutating operation follows the same order: check the actor's
    module access, then run the read-check-write sequence inside one
    unit of work. A refused or failed operation leaves no writes behind.

    Attributes:
        module: RoleModule value gating this service.
        storage: StoragePort adapter the service runs against.
    """

    module: str = ''

    def __init__(self, storage: Optional[StoragePort] = None) -> None:
        self.storage = storage or get_storage()

    def _authorize(self, actor: Actor) -> None:
        ensure_module_access(actor, self.module)

    def _get_or_404(self, model: Type[models.Model], pk: Any, for_update: bool = False) -> models.Model:
        instance = self.storage.get(model, pk, for_update=for_update) if pk is not None else None
        if instance is None:
            raise NotFoundException(
                f"{model._meta.verbose_name} #{pk} was not found.",
                details={'model': model._meta.label, 'pk': pk}
            )
        return instance

    def _atomic(self, actor: Actor, operation: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Gate on the actor's module and run func as one unit of work.

        Business rejections are logged and re-raised unchanged.
        """
        try:
            self._authorize(actor)
            return self.storage.run_atomic(func, *args, **kwargs)
        except StorageFailureException:
            raise
        except FMSException as exc:
            WorkflowLogger.log_rejected(operation, exc, {'user_id': actor.user_id, 'required_module': self.module})
            raise

    def _apply_plan(self, actor: Actor, model: Type[models.Model], pk: Any, plan: TransitionPlan) -> models.Model:
        """
        Write a planned transition and its side effects.

        Must run inside the unit of work that evaluated the plan.
        """
        now = timezone.now()
        patch = plan.build_patch(actor.user_id, now)
        if any(f.name == 'updated_by' for f in model._meta.concrete_fields):
            patch['updated_by_id'] = actor.user_id

        updated = self.storage.update(model, pk, **patch)
        if updated is None:
            raise NotFoundException(details={'model': model._meta.label, 'pk': pk})

        for effect in plan.side_effects:
            self._apply_plan(actor, apps.get_model(effect.model_label), effect.pk, effect.plan)

        self.storage.on_commit(lambda: WorkflowLogger.log_transition(plan, pk, actor))
        return updated

    def _transition(
        self,
        actor: Actor,
        model: Type[models.Model],
        pk: Any,
        entity: str,
        target: str,
        context: Optional[Callable[[models.Model], Dict[str, Any]]] = None
    ) -> models.Model:
        """
        Lock an entity, plan the requested status change and apply it.

        Args:
            context: Optional callable building the guard context from the
                     locked instance.
        """
        instance = self._get_or_404(model, pk, for_update=True)
        plan = plan_transition(entity, instance.status, target, context(instance) if context else None)
        return self._apply_plan(actor, model, instance.pk, plan)

    def _request_transition(
        self,
        actor: Actor,
        model: Type[models.Model],
        pk: Any,
        entity: str,
        target: str,
        context: Optional[Callable[[models.Model], Dict[str, Any]]] = None
    ) -> models.Model:
        return self._atomic(
            actor, f"{entity}:{target}", self._transition, actor, model, pk, entity, target, context
        )

    def _edit_draft(
        self,
        actor: Actor,
        model: Type[models.Model],
        pk: Any,
        editable_status: str,
        patch: Dict[str, Any]
    ) -> models.Model:
        """
        Apply a free-form edit to non-status fields of a record.

        Only allowed while the record is in editable_status.
        """
        instance = self._get_or_404(model, pk, for_update=True)
        if instance.status != editable_status:
            raise WorkflowTransitionException(
                f"{model._meta.verbose_name} can only be edited while '{editable_status}'.",
                details={'model': model._meta.label, 'pk': pk, 'status': str(instance.status)}
            )
        if not patch:
            return instance
        return self.storage.update(model, pk, updated_by_id=actor.user_id, **patch)
