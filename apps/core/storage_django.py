"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Django ORM adapter for the Storage Port. Uses
             transaction.atomic for units of work and row-level
             select_for_update locks for check-then-write sequences.
-------------------------------------------------------------------------
"""
from typing import Any, Callable, List, Optional, Type

from django.db import IntegrityError, OperationalError, models, transaction

from apps.core.exceptions import ValidationException
from apps.core.storage import StoragePort, UnitOfWork


class DjangoUnitOfWork(UnitOfWork):
    """Unit of work backed by a django.db.transaction.Atomic block."""

    def __init__(self, using: Optional[str] = None) -> None:
        self.using = using
        self._atomic = None

    def begin(self) -> None:
        self._atomic = transaction.atomic(using=self.using)
        self._atomic.__enter__()

    def commit(self) -> None:
        self._atomic.__exit__(None, None, None)
        self._atomic = None

    def rollback(self) -> None:
        # Atomic rolls back instead of committing once the flag is set.
        transaction.set_rollback(True, using=self.using)
        self._atomic.__exit__(None, None, None)
        self._atomic = None


class DjangoStorage(StoragePort):
    """
    Storage Port implemented on the Django ORM.

    On PostgreSQL, get(for_update=True) takes a row lock that is held
    until the enclosing unit of work ends, which serialises concurrent
    obligations against the same budget item.
    Post-commit callbacks are handed to transaction.on_commit.
    """

    transient_errors = (OperationalError,)

    def __init__(self, using: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.using = using

    def _manager(self, model: Type[models.Model]):
        manager = model._default_manager
        return manager.using(self.using) if self.using else manager.all()

    def get(self, model: Type[models.Model], pk: Any, for_update: bool = False) -> Optional[models.Model]:
        queryset = self._manager(model)
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=pk)
        except model.DoesNotExist:
            return None

    def filter(self, model: Type[models.Model], **lookups: Any) -> List[models.Model]:
        return list(self._manager(model).filter(**lookups).order_by('pk'))

    def exists(self, model: Type[models.Model], **lookups: Any) -> bool:
        return self._manager(model).filter(**lookups).exists()

    def on_commit(self, callback: Callable[[], Any]) -> None:
        transaction.on_commit(callback, using=self.using)

    def create(self, model: Type[models.Model], **fields: Any) -> models.Model:
        instance = model(**fields)
        try:
            # Savepoint keeps the outer unit of work usable after a constraint error
            with transaction.atomic(using=self.using):
                instance.save(using=self.using, force_insert=True)
        except IntegrityError as exc:
            raise ValidationException(
                f"Could not create {model._meta.verbose_name}: {exc}",
                details={'model': model._meta.label}
            ) from exc
        return instance

    def update(self, model: Type[models.Model], pk: Any, **patch: Any) -> Optional[models.Model]:
        instance = self.get(model, pk)
        if instance is None:
            return None

        for field_name, value in patch.items():
            setattr(instance, field_name, value)

        update_fields = list(patch)
        has_updated_at = any(f.name == 'updated_at' for f in model._meta.concrete_fields)
        if has_updated_at and 'updated_at' not in update_fields:
            update_fields.append('updated_at')

        try:
            with transaction.atomic(using=self.using):
                instance.save(using=self.using, update_fields=update_fields)
        except IntegrityError as exc:
            raise ValidationException(
                f"Could not update {model._meta.verbose_name}: {exc}",
                details={'model': model._meta.label, 'pk': pk}
            ) from exc
        return instance

    def unit_of_work(self) -> UnitOfWork:
        return DjangoUnitOfWork(using=self.using)
