"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Process-local adapter for the Storage Port. Rows are kept
             as plain field dictionaries and hydrated into unsaved model
             instances. Units of work are serialised behind a re-entrant
             lock and roll back by restoring a snapshot.
-------------------------------------------------------------------------
"""
import copy
import itertools
import threading
from typing import Any, Dict, List, Optional, Type

from django.db import models
from django.utils import timezone

from apps.core.exceptions import ValidationException
from apps.core.storage import StoragePort, UnitOfWork


class MemoryUnitOfWork(UnitOfWork):
    """
    Unit of work over a MemoryStorage.

    Each level keeps its own snapshot so a nested rollback discards only
    the work of that level, like a database savepoint.
    """

    def __init__(self, storage: 'MemoryStorage') -> None:
        self.storage = storage

    def begin(self) -> None:
        self.storage._lock.acquire()
        self.storage._snapshots.append(copy.deepcopy(self.storage._tables))

    def commit(self) -> None:
        try:
            self.storage._snapshots.pop()
        finally:
            self.storage._lock.release()

    def rollback(self) -> None:
        try:
            self.storage._tables = self.storage._snapshots.pop()
        finally:
            self.storage._lock.release()


class MemoryStorage(StoragePort):
    """
    In-memory Storage Port.

    Every operation, and every unit of work as a whole, runs under one
    re-entrant lock, so units of work are serialisable. Reads performed
    outside a unit of work see only committed state.
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._tables: Dict[str, Dict[int, Dict[str, Any]]] = {}
        self._sequences: Dict[str, itertools.count] = {}
        self._lock = threading.RLock()
        self._snapshots: List[Dict[str, Dict[int, Dict[str, Any]]]] = []

    @staticmethod
    def _key(model: Type[models.Model]) -> str:
        return model._meta.label_lower

    @staticmethod
    def _column(model: Type[models.Model], name: str) -> str:
        field = model._meta.get_field(name)
        return field.attname

    def _table(self, model: Type[models.Model]) -> Dict[int, Dict[str, Any]]:
        return self._tables.setdefault(self._key(model), {})

    def _hydrate(self, model: Type[models.Model], row: Dict[str, Any]) -> models.Model:
        return model(**copy.deepcopy(row))

    def _check_unique(self, model: Type[models.Model], row: Dict[str, Any], pk: Optional[int] = None) -> None:
        table = self._table(model)
        others = [r for key, r in table.items() if key != pk]

        for field in model._meta.concrete_fields:
            if field.primary_key or not field.unique:
                continue
            value = row.get(field.attname)
            if value is not None and any(r.get(field.attname) == value for r in others):
                raise ValidationException(
                    f"{model._meta.verbose_name} with {field.name} '{value}' already exists.",
                    details={'model': model._meta.label, 'field': field.name}
                )

        for together in model._meta.unique_together:
            columns = [self._column(model, name) for name in together]
            values = [row.get(c) for c in columns]
            if any([r.get(c) for c in columns] == values for r in others):
                raise ValidationException(
                    f"{model._meta.verbose_name} with this {', '.join(together)} already exists.",
                    details={'model': model._meta.label, 'fields': list(together)}
                )

    def get(self, model: Type[models.Model], pk: Any, for_update: bool = False) -> Optional[models.Model]:
        with self._lock:
            row = self._table(model).get(int(pk)) if pk is not None else None
            return self._hydrate(model, row) if row is not None else None

    def filter(self, model: Type[models.Model], **lookups: Any) -> List[models.Model]:
        criteria = {self._column(model, name): value for name, value in lookups.items()}
        with self._lock:
            rows = [
                row for _, row in sorted(self._table(model).items())
                if all(row.get(column) == value for column, value in criteria.items())
            ]
            return [self._hydrate(model, row) for row in rows]

    def create(self, model: Type[models.Model], **fields: Any) -> models.Model:
        with self._lock:
            instance = model(**fields)
            now = timezone.now()
            for field in model._meta.concrete_fields:
                if getattr(field, 'auto_now', False) or getattr(field, 'auto_now_add', False):
                    setattr(instance, field.attname, now)

            key = self._key(model)
            sequence = self._sequences.setdefault(key, itertools.count(1))
            instance.pk = next(sequence)

            row = {f.attname: getattr(instance, f.attname) for f in model._meta.concrete_fields}
            self._check_unique(model, row)
            self._table(model)[instance.pk] = copy.deepcopy(row)
            return instance

    def update(self, model: Type[models.Model], pk: Any, **patch: Any) -> Optional[models.Model]:
        with self._lock:
            table = self._table(model)
            current = table.get(int(pk)) if pk is not None else None
            if current is None:
                return None

            row = dict(current)
            for name, value in patch.items():
                row[self._column(model, name)] = value
            for field in model._meta.concrete_fields:
                if getattr(field, 'auto_now', False):
                    row[field.attname] = timezone.now()

            self._check_unique(model, row, pk=int(pk))
            table[int(pk)] = copy.deepcopy(row)
            return self._hydrate(model, row)

    def unit_of_work(self) -> UnitOfWork:
        return MemoryUnitOfWork(self)
