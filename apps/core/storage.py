"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Storage Port consumed by the fiscal workflow engine.
             Defines the persistence contract (lookups, scans, create,
             partial update) and the explicit unit-of-work boundary,
             independent of the concrete store.
-------------------------------------------------------------------------
"""
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Tuple, Type, TypeVar

from django.conf import settings
from django.db import models
from django.utils.module_loading import import_string

from apps.core.exceptions import StorageFailureException


logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_STORAGE_BACKEND = 'apps.core.storage_django.DjangoStorage'


class UnitOfWork(ABC):
    """
    Explicit transaction boundary.

    Units of work may be nested; only the outermost one commits or
    rolls back. Used as a context manager, any exception leaving the
    block rolls the work back and is re-raised.
    """

    @abstractmethod
    def begin(self) -> None:
        """Open the transaction (or a nested level of it)."""

    @abstractmethod
    def commit(self) -> None:
        """Make the work done since begin() durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard the work done since begin()."""

    def __enter__(self) -> 'UnitOfWork':
        self.begin()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
        return False


class StoragePort(ABC):
    """
    Abstract persistence interface for ledger entities.

    Entities are addressed by their Django model class. Lookups passed
    to filter() are exact matches on field names or attnames
    (e.g. ``budget_item_id=3``, ``status='pending'``).

    Attributes:
        transient_errors: Exception types that justify a retry.
        retry_attempts: Number of retries after the first failure.
        retry_backoff: Base delay in seconds, doubled on each retry.
    """

    transient_errors: Tuple[Type[BaseException], ...] = ()

    def __init__(
        self,
        retry_attempts: Optional[int] = None,
        retry_backoff: Optional[float] = None
    ) -> None:
        if retry_attempts is None:
            retry_attempts = getattr(settings, 'FMS_STORAGE_RETRY_ATTEMPTS', 1)
        if retry_backoff is None:
            retry_backoff = getattr(settings, 'FMS_STORAGE_RETRY_BACKOFF', 0.05)
        self.retry_attempts = retry_attempts
        self.retry_backoff = retry_backoff
        self._local = threading.local()

    @abstractmethod
    def get(self, model: Type[models.Model], pk: Any, for_update: bool = False) -> Optional[models.Model]:
        """
        Point lookup by primary key.

        Args:
            model: Entity model class.
            pk: Primary key value.
            for_update: Lock the row until the surrounding unit of work ends.

        Returns:
            The entity, or None if it does not exist.
        """

    @abstractmethod
    def filter(self, model: Type[models.Model], **lookups: Any) -> List[models.Model]:
        """Return all entities matching the exact-match lookups, ordered by pk."""

    @abstractmethod
    def create(self, model: Type[models.Model], **fields: Any) -> models.Model:
        """
        Persist a new entity.

        Raises:
            ValidationException: If a unique field is already taken.
        """

    @abstractmethod
    def update(self, model: Type[models.Model], pk: Any, **patch: Any) -> Optional[models.Model]:
        """
        Apply a partial field patch.

        Returns:
            The updated entity, or None if it does not exist.
        """

    @abstractmethod
    def unit_of_work(self) -> UnitOfWork:
        """Return a new unit of work bound to this store."""

    def exists(self, model: Type[models.Model], **lookups: Any) -> bool:
        return bool(self.filter(model, **lookups))

    def on_commit(self, callback: Callable[[], Any]) -> None:
        """
        Defer callback until the outermost run_atomic() call commits.

        Callbacks registered by work that rolls back are discarded.
        Outside run_atomic() the callback runs immediately.
        """
        pending = getattr(self._local, 'pending', None)
        if pending:
            pending[-1].append(callback)
        else:
            callback()

    def run_atomic(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run func inside a unit of work, retrying transient failures.

        Business exceptions raised by func are never retried. A transient
        storage error is retried up to ``retry_attempts`` times with
        exponential backoff; after that a StorageFailureException is raised.

        Returns:
            Whatever func returns.
        """
        if not hasattr(self._local, 'pending'):
            self._local.pending = []
        pending = self._local.pending

        attempt = 0
        while True:
            pending.append([])
            try:
                with self.unit_of_work():
                    result = func(*args, **kwargs)
            except self.transient_errors as exc:
                pending.pop()
                if attempt >= self.retry_attempts:
                    logger.error(
                        f"Storage operation failed after {attempt + 1} attempt(s): {exc}",
                        extra={'operation': getattr(func, '__name__', repr(func))}
                    )
                    raise StorageFailureException(
                        details={'reason': str(exc), 'attempts': attempt + 1}
                    ) from exc

                delay = self.retry_backoff * (2 ** attempt)
                logger.warning(
                    f"Transient storage error, retrying in {delay:.3f}s: {exc}",
                    extra={'operation': getattr(func, '__name__', repr(func))}
                )
                time.sleep(delay)
                attempt += 1
                continue
            except BaseException:
                pending.pop()
                raise

            callbacks = pending.pop()
            if pending:
                # Nested call: hand over to the enclosing unit of work
                pending[-1].extend(callbacks)
            else:
                for callback in callbacks:
                    callback()
            return result


def get_storage(backend: Optional[str] = None, **kwargs: Any) -> StoragePort:
    """
    Build the configured Storage Port adapter.

    Args:
        backend: Dotted path of the adapter class. Defaults to the
                 FMS_STORAGE_BACKEND setting.
        **kwargs: Passed to the adapter constructor.

    Returns:
        A StoragePort instance.
    """
    path = backend or getattr(settings, 'FMS_STORAGE_BACKEND', DEFAULT_STORAGE_BACKEND)
    storage_class = import_string(path)
    return storage_class(**kwargs)
