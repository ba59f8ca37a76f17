"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Double-entry validator. Computes debit/credit totals of a
             journal entry and gates the post transition.
-------------------------------------------------------------------------
"""
from decimal import Decimal
from typing import Iterable, Tuple

from apps.core.exceptions import UnbalancedEntryException, ValidationException


ZERO = Decimal('0.00')


def totals(items: Iterable) -> Tuple[Decimal, Decimal]:
    """
    Sum the debit and credit sides of journal entry items.

    Args:
        items: JournalEntryItem instances (or any objects with debit/credit).

    Returns:
        Tuple of (debit_total, credit_total).
    """
    debit_total = ZERO
    credit_total = ZERO
    for item in items:
        debit_total += item.debit or ZERO
        credit_total += item.credit or ZERO
    return debit_total, credit_total


def is_balanced(items: Iterable) -> bool:
    """True iff total debits equal total credits. An empty list is balanced."""
    debit_total, credit_total = totals(items)
    return debit_total == credit_total


def ensure_postable(items: Iterable) -> Tuple[Decimal, Decimal]:
    """
    Gate for posting a journal entry.

    An entry must carry at least one line, non-zero totals, and equal
    debit and credit totals.

    Returns:
        The (debit_total, credit_total) that were checked.

    Raises:
        ValidationException: If the entry has no items or zero totals.
        UnbalancedEntryException: If debits and credits differ.
    """
    items = list(items)
    if not items:
        raise ValidationException(
            "Cannot post a journal entry without items.",
            details={'item_count': 0}
        )

    debit_total, credit_total = totals(items)
    if debit_total != credit_total:
        raise UnbalancedEntryException(
            f"Debits (PHP {debit_total}) do not equal credits (PHP {credit_total}).",
            details={
                'debit_total': str(debit_total),
                'credit_total': str(credit_total),
                'difference': str(debit_total - credit_total),
            }
        )

    if debit_total == ZERO:
        raise ValidationException(
            "Cannot post a journal entry with zero totals.",
            details={'item_count': len(items)}
        )

    return debit_total, credit_total
