"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Payload checks shared by the service layer. Monetary values
             are parsed to exact Decimal; floats are refused outright.
-------------------------------------------------------------------------
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional

from apps.core.exceptions import ValidationException


CENT = Decimal('0.01')

# DecimalField(max_digits=15, decimal_places=2)
MAX_AMOUNT = Decimal('9999999999999.99')


def clean_amount(value: Any, field: str = 'amount', allow_zero: bool = False) -> Decimal:
    """
    Parse a monetary payload value.

    Args:
        value: Decimal, int or numeric string. Floats are rejected.
        field: Field name reported in the error details.
        allow_zero: Accept 0.00 (e.g. the unused side of a journal line).

    Returns:
        The amount quantized to two decimal places.

    Raises:
        ValidationException: If the value is not an exact amount, has more
            than two decimal places, is negative, or is zero when not allowed.
    """
    if isinstance(value, (bool, float)) or value is None:
        raise ValidationException(
            f"{field} must be an exact decimal amount.",
            details={'field': field, 'value': repr(value)}
        )

    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationException(
            f"{field} is not a valid amount.",
            details={'field': field, 'value': str(value)}
        )

    if not amount.is_finite():
        raise ValidationException(f"{field} is not a valid amount.", details={'field': field})

    if amount < 0 or (amount == 0 and not allow_zero):
        qualifier = 'zero or positive' if allow_zero else 'greater than zero'
        raise ValidationException(
            f"{field} must be {qualifier}.",
            details={'field': field, 'value': str(amount)}
        )

    # Checked before quantize, which cannot represent huge exponents
    if amount > MAX_AMOUNT:
        raise ValidationException(
            f"{field} exceeds the maximum amount.",
            details={'field': field, 'value': str(amount)}
        )

    if amount != amount.quantize(CENT):
        raise ValidationException(
            f"{field} cannot have more than two decimal places.",
            details={'field': field, 'value': str(amount)}
        )

    return amount.quantize(CENT)


def require_fields(payload: Dict[str, Any], *names: str) -> None:
    """Raise ValidationException listing every required field that is missing or blank."""
    missing = [
        name for name in names
        if payload.get(name) is None or (isinstance(payload.get(name), str) and not payload[name].strip())
    ]
    if missing:
        raise ValidationException(
            f"Missing required field(s): {', '.join(missing)}.",
            details={'fields': missing}
        )


def clean_choice(value: Any, choices: Iterable[Any], field: str) -> str:
    """Check a value against a TextChoices enum (or any iterable of values)."""
    allowed = [str(choice) for choice in choices]
    if str(value) not in allowed:
        raise ValidationException(
            f"Invalid {field} '{value}'.",
            details={'field': field, 'allowed': allowed}
        )
    return str(value)


def only_fields(payload: Dict[str, Any], allowed: Iterable[str], context: Optional[str] = None) -> Dict[str, Any]:
    """
    Restrict a free-form edit to the given non-status fields.

    Raises:
        ValidationException: If the payload touches any other field.
    """
    allowed = set(allowed)
    rejected = sorted(set(payload) - allowed)
    if rejected:
        raise ValidationException(
            f"Field(s) cannot be edited{' on ' + context if context else ''}: {', '.join(rejected)}.",
            details={'fields': rejected, 'allowed': sorted(allowed)}
        )
    return dict(payload)
