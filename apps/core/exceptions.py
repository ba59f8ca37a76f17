"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Custom exceptions for the LGU-FMS system. These provide
             specific error codes for balance, ledger and workflow
             violations raised by the fiscal workflow engine.
-------------------------------------------------------------------------
"""
from typing import Optional


class FMSException(Exception):
    """Base exception for all LGU-FMS specific errors."""

    error_code: str = "ERR_FMS_GENERIC"
    default_message: str = "An error occurred in the FMS system."

    def __init__(self, message: Optional[str] = None, details: Optional[dict] = None) -> None:
        """
        Initialize FMS exception.

        Args:
            message: Custom error message. If None, uses default_message.
            details: Additional context dictionary for debugging.
        """
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for API responses."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


# Lookup Exceptions
class NotFoundException(FMSException):
    """Raised when a referenced entity id does not exist."""

    error_code = "ERR_NOT_FOUND"
    default_message = "The requested record was not found."


# Budget-related Exceptions
class InsufficientBalanceException(FMSException):
    """Raised when an obligation exceeds the remaining budget item balance."""

    error_code = "ERR_INSUFFICIENT_BALANCE"
    default_message = "The requested amount exceeds the available balance of this budget item."


# Ledger-related Exceptions
class UnbalancedEntryException(FMSException):
    """Raised when posting a journal entry whose debits and credits differ."""

    error_code = "ERR_UNBALANCED"
    default_message = "Journal entry is not balanced. Total debits must equal total credits."


# Workflow-related Exceptions
class WorkflowTransitionException(FMSException):
    """Raised when an invalid state transition is attempted."""

    error_code = "ERR_INVALID_TRANSITION"
    default_message = "Invalid workflow transition attempted."


class UnauthorizedRoleException(FMSException):
    """Raised when a user lacks the required role for an action."""

    error_code = "ERR_UNAUTHORIZED_ROLE"
    default_message = "You do not have the required role to perform this action."


# Data Validation Exceptions
class ValidationException(FMSException):
    """Raised when a payload fails structural or field-level checks."""

    error_code = "ERR_VALIDATION"
    default_message = "The submitted data is invalid."


# Infrastructure Exceptions
class StorageFailureException(FMSException):
    """
    Raised when the storage layer keeps failing after the retry policy.

    Distinct from the business rule exceptions so callers can tell
    "rejected by policy" apart from an infrastructure failure.
    """

    error_code = "ERR_STORAGE_FAILURE"
    default_message = "The storage backend could not complete the operation. Please try again."
