# Overview: Error taxonomy shared by services and routes.

"""
Every service failure is a LedgerError subclass carrying a human-readable
message plus optional structured details. Routes translate the class into
an HTTP status; services never return partial results on failure.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for recoverable domain errors."""
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error": self.message, "code": type(self).__name__, "details": self.details}


class ValidationError(LedgerError, ValueError):
    """Malformed input to a mutator."""


class InvalidAmount(ValidationError):
    """Entered sale amount is missing, non-numeric or not positive."""


class DiscountExceedsAmount(ValidationError):
    """Discount larger than the entered amount."""


class InvalidPaymentMode(ValidationError):
    """Payment mode is not CASH, UPI or CREDIT."""


class PolicyViolation(LedgerError):
    """Discount exceeds the item's limit and no override was given."""
    status_code = 422


class NotFound(LedgerError):
    status_code = 404


class UnknownStaff(NotFound):
    """Staff id does not resolve to an active staff member of the shop."""


class ConflictError(LedgerError):
    """Business rule conflict (duplicate passcode, referenced entity delete)."""
    status_code = 409


class IllegalTransition(LedgerError):
    status_code = 409


class AlreadySettled(IllegalTransition):
    pass


class NotCreditSale(IllegalTransition):
    pass


class PersistenceFailure(LedgerError):
    """Storage layer failure; the write was rolled back."""
    status_code = 500
