"""
Domain-specific exceptions for expenses app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class ExpensesServiceError(Exception):
    """Base exception for all expenses service errors."""
    pass


# Split calculation

class SplitError(ExpensesServiceError):
    """Base exception for expense splitting errors."""
    pass


class NoParticipantsError(SplitError):
    """Raised when an expense has nobody to split between."""
    pass


class MissingFieldError(SplitError):
    """Raised when a participant lacks the value its split type needs."""
    pass


class InvalidNumberError(SplitError):
    """Raised when a split value cannot be parsed or is out of range."""
    pass


class PercentageMismatchError(SplitError):
    """Raised when percentages do not add up to exactly 100."""
    pass


class AmountMismatchError(SplitError):
    """Raised when custom amounts do not add up to the expense amount."""
    pass


class InvalidSplitTypeError(SplitError):
    """Raised for an unknown split type."""
    pass


class DuplicateParticipantError(SplitError):
    """Raised when the same user appears twice in one split."""
    pass


# Expense lifecycle

class ExpenseNotFoundError(ExpensesServiceError):
    """Raised when an expense does not exist."""
    pass


class CategoryNotFoundError(ExpensesServiceError):
    """Raised when an expense category does not exist."""
    pass


class ExpenseNotPendingError(ExpensesServiceError):
    """Raised when reviewing or deleting an expense that was already reviewed."""
    pass


class InvalidReviewActionError(ExpensesServiceError):
    """Raised when review action is neither approve nor reject."""
    pass


class RejectionReasonRequiredError(ExpensesServiceError):
    """Raised when rejecting an expense without a reason."""
    pass


class InsufficientPermissionsError(ExpensesServiceError):
    """Raised when user lacks permission for an expense operation."""
    pass
