"""
Expenses app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from .exceptions import (
    ExpensesServiceError,
    SplitError,
    NoParticipantsError,
    MissingFieldError,
    InvalidNumberError,
    PercentageMismatchError,
    AmountMismatchError,
    InvalidSplitTypeError,
    DuplicateParticipantError,
    ExpenseNotFoundError,
    CategoryNotFoundError,
    ExpenseNotPendingError,
    InvalidReviewActionError,
    RejectionReasonRequiredError,
    InsufficientPermissionsError,
)

from .splitting import (
    SplitParticipant,
    ShareDraft,
    compute_shares,
    minor_unit,
)

from .expense_management import (
    create_expense,
    update_expense,
    review_expense,
    delete_expense,
    get_expense_by_id,
    get_event_expenses,
    get_categories,
)


__all__ = [
    # Exceptions
    'ExpensesServiceError',
    'SplitError',
    'NoParticipantsError',
    'MissingFieldError',
    'InvalidNumberError',
    'PercentageMismatchError',
    'AmountMismatchError',
    'InvalidSplitTypeError',
    'DuplicateParticipantError',
    'ExpenseNotFoundError',
    'CategoryNotFoundError',
    'ExpenseNotPendingError',
    'InvalidReviewActionError',
    'RejectionReasonRequiredError',
    'InsufficientPermissionsError',

    # Splitting
    'SplitParticipant',
    'ShareDraft',
    'compute_shares',
    'minor_unit',

    # Expense Management
    'create_expense',
    'update_expense',
    'review_expense',
    'delete_expense',
    'get_expense_by_id',
    'get_event_expenses',
    'get_categories',
]
