"""
Domain-specific exceptions for settlements app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class SettlementsServiceError(Exception):
    """Base exception for all settlements service errors."""
    pass


class SettlementNotFoundError(SettlementsServiceError):
    """Raised when a settlement does not exist."""
    pass


class InvalidSettlementStateError(SettlementsServiceError):
    """Raised when completing a settlement that is not pending."""
    pass


class InsufficientPermissionsError(SettlementsServiceError):
    """Raised when user is neither payer nor payee of a settlement."""
    pass


class SettlementValidationError(SettlementsServiceError):
    """
    Raised when a custom settlement is not backed by the balances.

    ``reason`` is a stable machine-readable code:
    from_not_participant, to_not_participant, non_positive_amount,
    from_not_debtor, to_not_creditor, exceeds_owed_by_debtor,
    exceeds_owed_to_creditor.
    """

    def __init__(self, reason, message):
        super().__init__(message)
        self.reason = reason
