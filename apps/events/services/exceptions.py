"""
Domain-specific exceptions for events app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class EventsServiceError(Exception):
    """Base exception for all events service errors."""
    pass


class EventNotFoundError(EventsServiceError):
    """Raised when an event does not exist."""
    pass


class InvalidEventCodeError(EventsServiceError):
    """Raised when no event matches a join code."""
    pass


class AlreadyParticipantError(EventsServiceError):
    """Raised when a user tries to join an event they're already in."""
    pass


class NotParticipantError(EventsServiceError):
    """Raised when a user performs an action requiring participation."""
    pass


class UnsupportedCurrencyError(EventsServiceError):
    """Raised when a currency code is not in SUPPORTED_CURRENCIES."""
    pass


class InvalidAmountError(EventsServiceError):
    """Raised when a monetary amount is zero or negative."""
    pass


class InsufficientPermissionsError(EventsServiceError):
    """Raised when a participant lacks the role an action requires."""
    pass


class InvalidEventStatusError(EventsServiceError):
    """Raised when an event status is not one of EventStatus."""
    pass
