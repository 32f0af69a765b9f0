"""
Events app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from .exceptions import (
    EventsServiceError,
    EventNotFoundError,
    InvalidEventCodeError,
    AlreadyParticipantError,
    NotParticipantError,
    UnsupportedCurrencyError,
    InvalidAmountError,
    InsufficientPermissionsError,
    InvalidEventStatusError,
)

from .event_management import (
    create_event,
    get_event_by_id,
    update_event,
    get_event_summary,
    generate_event_code,
    normalize_currency,
)

from .participation_management import (
    join_event,
    get_event_participants,
    get_participant_ids,
    get_participation,
    require_participant,
)

from .contribution_management import (
    add_contribution,
    get_event_contributions,
)


__all__ = [
    # Exceptions
    'EventsServiceError',
    'EventNotFoundError',
    'InvalidEventCodeError',
    'AlreadyParticipantError',
    'NotParticipantError',
    'UnsupportedCurrencyError',
    'InvalidAmountError',
    'InsufficientPermissionsError',
    'InvalidEventStatusError',

    # Event Management
    'create_event',
    'get_event_by_id',
    'update_event',
    'get_event_summary',
    'generate_event_code',
    'normalize_currency',

    # Participation Management
    'join_event',
    'get_event_participants',
    'get_participant_ids',
    'get_participation',
    'require_participant',

    # Contribution Management
    'add_contribution',
    'get_event_contributions',
]
