"""
Settlements app services layer.

Balance calculation and settlement reduction are pure reads / pure
functions; the lifecycle functions persist settlements atomically.
"""

from .exceptions import (
    SettlementsServiceError,
    SettlementNotFoundError,
    InvalidSettlementStateError,
    InsufficientPermissionsError,
    SettlementValidationError,
)

from .balance_calculation import (
    UserBalance,
    calculate_balances,
)

from .settlement_reduction import (
    SettlementDraft,
    reduce_balances,
)

from .settlement_lifecycle import (
    generate_settlements,
    create_custom_settlement,
    complete_settlement,
    get_settlement,
    get_event_settlements,
    get_user_settlements,
    get_settlement_summary,
)


__all__ = [
    # Exceptions
    'SettlementsServiceError',
    'SettlementNotFoundError',
    'InvalidSettlementStateError',
    'InsufficientPermissionsError',
    'SettlementValidationError',

    # Balances
    'UserBalance',
    'calculate_balances',

    # Reduction
    'SettlementDraft',
    'reduce_balances',

    # Lifecycle
    'generate_settlements',
    'create_custom_settlement',
    'complete_settlement',
    'get_settlement',
    'get_event_settlements',
    'get_user_settlements',
    'get_settlement_summary',
]
