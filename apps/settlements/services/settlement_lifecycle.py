"""
Settlement lifecycle service.

Persists generated and custom settlements, completes them, and provides
the read projections used by the API.

All mutations run inside ``transaction.atomic()`` with the event row
locked (``select_for_update``) for the whole read-compute-write cycle, so
regenerations and custom settlements of one event are serialized.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Q, QuerySet

from apps.accounts.models import User
from apps.events.models import Event
from apps.events.services import (
    EventNotFoundError,
    get_participant_ids,
    normalize_currency,
)
from apps.events.signals import send_after_commit
from apps.settlements.models import Settlement, SettlementStatus
from apps.settlements.signals import (
    settlements_generated,
    settlement_created,
    settlement_completed,
)

from .balance_calculation import calculate_balances, ZERO
from .exceptions import (
    SettlementNotFoundError,
    InvalidSettlementStateError,
    InsufficientPermissionsError,
    SettlementValidationError,
)
from .settlement_reduction import reduce_balances

logger = logging.getLogger(__name__)


def _lock_event(event_id: UUID) -> Event:
    try:
        return Event.objects.select_for_update().get(id=event_id)
    except Event.DoesNotExist:
        raise EventNotFoundError(f"Event with ID {event_id} not found")


@transaction.atomic
def generate_settlements(*, event_id: UUID) -> List[Settlement]:
    """
    Replace the pending settlements of an event with a fresh reduction.

    Completed and cancelled settlements are kept. Running it twice on an
    unchanged ledger yields the same instructions and leaves a single
    generation of pending rows. If anything fails, the previous pending
    settlements stay untouched.

    Returns:
        Newly created pending settlements, in reduction order

    Raises:
        EventNotFoundError: If event doesn't exist
    """
    event = _lock_event(event_id)

    drafts = reduce_balances(calculate_balances(event_id=event.id))

    replaced, _ = Settlement.objects.filter(
        event=event,
        status=SettlementStatus.PENDING
    ).delete()

    settlements = Settlement.objects.bulk_create([
        Settlement(
            event=event,
            from_user_id=draft.from_user_id,
            to_user_id=draft.to_user_id,
            amount=draft.amount,
            currency=event.currency,
            status=SettlementStatus.PENDING,
        )
        for draft in drafts
    ])

    logger.info(
        "Generated %d settlements for event %s (replaced %d pending)",
        len(settlements), event.id, replaced
    )
    send_after_commit(
        settlements_generated,
        sender=Settlement,
        event_id=event.id,
        settlements=settlements,
    )
    return settlements


@transaction.atomic
def create_custom_settlement(
    *,
    event_id: UUID,
    from_user_id: UUID,
    to_user_id: UUID,
    amount: Decimal,
    currency: Optional[str] = None,
    method: str = ''
) -> Settlement:
    """
    Record a settlement chosen by the users rather than by the reducer.

    The transfer must be backed by the current balances: the payer must
    owe at least ``amount`` and the payee must be owed at least
    ``amount``. Generated pending settlements are not touched.

    Args:
        event_id: UUID of the event
        from_user_id: Paying participant
        to_user_id: Receiving participant
        amount: Positive amount
        currency: Currency code (defaults to event currency)
        method: Optional payment method

    Returns:
        Created pending Settlement

    Raises:
        EventNotFoundError: If event doesn't exist
        SettlementValidationError: If the transfer is not backed by balances
        UnsupportedCurrencyError: If currency is not supported
    """
    event = _lock_event(event_id)

    participant_ids = set(get_participant_ids(event_id=event.id))
    if from_user_id not in participant_ids:
        raise SettlementValidationError(
            'from_not_participant', "Paying user is not a participant in this event"
        )
    if to_user_id not in participant_ids:
        raise SettlementValidationError(
            'to_not_participant', "Receiving user is not a participant in this event"
        )

    if amount is None or amount <= 0:
        raise SettlementValidationError('non_positive_amount', "Settlement amount must be positive")

    currency = normalize_currency(currency or event.currency)

    balances = {b.user_id: b for b in calculate_balances(event_id=event.id)}
    debtor = balances[from_user_id]
    creditor = balances[to_user_id]

    if debtor.net_balance >= 0:
        raise SettlementValidationError(
            'from_not_debtor', "Paying user does not owe money in this event"
        )
    if creditor.net_balance <= 0:
        raise SettlementValidationError(
            'to_not_creditor', "Receiving user is not owed money in this event"
        )
    if amount > debtor.owes_amount:
        raise SettlementValidationError(
            'exceeds_owed_by_debtor',
            f"Amount exceeds what the paying user owes ({debtor.owes_amount})"
        )
    if amount > creditor.owed_amount:
        raise SettlementValidationError(
            'exceeds_owed_to_creditor',
            f"Amount exceeds what the receiving user is owed ({creditor.owed_amount})"
        )

    settlement = Settlement.objects.create(
        event=event,
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        amount=amount,
        currency=currency,
        method=method,
        status=SettlementStatus.PENDING,
    )

    logger.info(
        "Custom settlement %s: %s -> %s %s %s in event %s",
        settlement.id, from_user_id, to_user_id, amount, settlement.currency, event.id
    )
    send_after_commit(
        settlement_created,
        sender=Settlement,
        event_id=event.id,
        user_id=from_user_id,
        settlement=settlement,
    )
    return settlement


@transaction.atomic
def complete_settlement(
    *,
    settlement_id: UUID,
    payment_reference: str,
    method: str = '',
    completed_by: Optional[User] = None
) -> Settlement:
    """
    Mark a pending settlement as completed.

    ``settled_at`` is set once; completed settlements are terminal.

    Args:
        settlement_id: UUID of the settlement
        payment_reference: Bank reference, receipt number, etc.
        method: Optional payment method (kept unchanged when empty)
        completed_by: If given, must be the payer or the payee

    Raises:
        SettlementNotFoundError: If settlement doesn't exist
        InsufficientPermissionsError: If completed_by is not a party
        InvalidSettlementStateError: If settlement is not pending
    """
    try:
        settlement = Settlement.objects.select_for_update().get(id=settlement_id)
    except Settlement.DoesNotExist:
        raise SettlementNotFoundError(f"Settlement with ID {settlement_id} not found")

    if completed_by is not None and not settlement.involves(completed_by):
        raise InsufficientPermissionsError("You are not authorized to complete this settlement")

    if not settlement.is_pending:
        raise InvalidSettlementStateError(f"Settlement is already {settlement.status}")

    settlement.mark_completed(payment_reference=payment_reference, method=method)

    logger.info("Settlement %s completed (ref %r)", settlement.id, payment_reference)
    send_after_commit(
        settlement_completed,
        sender=Settlement,
        event_id=settlement.event_id,
        user_id=settlement.from_user_id,
        settlement=settlement,
    )
    return settlement


def get_settlement(*, settlement_id: UUID) -> Settlement:
    """
    Raises:
        SettlementNotFoundError: If settlement doesn't exist
    """
    try:
        return (
            Settlement.objects
            .select_related('event', 'from_user', 'to_user')
            .get(id=settlement_id)
        )
    except Settlement.DoesNotExist:
        raise SettlementNotFoundError(f"Settlement with ID {settlement_id} not found")


def get_event_settlements(*, event_id: UUID) -> QuerySet:
    """All settlements of an event, newest first."""
    return (
        Settlement.objects
        .filter(event_id=event_id)
        .select_related('from_user', 'to_user')
        .order_by('-created_at')
    )


def get_user_settlements(*, event_id: UUID, user_id: UUID) -> QuerySet:
    """Settlements of an event where the user pays or receives, newest first."""
    return (
        get_event_settlements(event_id=event_id)
        .filter(Q(from_user_id=user_id) | Q(to_user_id=user_id))
    )


def get_settlement_summary(*, event_id: UUID) -> Dict[str, Any]:
    """
    Aggregate view of balances and settlements of an event.

    Returns:
        dict with keys total_owed, total_owes, users_in_debt,
        users_in_credit, pending_settlements, completed_settlements,
        total_pending_amount, balances, settlements
    """
    balances = calculate_balances(event_id=event_id)
    settlements = list(get_event_settlements(event_id=event_id))

    debtors = [b for b in balances if b.net_balance < 0]
    creditors = [b for b in balances if b.net_balance > 0]
    pending = [s for s in settlements if s.status == SettlementStatus.PENDING]

    return {
        'total_owed': sum((b.owed_amount for b in creditors), ZERO),
        'total_owes': sum((b.owes_amount for b in debtors), ZERO),
        'users_in_debt': len(debtors),
        'users_in_credit': len(creditors),
        'pending_settlements': len(pending),
        'completed_settlements': sum(1 for s in settlements if s.status == SettlementStatus.COMPLETED),
        'total_pending_amount': sum((s.amount for s in pending), ZERO),
        'balances': balances,
        'settlements': settlements,
    }
