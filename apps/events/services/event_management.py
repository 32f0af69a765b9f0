"""
Event management service.

Handles event creation, settings updates, lookup and the event summary
with proper transaction safety.
"""

import logging
import secrets
from decimal import Decimal
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction, IntegrityError
from django.db.models import Sum

from apps.accounts.models import User
from apps.events.models import Event, EventStatus, Participation, ParticipantRole, Contribution
from apps.expenses.models import Expense, ExpenseStatus, COUNTED_STATUSES

from .exceptions import (
    EventNotFoundError,
    UnsupportedCurrencyError,
    InsufficientPermissionsError,
    InvalidAmountError,
    InvalidEventStatusError,
)

logger = logging.getLogger(__name__)

CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
CODE_LENGTH = 8


def generate_event_code() -> str:
    """Random 8-character upper-case join code."""
    return ''.join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def normalize_currency(currency: str) -> str:
    """
    Upper-case a currency code and check it against SUPPORTED_CURRENCIES.

    Raises:
        UnsupportedCurrencyError: If the code is not supported
    """
    code = (currency or '').strip().upper()
    supported = {c.strip().upper() for c in settings.SUPPORTED_CURRENCIES}
    if code not in supported:
        raise UnsupportedCurrencyError(f"Unsupported currency code: {currency!r}")
    return code


def create_event(
    *,
    name: str,
    creator: User,
    currency: Optional[str] = None,
    description: str = '',
    require_approval: bool = True,
    auto_approval_limit: Decimal = Decimal('0.00'),
    max_retries: int = 5
) -> Event:
    """
    Create a new event and add the creator as owner.

    This is a multi-step operation wrapped in a transaction:
    1. Generate unique join code
    2. Create the event
    3. Create owner participation

    Args:
        name: Event name
        creator: User who will own the event
        currency: ISO currency code (defaults to DEFAULT_CURRENCY)
        description: Optional description
        require_approval: Whether submitted expenses need review
        auto_approval_limit: Expenses at or below this amount skip review (0 disables)
        max_retries: Maximum attempts to generate a unique join code

    Returns:
        Created Event instance

    Raises:
        UnsupportedCurrencyError: If currency is not supported
        RuntimeError: If cannot generate unique join code after retries
    """
    currency = normalize_currency(currency or settings.DEFAULT_CURRENCY)

    # Retry logic outside transaction to handle code collisions
    for attempt in range(max_retries):
        code = generate_event_code()

        try:
            # Each attempt is a separate transaction
            with transaction.atomic():
                event = Event.objects.create(
                    name=name,
                    description=description,
                    code=code,
                    created_by=creator,
                    currency=currency,
                    require_approval=require_approval,
                    auto_approval_limit=auto_approval_limit,
                )

                Participation.objects.create(
                    user=creator,
                    event=event,
                    role=ParticipantRole.OWNER
                )

                logger.info("Event %s created by %s", event.id, creator.id)
                return event

        except IntegrityError:
            # Join code collision (very rare)
            if attempt == max_retries - 1:
                raise RuntimeError(
                    f"Failed to generate unique event code after {max_retries} attempts"
                )
            continue

    # Should never reach here
    raise RuntimeError("Unexpected error in event creation")


def get_event_by_id(*, event_id: UUID) -> Event:
    """
    Get an event by ID.

    Raises:
        EventNotFoundError: If event doesn't exist
    """
    try:
        return Event.objects.select_related('created_by').get(id=event_id)
    except Event.DoesNotExist:
        raise EventNotFoundError(f"Event with ID {event_id} not found")


@transaction.atomic
def update_event(
    *,
    event_id: UUID,
    user: User,
    name: Optional[str] = None,
    description: Optional[str] = None,
    require_approval: Optional[bool] = None,
    auto_approval_limit: Optional[Decimal] = None,
    status: Optional[str] = None,
    end_date: Optional[datetime] = None
) -> Event:
    """
    Update event settings (owner or admin only).

    Only the arguments that are not None are changed. Currency and join
    code are fixed after creation.

    Raises:
        EventNotFoundError: If event doesn't exist
        InsufficientPermissionsError: If user is not owner or admin
        InvalidAmountError: If auto_approval_limit is negative
        InvalidEventStatusError: If status is unknown
    """
    try:
        event = Event.objects.select_for_update().get(id=event_id)
    except Event.DoesNotExist:
        raise EventNotFoundError(f"Event with ID {event_id} not found")

    if not event.is_admin(user):
        raise InsufficientPermissionsError("Only event owners and admins can update the event")

    update_fields = ['updated_at']

    if name is not None:
        event.name = name
        update_fields.append('name')

    if description is not None:
        event.description = description
        update_fields.append('description')

    if require_approval is not None:
        event.require_approval = require_approval
        update_fields.append('require_approval')

    if auto_approval_limit is not None:
        if auto_approval_limit < 0:
            raise InvalidAmountError("Auto-approval limit must not be negative")
        event.auto_approval_limit = auto_approval_limit
        update_fields.append('auto_approval_limit')

    if status is not None:
        if status not in EventStatus.values:
            raise InvalidEventStatusError(f"Invalid event status: {status!r}")
        event.status = status
        update_fields.append('status')

    if end_date is not None:
        event.end_date = end_date
        update_fields.append('end_date')

    event.save(update_fields=update_fields)

    logger.info("Event %s updated by %s: %s", event.id, user.id, ', '.join(update_fields[1:]))
    return event


def get_event_summary(*, event_id: UUID, activity_limit: int = 10) -> Dict[str, Any]:
    """
    Headline numbers and recent activity of an event.

    Returns:
        dict with keys event, participant_count, pending_expenses,
        total_contributions, total_expenses, recent_activity. Recent
        activity merges contributions and expenses, newest first.

    Raises:
        EventNotFoundError: If event doesn't exist
    """
    event = get_event_by_id(event_id=event_id)

    contributions = Contribution.objects.filter(event=event)
    expenses = Expense.objects.filter(event=event)

    total_contributions = contributions.aggregate(total=Sum('amount'))['total'] or Decimal('0.00')
    total_expenses = (
        expenses.filter(status__in=COUNTED_STATUSES).aggregate(total=Sum('amount'))['total']
        or Decimal('0.00')
    )

    activity = [
        {
            'type': 'contribution',
            'id': c.id,
            'user': c.user,
            'amount': c.amount,
            'description': c.notes,
            'status': '',
            'timestamp': c.timestamp,
        }
        for c in contributions.select_related('user').order_by('-timestamp')[:activity_limit]
    ]
    activity += [
        {
            'type': 'expense',
            'id': e.id,
            'user': e.submitted_by,
            'amount': e.amount,
            'description': e.description,
            'status': e.status,
            'timestamp': e.submitted_at,
        }
        for e in expenses.select_related('submitted_by').order_by('-submitted_at')[:activity_limit]
    ]
    activity.sort(key=lambda item: item['timestamp'], reverse=True)

    return {
        'event': event,
        'participant_count': event.participations.count(),
        'pending_expenses': expenses.filter(status=ExpenseStatus.PENDING).count(),
        'total_contributions': total_contributions,
        'total_expenses': total_expenses,
        'recent_activity': activity[:activity_limit],
    }
