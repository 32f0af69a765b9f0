"""
Contribution management service.

Contributions are append-only: there is no update or delete path.
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.events.models import Contribution
from apps.events.signals import contribution_added, send_after_commit

from .event_management import get_event_by_id, normalize_currency
from .exceptions import InvalidAmountError
from .participation_management import require_participant

logger = logging.getLogger(__name__)


@transaction.atomic
def add_contribution(
    *,
    event_id: UUID,
    user: User,
    amount: Decimal,
    currency: Optional[str] = None,
    notes: str = ''
) -> Contribution:
    """
    Record money a participant put into the shared pool.

    Args:
        event_id: UUID of the event
        user: Contributing participant
        amount: Positive amount
        currency: Currency code (defaults to event currency)
        notes: Optional free text

    Returns:
        Created Contribution instance

    Raises:
        EventNotFoundError: If event doesn't exist
        NotParticipantError: If user does not participate
        InvalidAmountError: If amount is not positive
        UnsupportedCurrencyError: If currency is not supported
    """
    event = get_event_by_id(event_id=event_id)
    require_participant(event_id=event.id, user=user)

    if amount is None or amount <= 0:
        raise InvalidAmountError("Contribution amount must be positive")

    contribution = Contribution.objects.create(
        event=event,
        user=user,
        amount=amount,
        currency=normalize_currency(currency or event.currency),
        notes=notes,
    )

    logger.info(
        "Contribution %s of %s %s added to event %s",
        contribution.id, amount, contribution.currency, event.id
    )
    send_after_commit(
        contribution_added,
        sender=Contribution,
        event_id=event.id,
        user_id=user.id,
        contribution=contribution,
    )
    return contribution


def get_event_contributions(*, event_id: UUID) -> QuerySet:
    """All contributions of an event, newest first."""
    return (
        Contribution.objects
        .filter(event_id=event_id)
        .select_related('user')
        .order_by('-timestamp')
    )
