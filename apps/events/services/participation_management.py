"""
Participation management service.

Joining events and the participant lookup used by expense splitting
and balance calculation.
"""

from typing import List
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.events.models import Event, Participation, ParticipantRole

from .exceptions import (
    InvalidEventCodeError,
    AlreadyParticipantError,
    NotParticipantError,
)


@transaction.atomic
def join_event(*, code: str, user: User) -> Participation:
    """
    Join an event using its 8-character code (case-insensitive).

    Args:
        code: Event join code
        user: User joining the event

    Returns:
        Created Participation instance

    Raises:
        InvalidEventCodeError: If no event has this code
        AlreadyParticipantError: If user already participates
    """
    try:
        event = (
            Event.objects
            .select_for_update()
            .get(code=(code or '').strip().upper())
        )
    except Event.DoesNotExist:
        raise InvalidEventCodeError("Invalid event code")

    if event.has_participant(user):
        raise AlreadyParticipantError(f"You are already a participant in {event.name}")

    try:
        participation = Participation.objects.create(
            user=user,
            event=event,
            role=ParticipantRole.PARTICIPANT
        )
    except IntegrityError:
        # Database constraint caught duplicate participation
        raise AlreadyParticipantError(f"You are already a participant in {event.name}")

    return participation


def get_event_participants(*, event_id: UUID) -> QuerySet:
    """
    Participations of an event with users loaded, in join order.

    Join order is the order balances are reported in.
    """
    return (
        Participation.objects
        .filter(event_id=event_id)
        .select_related('user')
        .order_by('joined_at')
    )


def get_participant_ids(*, event_id: UUID) -> List[UUID]:
    """User IDs currently participating in an event, in join order."""
    return list(
        get_event_participants(event_id=event_id).values_list('user_id', flat=True)
    )


def get_participation(*, event_id: UUID, user: User) -> Participation:
    """
    Get a user's participation in an event.

    Raises:
        NotParticipantError: If the user does not participate
    """
    try:
        return Participation.objects.select_related('event').get(event_id=event_id, user=user)
    except Participation.DoesNotExist:
        raise NotParticipantError("You are not a participant in this event")


def require_participant(*, event_id: UUID, user: User) -> None:
    """
    Raises:
        NotParticipantError: If the user does not participate
    """
    if not Participation.objects.filter(event_id=event_id, user=user).exists():
        raise NotParticipantError("You are not a participant in this event")
