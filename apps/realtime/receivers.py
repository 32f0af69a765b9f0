"""
Forward ledger signals to observers of the affected event.

Every message has the shape ``{type, event_id, user_id, data, timestamp}``
with IDs as strings and ``data`` produced by the API serializers.
"""

import logging

from django.apps import apps as django_apps
from django.dispatch import receiver
from django.utils import timezone

from apps.events.serializers import ContributionSerializer
from apps.events.signals import contribution_added
from apps.expenses.models import ExpenseStatus
from apps.expenses.serializers import ExpenseSerializer
from apps.expenses.signals import expense_submitted, expense_reviewed
from apps.settlements.serializers import SettlementSerializer
from apps.settlements.signals import (
    settlements_generated,
    settlement_created,
    settlement_completed,
)

logger = logging.getLogger(__name__)


def get_registry():
    """Connection registry owned by the realtime app config."""
    return django_apps.get_app_config('realtime').registry


def build_message(message_type, *, event_id, user_id=None, data=None):
    return {
        'type': message_type,
        'event_id': str(event_id),
        'user_id': str(user_id) if user_id is not None else None,
        'data': data,
        'timestamp': timezone.now().isoformat(),
    }


def _broadcast(message_type, *, event_id, user_id=None, data=None):
    message = build_message(message_type, event_id=event_id, user_id=user_id, data=data)
    delivered = get_registry().broadcast(event_id=event_id, message=message)
    logger.debug("%s for event %s delivered to %d observers", message_type, event_id, delivered)
    return delivered


@receiver(contribution_added, dispatch_uid='realtime_contribution_added')
def on_contribution_added(sender, *, event_id, user_id, contribution, **kwargs):
    _broadcast(
        'contribution_added',
        event_id=event_id,
        user_id=user_id,
        data=ContributionSerializer(contribution).data,
    )


@receiver(expense_submitted, dispatch_uid='realtime_expense_submitted')
def on_expense_submitted(sender, *, event_id, user_id, expense, **kwargs):
    _broadcast('expense_added', event_id=event_id, user_id=user_id, data=ExpenseSerializer(expense).data)


@receiver(expense_reviewed, dispatch_uid='realtime_expense_reviewed')
def on_expense_reviewed(sender, *, event_id, user_id, expense, **kwargs):
    if expense.status == ExpenseStatus.APPROVED:
        message_type = 'expense_approved'
    else:
        message_type = 'expense_rejected'
    _broadcast(message_type, event_id=event_id, user_id=user_id, data=ExpenseSerializer(expense).data)


@receiver(settlements_generated, dispatch_uid='realtime_settlements_generated')
def on_settlements_generated(sender, *, event_id, settlements, **kwargs):
    _broadcast(
        'settlements_generated',
        event_id=event_id,
        data=SettlementSerializer(settlements, many=True).data,
    )


@receiver(settlement_created, dispatch_uid='realtime_settlement_created')
def on_settlement_created(sender, *, event_id, user_id, settlement, **kwargs):
    _broadcast('settlement_created', event_id=event_id, user_id=user_id, data=SettlementSerializer(settlement).data)


@receiver(settlement_completed, dispatch_uid='realtime_settlement_completed')
def on_settlement_completed(sender, *, event_id, user_id, settlement, **kwargs):
    _broadcast('settlement_completed', event_id=event_id, user_id=user_id, data=SettlementSerializer(settlement).data)
