"""
Balance calculation service.

Turns the ledger rows of one event (contributions, expenses, expense
shares) into each participant's net position.

For participant p:
    contributed = sum of p's contributions
    spent       = sum of expenses p submitted (pending or approved)
    share       = sum of p's shares of pending or approved expenses
    net_balance = contributed + spent - share

A positive net balance means the group owes p money.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List
from uuid import UUID

from django.db.models import Sum, QuerySet

from apps.events.models import Contribution
from apps.events.services import get_event_participants
from apps.expenses.models import Expense, ExpenseShare, COUNTED_STATUSES

ZERO = Decimal('0.00')


@dataclass(frozen=True)
class UserBalance:
    user_id: UUID
    display_name: str
    contributed: Decimal
    spent: Decimal
    net_balance: Decimal
    owes_amount: Decimal
    owed_amount: Decimal


def _totals_by(queryset: QuerySet, user_field: str, amount_field: str) -> Dict[UUID, Decimal]:
    """One grouped SUM query: {user_id: total}."""
    rows = (
        queryset
        .order_by()
        .values(user_field)
        .annotate(total=Sum(amount_field))
        .values_list(user_field, 'total')
    )
    return {user_id: total or ZERO for user_id, total in rows}


def calculate_balances(*, event_id: UUID) -> List[UserBalance]:
    """
    Net position of every participant, in participation order.

    Rejected expenses and their shares are ignored. An event without
    participants (or an unknown event ID) yields an empty list.
    """
    participations = list(get_event_participants(event_id=event_id))
    if not participations:
        return []

    contributed = _totals_by(
        Contribution.objects.filter(event_id=event_id),
        'user_id', 'amount'
    )
    spent = _totals_by(
        Expense.objects.filter(event_id=event_id, status__in=COUNTED_STATUSES),
        'submitted_by_id', 'amount'
    )
    shares = _totals_by(
        ExpenseShare.objects.filter(
            expense__event_id=event_id,
            expense__status__in=COUNTED_STATUSES
        ),
        'user_id', 'amount'
    )

    balances = []
    for participation in participations:
        user_id = participation.user_id
        user_contributed = contributed.get(user_id, ZERO)
        user_spent = spent.get(user_id, ZERO)
        net = user_contributed + user_spent - shares.get(user_id, ZERO)

        balances.append(UserBalance(
            user_id=user_id,
            display_name=participation.user.get_display_name(),
            contributed=user_contributed,
            spent=user_spent,
            net_balance=net,
            owes_amount=-net if net < 0 else ZERO,
            owed_amount=net if net > 0 else ZERO,
        ))

    return balances
