"""
Expense management service.

Submission (with share calculation), editing, review and deletion of expenses.
"""

import logging
from datetime import date as date_type
from decimal import Decimal
from typing import List, Optional, Sequence
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.events.services import (
    get_event_by_id,
    get_participation,
    get_participant_ids,
    normalize_currency,
    NotParticipantError,
)
from apps.events.signals import send_after_commit
from apps.expenses.models import (
    Expense,
    ExpenseCategory,
    ExpenseShare,
    ExpenseStatus,
    SplitType,
)
from apps.expenses.signals import expense_submitted, expense_reviewed

from .exceptions import (
    ExpenseNotFoundError,
    CategoryNotFoundError,
    ExpenseNotPendingError,
    InvalidReviewActionError,
    RejectionReasonRequiredError,
    InsufficientPermissionsError,
)
from .splitting import SplitParticipant, compute_shares

logger = logging.getLogger(__name__)

APPROVE = 'approve'
REJECT = 'reject'



def _get_category(category_id: UUID) -> ExpenseCategory:
    try:
        return ExpenseCategory.objects.get(id=category_id)
    except ExpenseCategory.DoesNotExist:
        raise CategoryNotFoundError(f"Expense category {category_id} not found")


def _check_participants(*, event_id: UUID, participants: Sequence[SplitParticipant]) -> None:
    allowed = set(get_participant_ids(event_id=event_id))
    outsiders = [p.user_id for p in participants if p.user_id not in allowed]
    if outsiders:
        raise NotParticipantError(
            f"Users {', '.join(str(u) for u in outsiders)} are not participants in this event"
        )


@transaction.atomic
def create_expense(
    *,
    event_id: UUID,
    submitter: User,
    amount: Decimal,
    description: str,
    date: date_type,
    split_type: str = SplitType.EQUAL,
    participants: Optional[Sequence[SplitParticipant]] = None,
    currency: Optional[str] = None,
    category_id: Optional[UUID] = None,
    location: str = '',
    vendor: str = '',
    notes: str = ''
) -> Expense:
    """
    Submit an expense and split it into shares.

    The expense and all of its shares are written in one transaction;
    any split error rolls back the whole submission.

    Auto-approval applies when the event does not require approval, when
    the amount is within the event's auto-approval limit, or when the
    submitter can approve expenses. The submitter is then recorded as
    reviewer.

    Args:
        event_id: UUID of the event
        submitter: Participant who paid
        amount: Positive expense amount
        description: Short description
        date: Date of the expense
        split_type: equal, percentage, custom or weighted
        participants: Who shares the expense (empty means every participant)
        currency: Currency code (defaults to event currency)
        category_id: Optional ExpenseCategory UUID
        location: Optional location
        vendor: Optional vendor
        notes: Optional notes

    Returns:
        Created Expense instance with shares

    Raises:
        EventNotFoundError: If event doesn't exist
        NotParticipantError: If submitter or a listed participant is not in the event
        CategoryNotFoundError: If category doesn't exist
        UnsupportedCurrencyError: If currency is not supported
        SplitError: If shares cannot be calculated
    """
    event = get_event_by_id(event_id=event_id)
    participation = get_participation(event_id=event.id, user=submitter)

    category = _get_category(category_id) if category_id else None

    currency = normalize_currency(currency or event.currency)

    if participants:
        _check_participants(event_id=event.id, participants=participants)
    else:
        participants = [
            SplitParticipant(user_id=uid) for uid in get_participant_ids(event_id=event.id)
        ]

    drafts = compute_shares(
        amount=amount,
        split_type=split_type,
        participants=participants,
        currency=currency,
    )

    auto_approved = (
        event.qualifies_for_auto_approval(amount)
        or participation.can_approve_expenses()
    )

    expense = Expense.objects.create(
        event=event,
        submitted_by=submitter,
        category=category,
        amount=amount,
        currency=currency,
        description=description,
        date=date,
        split_type=split_type,
        status=ExpenseStatus.APPROVED if auto_approved else ExpenseStatus.PENDING,
        reviewed_by=submitter if auto_approved else None,
        reviewed_at=timezone.now() if auto_approved else None,
        location=location,
        vendor=vendor,
        notes=notes,
    )

    ExpenseShare.objects.bulk_create([
        ExpenseShare(
            expense=expense,
            user_id=draft.user_id,
            amount=draft.amount,
            percentage=draft.percentage,
        )
        for draft in drafts
    ])

    logger.info(
        "Expense %s (%s %s, %s split, %s) submitted to event %s",
        expense.id, amount, currency, split_type, expense.status, event.id
    )
    send_after_commit(
        expense_submitted,
        sender=Expense,
        event_id=event.id,
        user_id=submitter.id,
        expense=expense,
    )
    return expense


@transaction.atomic
def update_expense(
    *,
    expense_id: UUID,
    user: User,
    amount: Optional[Decimal] = None,
    description: Optional[str] = None,
    date: Optional[date_type] = None,
    category_id: Optional[UUID] = None,
    location: Optional[str] = None,
    vendor: Optional[str] = None,
    notes: Optional[str] = None,
    split_type: Optional[str] = None,
    participants: Optional[Sequence[SplitParticipant]] = None
) -> Expense:
    """
    Edit a pending expense.

    Changing the amount, split type or participants recalculates the
    shares. When no participants are given, the current share holders are
    kept and carry their stored amount and percentage (the percentage
    also serves as weight). The expense and its shares change together;
    any split error leaves both untouched.

    Raises:
        ExpenseNotFoundError: If expense doesn't exist
        InsufficientPermissionsError: If user is not the submitter
        ExpenseNotPendingError: If expense was already reviewed
        CategoryNotFoundError: If category doesn't exist
        NotParticipantError: If a listed participant is not in the event
        SplitError: If shares cannot be calculated
    """
    try:
        expense = Expense.objects.select_for_update().get(id=expense_id)
    except Expense.DoesNotExist:
        raise ExpenseNotFoundError(f"Expense with ID {expense_id} not found")

    if expense.submitted_by_id != user.id:
        raise InsufficientPermissionsError("You can only update your own expenses")

    if not expense.is_pending:
        raise ExpenseNotPendingError("Only pending expenses can be updated")

    update_fields = ['updated_at']

    if category_id is not None:
        expense.category = _get_category(category_id)
        update_fields.append('category')

    for field, value in (
        ('description', description),
        ('date', date),
        ('location', location),
        ('vendor', vendor),
        ('notes', notes),
    ):
        if value is not None:
            setattr(expense, field, value)
            update_fields.append(field)

    if amount is not None or split_type is not None or participants:
        if participants:
            _check_participants(event_id=expense.event_id, participants=participants)
        else:
            participants = [
                SplitParticipant(
                    user_id=share.user_id,
                    amount=share.amount,
                    percentage=share.percentage,
                    weight=share.percentage,
                )
                for share in expense.shares.order_by('user__email')
            ]

        new_amount = expense.amount if amount is None else amount
        new_split_type = split_type or expense.split_type
        drafts = compute_shares(
            amount=new_amount,
            split_type=new_split_type,
            participants=participants,
            currency=expense.currency,
        )

        expense.amount = new_amount
        expense.split_type = new_split_type
        update_fields.extend(['amount', 'split_type'])

        expense.shares.all().delete()
        ExpenseShare.objects.bulk_create([
            ExpenseShare(
                expense=expense,
                user_id=draft.user_id,
                amount=draft.amount,
                percentage=draft.percentage,
            )
            for draft in drafts
        ])

    expense.save(update_fields=update_fields)
    logger.info("Expense %s updated by %s (%s)", expense.id, user.id, ', '.join(update_fields))
    return expense


@transaction.atomic
def review_expense(
    *,
    expense_id: UUID,
    reviewer: User,
    action: str,
    rejection_reason: str = ''
) -> Expense:
    """
    Approve or reject a pending expense.

    Raises:
        ExpenseNotFoundError: If expense doesn't exist
        InvalidReviewActionError: If action is not approve/reject
        InsufficientPermissionsError: If reviewer cannot approve expenses
        ExpenseNotPendingError: If expense was already reviewed
        RejectionReasonRequiredError: If rejecting without a reason
    """
    try:
        expense = (
            Expense.objects
            .select_for_update()
            .select_related('event')
            .get(id=expense_id)
        )
    except Expense.DoesNotExist:
        raise ExpenseNotFoundError(f"Expense with ID {expense_id} not found")

    if action not in (APPROVE, REJECT):
        raise InvalidReviewActionError(f"Invalid review action: {action!r}")

    if not expense.event.can_approve_expenses(reviewer):
        raise InsufficientPermissionsError("Only event admins and moderators can review expenses")

    if not expense.is_pending:
        raise ExpenseNotPendingError(f"Expense is already {expense.status}")

    if action == REJECT and not (rejection_reason or '').strip():
        raise RejectionReasonRequiredError("Rejection reason is required")

    expense.status = ExpenseStatus.APPROVED if action == APPROVE else ExpenseStatus.REJECTED
    expense.reviewed_by = reviewer
    expense.reviewed_at = timezone.now()
    expense.rejection_reason = rejection_reason.strip() if action == REJECT else ''
    expense.save(update_fields=['status', 'reviewed_by', 'reviewed_at', 'rejection_reason', 'updated_at'])

    logger.info("Expense %s %s by %s", expense.id, expense.status, reviewer.id)
    send_after_commit(
        expense_reviewed,
        sender=Expense,
        event_id=expense.event_id,
        user_id=expense.submitted_by_id,
        expense=expense,
    )
    return expense


@transaction.atomic
def delete_expense(*, expense_id: UUID, user: User) -> None:
    """
    Delete a pending expense and its shares.

    Only the submitter or someone who can approve expenses may delete.

    Raises:
        ExpenseNotFoundError: If expense doesn't exist
        InsufficientPermissionsError: If user may not delete it
        ExpenseNotPendingError: If expense was already reviewed
    """
    try:
        expense = (
            Expense.objects
            .select_for_update()
            .select_related('event')
            .get(id=expense_id)
        )
    except Expense.DoesNotExist:
        raise ExpenseNotFoundError(f"Expense with ID {expense_id} not found")

    if expense.submitted_by_id != user.id and not expense.event.can_approve_expenses(user):
        raise InsufficientPermissionsError("Insufficient permissions to delete this expense")

    if not expense.is_pending:
        raise ExpenseNotPendingError("Only pending expenses can be deleted")

    # Shares cascade
    expense.delete()
    logger.info("Expense %s deleted by %s", expense_id, user.id)


def get_expense_by_id(*, expense_id: UUID) -> Expense:
    """
    Get an expense with its shares.

    Raises:
        ExpenseNotFoundError: If expense doesn't exist
    """
    try:
        return (
            Expense.objects
            .select_related('event', 'submitted_by', 'reviewed_by', 'category')
            .prefetch_related('shares__user')
            .get(id=expense_id)
        )
    except Expense.DoesNotExist:
        raise ExpenseNotFoundError(f"Expense with ID {expense_id} not found")


def get_event_expenses(
    *,
    event_id: UUID,
    status: Optional[str] = None,
    category_id: Optional[UUID] = None,
    submitted_by: Optional[UUID] = None
) -> QuerySet:
    """Expenses of an event, newest first, optionally filtered."""
    queryset = (
        Expense.objects
        .filter(event_id=event_id)
        .select_related('submitted_by', 'reviewed_by', 'category')
        .prefetch_related('shares__user')
    )

    if status:
        queryset = queryset.filter(status=status)
    if category_id:
        queryset = queryset.filter(category_id=category_id)
    if submitted_by:
        queryset = queryset.filter(submitted_by_id=submitted_by)

    return queryset.order_by('-submitted_at')


def get_categories() -> List[ExpenseCategory]:
    return list(ExpenseCategory.objects.order_by('name'))
