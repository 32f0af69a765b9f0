# ==========================================
# apps/expenses/models.py
# ==========================================

from decimal import Decimal
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
import uuid


class ExpenseStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'


# Only these statuses count toward balances
COUNTED_STATUSES = (ExpenseStatus.PENDING, ExpenseStatus.APPROVED)


class SplitType(models.TextChoices):
    EQUAL = 'equal', 'Equal'
    PERCENTAGE = 'percentage', 'Percentage'
    CUSTOM = 'custom', 'Custom'
    WEIGHTED = 'weighted', 'Weighted'


class ExpenseCategory(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=50, unique=True)
    icon = models.CharField(max_length=10, blank=True)

    class Meta:
        db_table = 'expense_categories'
        ordering = ['name']
        verbose_name_plural = 'expense categories'

    def __str__(self):
        return self.name


class Expense(models.Model):
    """
    Money a participant spent on behalf of the event.

    Split into ExpenseShare rows at submission time. Rejected expenses
    keep their shares but are ignored by balance calculation.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey('events.Event', on_delete=models.CASCADE, related_name='expenses')
    submitted_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='submitted_expenses'
    )
    category = models.ForeignKey(
        ExpenseCategory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses'
    )

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    currency = models.CharField(max_length=3)
    description = models.CharField(max_length=255)
    date = models.DateField()

    status = models.CharField(max_length=20, choices=ExpenseStatus.choices, default=ExpenseStatus.PENDING)
    split_type = models.CharField(max_length=20, choices=SplitType.choices, default=SplitType.EQUAL)

    # Review
    reviewed_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_expenses'
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)

    # Optional details
    location = models.CharField(max_length=200, blank=True)
    vendor = models.CharField(max_length=100, blank=True)
    notes = models.CharField(max_length=500, blank=True)

    submitted_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expenses'
        indexes = [
            models.Index(fields=['event', 'status'], name='expenses_event_status_idx'),
            models.Index(fields=['submitted_by', 'submitted_at'], name='expenses_submitter_idx'),
        ]
        ordering = ['-submitted_at']

    def __str__(self):
        return f"{self.description} ({self.amount} {self.currency})"

    @property
    def is_pending(self):
        return self.status == ExpenseStatus.PENDING


class ExpenseShare(models.Model):
    """One participant's portion of an expense."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    expense = models.ForeignKey(Expense, on_delete=models.CASCADE, related_name='shares')
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='expense_shares')
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00')), MaxValueValidator(Decimal('100.00'))]
    )

    class Meta:
        db_table = 'expense_shares'
        unique_together = [['expense', 'user']]
        indexes = [
            models.Index(fields=['user', 'expense'], name='expense_shares_user_idx'),
        ]

    def __str__(self):
        return f"{self.user.get_display_name()}: {self.amount} ({self.percentage}%)"
