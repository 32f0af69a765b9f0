# ==========================================
# apps/settlements/models.py
# ==========================================

from decimal import Decimal
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
import uuid


class SettlementStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


class SettlementMethod(models.TextChoices):
    CASH = 'cash', 'Cash'
    BANK_TRANSFER = 'bank_transfer', 'Bank transfer'
    CARD = 'card', 'Card'
    PAYPAL = 'paypal', 'PayPal'
    VENMO = 'venmo', 'Venmo'
    OTHER = 'other', 'Other'


class Settlement(models.Model):
    """
    Payment instruction from a debtor to a creditor within one event.

    Created in bulk by settlement generation (replacing earlier pending
    rows) or one at a time as a custom settlement. Moves from pending to
    completed exactly once.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey('events.Event', on_delete=models.CASCADE, related_name='settlements')
    from_user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='settlements_to_pay'
    )
    to_user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='settlements_to_receive'
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    currency = models.CharField(max_length=3)
    status = models.CharField(
        max_length=20,
        choices=SettlementStatus.choices,
        default=SettlementStatus.PENDING,
        db_index=True
    )
    method = models.CharField(max_length=50, choices=SettlementMethod.choices, blank=True)

    # Tracking
    payment_reference = models.CharField(max_length=100, blank=True)
    settled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'settlements'
        indexes = [
            models.Index(fields=['event', 'status'], name='settlements_event_status_idx'),
            models.Index(fields=['from_user', 'to_user'], name='settlements_parties_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.from_user} -> {self.to_user}: {self.amount} {self.currency} ({self.status})"

    @property
    def is_pending(self):
        return self.status == SettlementStatus.PENDING

    def involves(self, user):
        return user.id in (self.from_user_id, self.to_user_id)

    def mark_completed(self, *, payment_reference, method=''):
        """Transition pending -> completed. Caller holds the row lock."""
        self.status = SettlementStatus.COMPLETED
        self.payment_reference = payment_reference
        if method:
            self.method = method
        self.settled_at = timezone.now()
        self.save(update_fields=['status', 'payment_reference', 'method', 'settled_at'])
