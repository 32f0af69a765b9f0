# ==========================================
# apps/events/models.py
# ==========================================

from decimal import Decimal
from django.core.validators import MinValueValidator
from django.db import models
import uuid


class EventStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    COMPLETED = 'completed', 'Completed'
    ARCHIVED = 'archived', 'Archived'


class ParticipantRole(models.TextChoices):
    OWNER = 'owner', 'Owner'
    ADMIN = 'admin', 'Admin'
    MODERATOR = 'moderator', 'Moderator'
    PARTICIPANT = 'participant', 'Participant'
    VIEWER = 'viewer', 'Viewer'


ADMIN_ROLES = (ParticipantRole.OWNER, ParticipantRole.ADMIN)
APPROVER_ROLES = (ParticipantRole.OWNER, ParticipantRole.ADMIN, ParticipantRole.MODERATOR)


class Event(models.Model):
    """Shared expense context (a trip, a flat, a dinner club)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True)
    code = models.CharField(max_length=8, unique=True, db_index=True, editable=False)
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='created_events'
    )

    # Settings
    currency = models.CharField(max_length=3, default='USD')
    status = models.CharField(
        max_length=20,
        choices=EventStatus.choices,
        default=EventStatus.ACTIVE
    )
    require_approval = models.BooleanField(default=True)
    auto_approval_limit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    end_date = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'events'
        indexes = [
            models.Index(fields=['created_by', 'created_at'], name='events_creator_created_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.code})"

    def has_participant(self, user):
        return self.participations.filter(user=user).exists()

    def get_user_role(self, user):
        try:
            return self.participations.get(user=user).role
        except Participation.DoesNotExist:
            return None

    def is_admin(self, user):
        return self.get_user_role(user) in ADMIN_ROLES

    def can_approve_expenses(self, user):
        return self.get_user_role(user) in APPROVER_ROLES

    def qualifies_for_auto_approval(self, amount):
        """True when an expense of ``amount`` skips the review queue."""
        if not self.require_approval:
            return True
        limit = self.auto_approval_limit or Decimal('0')
        return limit > 0 and amount <= limit


class Participation(models.Model):
    """User membership in an event with role."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='participations')
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name='participations')
    role = models.CharField(max_length=20, choices=ParticipantRole.choices, default=ParticipantRole.PARTICIPANT)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'participations'
        unique_together = [['user', 'event']]
        indexes = [
            models.Index(fields=['event', 'role'], name='participations_event_role_idx'),
        ]
        ordering = ['joined_at']

    def __str__(self):
        return f"{self.user.get_display_name()} in {self.event.name} ({self.role})"

    def is_admin(self):
        return self.role in ADMIN_ROLES

    def can_approve_expenses(self):
        return self.role in APPROVER_ROLES


class Contribution(models.Model):
    """Money a participant puts into the shared pool. Append-only."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name='contributions')
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='contributions')
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    currency = models.CharField(max_length=3)
    notes = models.CharField(max_length=500, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'contributions'
        indexes = [
            models.Index(fields=['event', 'user'], name='contributions_event_user_idx'),
        ]
        ordering = ['-timestamp']

    def __str__(self):
        return f"{self.user.get_display_name()} contributed {self.amount} {self.currency}"
