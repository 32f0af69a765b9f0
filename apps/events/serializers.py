from django.conf import settings
from rest_framework import serializers

from apps.accounts.models import User
from .models import Event, EventStatus, Participation, Contribution


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal user info for nested serialization."""

    display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name']
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_display_name()


class EventSerializer(serializers.ModelSerializer):
    """Main serializer for events."""

    created_by = UserMinimalSerializer(read_only=True)
    participant_count = serializers.SerializerMethodField()
    user_role = serializers.SerializerMethodField()

    class Meta:
        model = Event
        fields = [
            'id',
            'name',
            'description',
            'code',
            'currency',
            'status',
            'require_approval',
            'auto_approval_limit',
            'end_date',
            'created_by',
            'participant_count',
            'user_role',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_participant_count(self, obj):
        return obj.participations.count()

    def get_user_role(self, obj):
        """Get current user's role in the event."""
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            return obj.get_user_role(request.user)
        return None


class EventListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    created_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Event
        fields = ['id', 'name', 'code', 'currency', 'status', 'created_by', 'created_at']
        read_only_fields = fields


class EventCreateSerializer(serializers.Serializer):
    """Input serializer for creating events."""

    name = serializers.CharField(max_length=100)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')
    currency = serializers.CharField(max_length=3, required=False)
    require_approval = serializers.BooleanField(required=False, default=True)
    auto_approval_limit = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
        required=False,
    )

    def validate_currency(self, value):
        code = value.upper()
        if code not in {c.upper() for c in settings.SUPPORTED_CURRENCIES}:
            raise serializers.ValidationError(f"Unsupported currency code: {value}")
        return code


class EventUpdateSerializer(serializers.Serializer):
    """Input serializer for event settings; every field is optional."""

    name = serializers.CharField(max_length=100, required=False)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)
    require_approval = serializers.BooleanField(required=False)
    auto_approval_limit = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
        required=False,
    )
    status = serializers.ChoiceField(choices=EventStatus.choices, required=False)
    end_date = serializers.DateTimeField(required=False)


class JoinEventSerializer(serializers.Serializer):
    """Serializer for joining an event with its code."""

    code = serializers.CharField(max_length=8, min_length=8)


class ParticipantSerializer(serializers.ModelSerializer):
    """Participant with role and join time."""

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Participation
        fields = ['id', 'user', 'role', 'joined_at']
        read_only_fields = fields


class ContributionSerializer(serializers.ModelSerializer):

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Contribution
        fields = ['id', 'event', 'user', 'amount', 'currency', 'notes', 'timestamp']
        read_only_fields = fields


class ContributionCreateSerializer(serializers.Serializer):
    """Input serializer for adding a contribution."""

    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField(max_length=3, required=False)
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')


class ActivitySerializer(serializers.Serializer):
    """One entry of an event's recent activity feed."""

    type = serializers.CharField()
    id = serializers.UUIDField()
    user = UserMinimalSerializer()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    description = serializers.CharField()
    status = serializers.CharField()
    timestamp = serializers.DateTimeField()


class EventSummarySerializer(serializers.Serializer):

    event = EventSerializer()
    participant_count = serializers.IntegerField()
    pending_expenses = serializers.IntegerField()
    total_contributions = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_expenses = serializers.DecimalField(max_digits=12, decimal_places=2)
    recent_activity = ActivitySerializer(many=True)
