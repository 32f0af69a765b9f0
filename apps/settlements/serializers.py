from rest_framework import serializers

from apps.events.serializers import UserMinimalSerializer
from .models import Settlement, SettlementMethod


class SettlementSerializer(serializers.ModelSerializer):

    from_user = UserMinimalSerializer(read_only=True)
    to_user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Settlement
        fields = [
            'id',
            'event',
            'from_user',
            'to_user',
            'amount',
            'currency',
            'status',
            'method',
            'payment_reference',
            'settled_at',
            'created_at',
        ]
        read_only_fields = fields


class UserBalanceSerializer(serializers.Serializer):
    """Read-only view of a computed UserBalance."""

    user_id = serializers.UUIDField()
    display_name = serializers.CharField()
    contributed = serializers.DecimalField(max_digits=12, decimal_places=2)
    spent = serializers.DecimalField(max_digits=12, decimal_places=2)
    net_balance = serializers.DecimalField(max_digits=12, decimal_places=2)
    owes_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    owed_amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class SettlementSummarySerializer(serializers.Serializer):

    total_owed = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_owes = serializers.DecimalField(max_digits=12, decimal_places=2)
    users_in_debt = serializers.IntegerField()
    users_in_credit = serializers.IntegerField()
    pending_settlements = serializers.IntegerField()
    completed_settlements = serializers.IntegerField()
    total_pending_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    balances = UserBalanceSerializer(many=True)
    settlements = SettlementSerializer(many=True)


class GeneratedSettlementsSerializer(serializers.Serializer):
    """Result of regenerating the settlements of an event."""

    settlements = SettlementSerializer(many=True)
    count = serializers.IntegerField()


class SettlementCreateSerializer(serializers.Serializer):
    """Input serializer for a custom settlement paid by the current user."""

    event = serializers.UUIDField()
    to_user_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField(max_length=3, min_length=3, required=False)
    method = serializers.ChoiceField(choices=SettlementMethod.choices, required=False, allow_blank=True, default='')


class CompleteSettlementSerializer(serializers.Serializer):

    payment_reference = serializers.CharField(max_length=100)
    method = serializers.ChoiceField(choices=SettlementMethod.choices, required=False, allow_blank=True, default='')


class SettlementListQuerySerializer(serializers.Serializer):
    """Query parameters of the settlement list."""

    event = serializers.UUIDField()
    mine = serializers.BooleanField(required=False, default=False)
