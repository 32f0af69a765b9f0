from rest_framework import serializers

from apps.events.serializers import UserMinimalSerializer
from .models import Expense, ExpenseCategory, ExpenseShare, ExpenseStatus, SplitType


class ExpenseCategorySerializer(serializers.ModelSerializer):

    class Meta:
        model = ExpenseCategory
        fields = ['id', 'name', 'icon']
        read_only_fields = fields


class ExpenseShareSerializer(serializers.ModelSerializer):
    """One participant's portion of an expense."""

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = ExpenseShare
        fields = ['id', 'user', 'amount', 'percentage']
        read_only_fields = fields


class ExpenseSerializer(serializers.ModelSerializer):
    """Full expense with shares."""

    submitted_by = UserMinimalSerializer(read_only=True)
    reviewed_by = UserMinimalSerializer(read_only=True)
    category = ExpenseCategorySerializer(read_only=True)
    shares = ExpenseShareSerializer(many=True, read_only=True)

    class Meta:
        model = Expense
        fields = [
            'id',
            'event',
            'submitted_by',
            'category',
            'amount',
            'currency',
            'description',
            'date',
            'status',
            'split_type',
            'reviewed_by',
            'reviewed_at',
            'rejection_reason',
            'location',
            'vendor',
            'notes',
            'shares',
            'submitted_at',
            'updated_at',
        ]
        read_only_fields = fields


class SplitParticipantInputSerializer(serializers.Serializer):
    """
    Participant entry of an expense submission.

    Values stay raw strings; the splitter parses and validates them.
    """

    user_id = serializers.UUIDField()
    amount = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    percentage = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    weight = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class ExpenseCreateSerializer(serializers.Serializer):
    """Input serializer for submitting an expense."""

    event = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField(max_length=3, required=False)
    description = serializers.CharField(max_length=255)
    date = serializers.DateField()
    category_id = serializers.UUIDField(required=False, allow_null=True)
    split_type = serializers.ChoiceField(choices=SplitType.choices, default=SplitType.EQUAL)
    participants = SplitParticipantInputSerializer(many=True, required=False)
    location = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    vendor = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')


class ExpenseUpdateSerializer(serializers.Serializer):
    """Input serializer for editing a pending expense; every field is optional."""

    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    description = serializers.CharField(max_length=255, required=False)
    date = serializers.DateField(required=False)
    category_id = serializers.UUIDField(required=False)
    split_type = serializers.ChoiceField(choices=SplitType.choices, required=False)
    participants = SplitParticipantInputSerializer(many=True, required=False)
    location = serializers.CharField(max_length=200, required=False, allow_blank=True)
    vendor = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True)


class ReviewExpenseSerializer(serializers.Serializer):
    """Serializer for approving or rejecting an expense."""

    action = serializers.ChoiceField(choices=['approve', 'reject'])
    rejection_reason = serializers.CharField(required=False, allow_blank=True, default='')


class ExpenseListQuerySerializer(serializers.Serializer):
    """Query parameters of the expense list."""

    event = serializers.UUIDField()
    status = serializers.ChoiceField(choices=ExpenseStatus.choices, required=False)
    category = serializers.UUIDField(required=False)
    submitted_by = serializers.UUIDField(required=False)
