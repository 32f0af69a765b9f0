from django.contrib import admin
from apps.settlements.models import Settlement


@admin.register(Settlement)
class SettlementAdmin(admin.ModelAdmin):
    """Admin interface for Settlements."""

    list_display = [
        'event',
        'from_user',
        'to_user',
        'amount',
        'currency',
        'status',
        'settled_at',
        'created_at'
    ]
    list_filter = ['status', 'method', 'currency', 'created_at']
    search_fields = ['event__name', 'from_user__email', 'to_user__email', 'payment_reference']
    readonly_fields = ['created_at', 'settled_at']
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('event', 'from_user', 'to_user')
