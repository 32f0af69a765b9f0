# ==========================================
# apps/events/admin.py
# ==========================================

from django.contrib import admin
from apps.events.models import Event, Participation, Contribution


class ParticipationInline(admin.TabularInline):
    """Inline admin for event participations."""
    model = Participation
    extra = 0
    fields = ['user', 'role', 'joined_at']
    readonly_fields = ['joined_at']


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    """Admin interface for Events."""

    list_display = [
        'name',
        'code',
        'created_by',
        'currency',
        'status',
        'participant_count',
        'created_at'
    ]
    list_filter = ['status', 'currency', 'require_approval', 'created_at']
    search_fields = ['name', 'description', 'created_by__email', 'code']
    readonly_fields = ['code', 'created_at', 'updated_at']
    inlines = [ParticipationInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'description', 'created_by', 'code', 'status', 'end_date')
        }),
        ('Expense Settings', {
            'fields': ('currency', 'require_approval', 'auto_approval_limit')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def participant_count(self, obj):
        """Show number of participants."""
        return obj.participations.count()
    participant_count.short_description = 'Participants'


@admin.register(Participation)
class ParticipationAdmin(admin.ModelAdmin):
    """Admin interface for Participations."""

    list_display = ['user', 'event', 'role', 'joined_at']
    list_filter = ['role', 'joined_at']
    search_fields = ['user__email', 'event__name']
    readonly_fields = ['joined_at']
    ordering = ['-joined_at']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('user', 'event')


@admin.register(Contribution)
class ContributionAdmin(admin.ModelAdmin):
    """Admin interface for Contributions."""

    list_display = ['user', 'event', 'amount', 'currency', 'timestamp']
    list_filter = ['currency', 'timestamp']
    search_fields = ['user__email', 'event__name', 'notes']
    readonly_fields = ['timestamp']
    date_hierarchy = 'timestamp'

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('user', 'event')
