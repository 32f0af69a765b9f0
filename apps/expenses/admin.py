from django.contrib import admin
from apps.expenses.models import Expense, ExpenseCategory, ExpenseShare


class ExpenseShareInline(admin.TabularInline):
    """Inline admin for expense shares."""
    model = ExpenseShare
    extra = 0
    fields = ['user', 'amount', 'percentage']
    readonly_fields = ['user', 'amount', 'percentage']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(ExpenseCategory)
class ExpenseCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'icon']
    search_fields = ['name']


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    """Admin interface for Expenses."""

    list_display = [
        'description',
        'event',
        'submitted_by',
        'amount',
        'currency',
        'split_type',
        'status',
        'date'
    ]
    list_filter = ['status', 'split_type', 'currency', 'category']
    search_fields = ['description', 'vendor', 'event__name', 'submitted_by__email']
    readonly_fields = ['submitted_at', 'updated_at', 'reviewed_at']
    inlines = [ExpenseShareInline]
    date_hierarchy = 'date'
    ordering = ['-submitted_at']

    fieldsets = (
        ('Expense', {
            'fields': ('event', 'submitted_by', 'category', 'amount', 'currency', 'description', 'date', 'split_type')
        }),
        ('Review', {
            'fields': ('status', 'reviewed_by', 'reviewed_at', 'rejection_reason')
        }),
        ('Details', {
            'fields': ('location', 'vendor', 'notes'),
            'classes': ('collapse',)
        }),
        ('Metadata', {
            'fields': ('submitted_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('event', 'submitted_by', 'category')
