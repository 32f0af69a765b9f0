"""
Ledger notification signals for the expenses app.

Receivers get ``event_id`` and ``user_id`` plus the affected expense.
"""

from django.dispatch import Signal

expense_submitted = Signal()
expense_reviewed = Signal()
