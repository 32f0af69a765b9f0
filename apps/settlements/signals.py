"""
Settlement notification signals.

``settlements_generated`` carries ``event_id`` and the new ``settlements``
list; the single-settlement signals carry ``event_id``, ``user_id`` (the
payer) and ``settlement``.
"""

from django.dispatch import Signal

settlements_generated = Signal()
settlement_created = Signal()
settlement_completed = Signal()
