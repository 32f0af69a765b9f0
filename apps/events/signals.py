"""
Ledger notification signals for the events app.

Receivers get ``event_id`` and ``user_id`` plus the affected row.
"""

import logging

from django.db import transaction
from django.dispatch import Signal

logger = logging.getLogger(__name__)

contribution_added = Signal()


def send_after_commit(signal, *, sender, **kwargs):
    """
    Dispatch ``signal`` once the surrounding transaction commits.

    Receivers run through ``send_robust``; their failures are logged and
    never reach the operation that triggered them.
    """
    def _send():
        for receiver, response in signal.send_robust(sender=sender, **kwargs):
            if isinstance(response, Exception):
                logger.error(
                    "Signal receiver %r failed for event %s: %s",
                    receiver, kwargs.get('event_id'), response,
                    exc_info=(type(response), response, response.__traceback__)
                )

    transaction.on_commit(_send)
