"""
In-process registry of observer connections.

A connection is any object with a ``send(message)`` method (a websocket
consumer, a queue adapter, a test double). Connections are keyed by
(event_id, user_id); registering again for the same key replaces the
previous connection.

The registry the receivers broadcast through is owned by the app config
(``apps.get_app_config('realtime').registry``), created once in
``RealtimeConfig.ready()``.
"""

import logging
from threading import RLock
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

logger = logging.getLogger(__name__)

ConnectionKey = Tuple[UUID, UUID]


class ConnectionRegistry:

    def __init__(self):
        self._connections: Dict[ConnectionKey, Any] = {}
        self._lock = RLock()

    def register(self, *, event_id: UUID, user_id: UUID, connection) -> None:
        with self._lock:
            self._connections[(event_id, user_id)] = connection
        logger.debug("Connection registered for user %s in event %s", user_id, event_id)

    def unregister(self, *, event_id: UUID, user_id: UUID, connection=None) -> bool:
        """
        Drop the connection of a user in an event.

        When ``connection`` is given, only that exact connection is
        removed, so a newer registration for the same key survives.
        """
        key = (event_id, user_id)
        with self._lock:
            current = self._connections.get(key)
            if current is None:
                return False
            if connection is not None and current is not connection:
                return False
            del self._connections[key]
        logger.debug("Connection removed for user %s in event %s", user_id, event_id)
        return True

    def connection_count(self, event_id: Optional[UUID] = None) -> int:
        with self._lock:
            if event_id is None:
                return len(self._connections)
            return sum(1 for ev, _ in self._connections if ev == event_id)

    def broadcast(self, *, event_id: UUID, message: Dict[str, Any]) -> int:
        """
        Send ``message`` to every connection of an event.

        Targets are snapshotted under the lock and sent to outside it. A
        connection whose ``send`` raises is unregistered right away.

        Returns:
            Number of connections the message was delivered to
        """
        with self._lock:
            targets = [
                (user_id, connection)
                for (ev, user_id), connection in self._connections.items()
                if ev == event_id
            ]

        delivered = 0
        for user_id, connection in targets:
            if self._deliver(event_id, user_id, connection, message):
                delivered += 1
        return delivered

    def _deliver(self, event_id, user_id, connection, message) -> bool:
        try:
            connection.send(message)
        except Exception as e:
            logger.warning(
                "Dropping connection of user %s in event %s after send failure: %s",
                user_id, event_id, e
            )
            self.unregister(event_id=event_id, user_id=user_id, connection=connection)
            return False
        return True

