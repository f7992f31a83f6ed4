"""In-process registry of live client connections and per-user fan-out.

Delivery is at-most-once and best-effort: nothing is buffered for offline
clients, nothing is replayed on reconnect, and a connection whose send fails
is dropped from the registry without affecting its siblings.
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from habit_tks.platform.notifications.messages import NOTIFICATION, PONG, PushMessage
from habit_tks.platform.notifications.sink import Connection, NotificationSink

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "Connected to Habit TKS real-time updates"
SHUTDOWN_MESSAGE = "Server is shutting down"


@dataclass
class NotificationClient:
    id: str
    user_id: int
    connection: Connection
    is_alive: bool = True
    subscriptions: List[str] = field(default_factory=list)
    connected_at: datetime = field(default_factory=datetime.utcnow)


class NotificationHub(NotificationSink):
    def __init__(self) -> None:
        self._clients: Dict[str, NotificationClient] = {}
        self._lock = threading.Lock()

    # Registry ------------------------------------------------------------

    def register(self, connection: Connection, user_id: int) -> str:
        client = NotificationClient(id=f"client_{uuid.uuid4().hex[:12]}", user_id=user_id, connection=connection)
        with self._lock:
            self._clients[client.id] = client
        logger.info("Client connected: %s (user %s)", client.id, user_id)
        self.send_to_client(client.id, PushMessage(type=NOTIFICATION, data={"message": WELCOME_MESSAGE}))
        return client.id

    def unregister(self, client_id: str) -> bool:
        with self._lock:
            client = self._clients.pop(client_id, None)
        if client:
            logger.info("Client disconnected: %s", client_id)
        return client is not None

    def get_client(self, client_id: str) -> Optional[NotificationClient]:
        with self._lock:
            return self._clients.get(client_id)

    def clients_for_user(self, user_id: int) -> List[NotificationClient]:
        with self._lock:
            return [c for c in self._clients.values() if c.user_id == user_id]

    def connected_clients_count(self) -> int:
        with self._lock:
            return len(self._clients)

    def connected_users_count(self) -> int:
        with self._lock:
            return len({c.user_id for c in self._clients.values()})

    # Delivery ------------------------------------------------------------

    def send_to_client(self, client_id: str, message: PushMessage) -> bool:
        client = self.get_client(client_id)
        if client is None:
            return False
        try:
            client.connection.send(message.encode())
        except Exception:
            logger.exception("Failed to send %s to client %s; dropping it", message.type, client_id)
            self.unregister(client_id)
            return False
        return True

    def broadcast_to_user(self, user_id: int, event_type: str, payload: Dict[str, Any]) -> int:
        message = PushMessage(type=event_type, data=payload)
        delivered = 0
        for client in self.clients_for_user(user_id):
            if self.send_to_client(client.id, message):
                delivered += 1
        logger.debug("Broadcast %s to user %s: %s connection(s)", event_type, user_id, delivered)
        return delivered

    def broadcast_to_all(self, event_type: str, payload: Dict[str, Any]) -> int:
        message = PushMessage(type=event_type, data=payload)
        with self._lock:
            client_ids = list(self._clients)
        return sum(1 for client_id in client_ids if self.send_to_client(client_id, message))

    # Inbound -------------------------------------------------------------

    def mark_alive(self, client_id: str) -> None:
        client = self.get_client(client_id)
        if client:
            client.is_alive = True

    def handle_message(self, client_id: str, raw: str | bytes) -> None:
        """Dispatch one inbound frame. Every frame also counts as a heartbeat answer."""
        client = self.get_client(client_id)
        if client is None:
            return
        self.mark_alive(client_id)
        try:
            message = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Unparseable message from client %s", client_id)
            return
        if not isinstance(message, dict):
            logger.warning("Unexpected message shape from client %s", client_id)
            return

        kind = message.get("type")
        if kind == "ping":
            self.send_to_client(
                client_id,
                PushMessage(type=PONG, data={"timestamp": int(datetime.utcnow().timestamp() * 1000)}),
            )
        elif kind == "subscribe":
            events = message.get("events") or []
            # Recorded only; every event is still delivered.
            client.subscriptions = [str(e) for e in events] if isinstance(events, list) else []
            logger.info("Client %s subscribed to: %s", client_id, client.subscriptions)
            self.send_to_client(
                client_id,
                PushMessage(type=NOTIFICATION, data={"message": "Subscribed", "events": client.subscriptions}),
            )
        elif kind == "pong":
            pass
        else:
            logger.info("Unknown message type from client %s: %s", client_id, kind)

    # Liveness ------------------------------------------------------------

    def sweep(self) -> List[str]:
        """Close clients that ignored the previous ping, then ping the rest."""
        with self._lock:
            clients = list(self._clients.values())
        terminated: List[str] = []
        for client in clients:
            if not client.is_alive:
                logger.info("Terminating inactive client: %s", client.id)
                self._close_quietly(client)
                self.unregister(client.id)
                terminated.append(client.id)
                continue
            client.is_alive = False
            try:
                client.connection.ping()
            except Exception:
                logger.exception("Heartbeat ping failed for client %s; dropping it", client.id)
                self.unregister(client.id)
                terminated.append(client.id)
        return terminated

    def shutdown(self, notice: str = SHUTDOWN_MESSAGE) -> None:
        """Tell every client the server is going away, then close them all."""
        if notice:
            self.broadcast_to_all(NOTIFICATION, {"message": notice})
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        for client in clients:
            self._close_quietly(client)
        logger.info("Notification hub shut down (%s client(s) closed)", len(clients))

    @staticmethod
    def _close_quietly(client: NotificationClient) -> None:
        try:
            client.connection.close()
        except Exception:
            logger.warning("Error closing client %s", client.id, exc_info=True)


__all__ = ["NotificationClient", "NotificationHub", "WELCOME_MESSAGE"]
