"""WebSocket transport for the notification hub (flask-sock)."""

from __future__ import annotations

import logging
import threading

from flask import Blueprint, current_app, jsonify
from simple_websocket import ConnectionClosed

from habit_tks.core.users.services import current_user_id
from habit_tks.extensions import sock
from habit_tks.platform.notifications.hub import NotificationHub
from habit_tks.platform.notifications.messages import PING, PushMessage
from habit_tks.platform.notifications.sink import Connection

logger = logging.getLogger(__name__)

notifications_bp = Blueprint("notifications", __name__)


class SocketConnection(Connection):
    """Adapts a simple-websocket server socket to the hub's connection interface."""

    def __init__(self, ws) -> None:
        self._ws = ws
        # Broadcasts arrive from request threads while the socket thread reads.
        self._send_lock = threading.Lock()

    def send(self, text: str) -> None:
        with self._send_lock:
            self._ws.send(text)

    def ping(self) -> None:
        self.send(PushMessage(type=PING).encode())

    def close(self) -> None:
        self._ws.close()


def _hub() -> NotificationHub:
    return current_app.extensions["notification_hub"]


@sock.route("/ws", bp=notifications_bp)
def notifications_socket(ws):
    hub = _hub()
    client_id = hub.register(SocketConnection(ws), current_user_id())
    try:
        while True:
            raw = ws.receive()
            if raw is None:
                continue
            hub.handle_message(client_id, raw)
    except ConnectionClosed:
        logger.debug("Socket closed for client %s", client_id)
    finally:
        hub.unregister(client_id)


@notifications_bp.get("/api/notifications/status")
def notifications_status():
    hub = _hub()
    return jsonify(
        {
            "ok": True,
            "connectedClients": hub.connected_clients_count(),
            "connectedUsers": hub.connected_users_count(),
        }
    )
