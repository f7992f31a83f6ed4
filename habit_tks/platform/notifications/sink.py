"""Abstractions between the services that emit events and the push transport."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict


class NotificationSink(ABC):
    """Anything that can deliver a typed event to a user's live clients."""

    @abstractmethod
    def broadcast_to_user(self, user_id: int, event_type: str, payload: Dict[str, Any]) -> int:
        """Deliver best-effort; return how many connections accepted the message."""
        raise NotImplementedError


class NullNotificationSink(NotificationSink):
    """Drops every event, for running the services without a socket server."""

    def broadcast_to_user(self, user_id: int, event_type: str, payload: Dict[str, Any]) -> int:
        return 0


class Connection(ABC):
    """Transport handle for one live client."""

    @abstractmethod
    def send(self, text: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def ping(self) -> None:
        """Ping the client; any inbound frame afterwards counts as the answer."""
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError


__all__ = ["Connection", "NotificationSink", "NullNotificationSink"]
