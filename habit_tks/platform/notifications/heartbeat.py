"""Background liveness sweep for the notification hub."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from habit_tks.platform.notifications.hub import NotificationHub

logger = logging.getLogger(__name__)


class HeartbeatWorker:
    """Runs ``hub.sweep()`` every ``interval`` seconds on a daemon thread."""

    def __init__(self, hub: NotificationHub, interval: float = 30.0) -> None:
        self.hub = hub
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="habit-tks-heartbeat", daemon=True)
        self._thread.start()
        logger.info("Starting notification heartbeat (interval=%ss)", self.interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Notification heartbeat stopped")

    def run_once(self) -> int:
        try:
            terminated = self.hub.sweep()
        except Exception:
            logger.exception("Unexpected error during heartbeat sweep")
            return 0
        if terminated:
            logger.info("Heartbeat closed %s inactive client(s)", len(terminated))
        return len(terminated)

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.run_once()
