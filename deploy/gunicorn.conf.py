"""
Gunicorn configuration for Habit TKS.
The notification hub keeps live sockets in process memory, so the service runs
a single worker process and scales with threads.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

# ===== Server Binding & Backlog =====
bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
backlog = int(os.environ.get("GUNICORN_BACKLOG", "2048"))

# ===== Worker Settings =====
# gthread: each open WebSocket holds one thread for its lifetime
worker_class = os.environ.get("GUNICORN_WORKER_CLASS", "gthread")
workers = int(os.environ.get("GUNICORN_WORKERS", "1"))
threads = int(os.environ.get("GUNICORN_THREADS", "32"))
max_requests = int(os.environ.get("GUNICORN_MAX_REQUESTS", "0"))

# ===== Timeout Settings =====
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "60"))
graceful_timeout = int(os.environ.get("GUNICORN_GRACEFUL_TIMEOUT", "30"))
keepalive = int(os.environ.get("GUNICORN_KEEPALIVE", "5"))

# ===== Logging Configuration =====
accesslog = os.environ.get("GUNICORN_ACCESSLOG", "-")  # stdout
errorlog = os.environ.get("GUNICORN_ERRORLOG", "-")    # stderr
loglevel = os.environ.get("GUNICORN_LOGLEVEL", "info")
capture_output = True

# JSON-structured access log for log aggregation
access_log_format = os.environ.get(
    "GUNICORN_ACCESS_LOG_FORMAT",
    '{"timestamp": "%(t)s", "remote": "%(h)s", "request": "%(r)s", '
    '"status": %(s)s, "bytes": %(b)s, "response_time": %(D)s, "pid": %(p)s}',
)

logconfig_path = Path(os.environ.get("GUNICORN_LOGCONFIG", "/app/deploy/logging.conf"))
if logconfig_path.exists():
    logconfig = str(logconfig_path)

# ===== Server Mechanics =====
daemon = False
pidfile = None
# The heartbeat thread must start inside the worker, not the master.
preload_app = False
forwarded_allow_ips = os.environ.get("GUNICORN_FORWARDED_ALLOW_IPS", "*")

proc_name = os.environ.get("GUNICORN_PROC_NAME", "habit_tks")


# ===== Lifecycle Hooks =====
def on_starting(server):
    """Called just before the master process is initialized."""
    logger = logging.getLogger(__name__)
    logger.info(
        "Gunicorn starting: workers=%s, threads=%s, worker_class=%s, timeout=%ss",
        workers,
        threads,
        worker_class,
        timeout,
    )
    if workers != 1:
        logger.warning("Notification fan-out is per process; run a single worker")


def when_ready(server):
    logger = logging.getLogger(__name__)
    logger.info("Gunicorn ready. Listening on %s", bind)


def worker_exit(server, worker):
    """Close live sockets before the worker goes away."""
    app = getattr(worker, "wsgi", None)
    extensions = getattr(app, "extensions", {}) if app else {}
    heartbeat = extensions.get("notification_heartbeat")
    hub = extensions.get("notification_hub")
    if heartbeat:
        heartbeat.stop(timeout=5)
    if hub:
        hub.shutdown()


def worker_abort(worker):
    logger = logging.getLogger(__name__)
    logger.warning("Worker %s timed out (>%ss), aborting", worker.pid, timeout)
