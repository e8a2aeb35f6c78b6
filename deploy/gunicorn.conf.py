"""Gunicorn configuration for the n8n Workflow Assistant.

Usage:
    gunicorn main:app -c deploy/gunicorn.conf.py

The service is I/O-bound: each generate request waits on one embedding call
and one LLM call (10-90s), so workers spend most of their time idle.
"""

import multiprocessing
import os

# ─── Server socket ──────────────────────────────────────────────

bind = os.getenv("BIND", "0.0.0.0:3001")
backlog = 2048

# ─── Worker processes ───────────────────────────────────────────
#
# One async worker per core; each worker holds its own template snapshot
# when TEMPLATE_RELOAD_POLICY=cached, so POST /api/templates/reload only
# refreshes the worker that served it. Use the "always" policy (or restart)
# for catalog updates in multi-worker deployments.

workers = int(os.getenv("WORKERS", min(multiprocessing.cpu_count(), 4)))
worker_class = "uvicorn.workers.UvicornWorker"

# ─── Timeouts ───────────────────────────────────────────────────
#
# Workflow generation with large reference templates can take up to ~90s.

timeout = 150
graceful_timeout = 30
keepalive = 5

# ─── Worker recycling ──────────────────────────────────────────

max_requests = 2000
max_requests_jitter = 200

# ─── Logging ────────────────────────────────────────────────────

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

proc_name = "n8n-workflow-assistant"


def on_starting(server):
    """Called just before the master process is initialized."""
    server.log.info(
        "Starting n8n Workflow Assistant — workers=%d, timeout=%ds, bind=%s",
        workers,
        timeout,
        bind,
    )


def worker_exit(server, worker):
    server.log.info("Worker exit (pid: %s)", worker.pid)
