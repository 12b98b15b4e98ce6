"""
Gunicorn configuration for production deployment.

    gunicorn app.main:app -c gunicorn.conf.py
"""
import os

# Server socket
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
backlog = 2048

# Worker processes
# Each worker runs its own scheduler; enable SCHEDULER_ENABLED on one instance only
workers = int(os.getenv("GUNICORN_WORKERS", 2))
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 100

# Worker lifecycle
max_requests = 1000
max_requests_jitter = 100

# Timeouts (resume uploads can be slow on mobile networks)
timeout = int(os.getenv("GUNICORN_TIMEOUT", 60))
keepalive = 5
graceful_timeout = 30

proc_name = "faculty_jobs_api"
daemon = False

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()


def when_ready(server):
    """Called just after the server is started."""
    server.log.info(f"Faculty jobs API ready with {workers} workers on {bind}")


def post_fork(server, worker):
    server.log.info(f"Worker spawned (pid: {worker.pid})")


def worker_abort(worker):
    """Called when a worker times out."""
    worker.log.warning(f"Worker {worker.pid} aborted after exceeding the {timeout}s timeout")
