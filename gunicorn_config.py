"""
Gunicorn configuration for the Thrift Studio API.

Try-on polling runs in Celery workers, so web workers only serve short
requests; the timeout no longer has to cover provider processing time.
"""

import multiprocessing
import os

# Server socket
bind = os.getenv("GUNICORN_BIND", "127.0.0.1:8000")  # Nginx reverse proxy in front
backlog = 2048

# Worker processes: (2 x CPU cores) + 1
workers = int(os.getenv("GUNICORN_WORKERS", multiprocessing.cpu_count() * 2 + 1))
worker_class = "sync"

# Covers inline garment uploads to storage, not try-on polling
timeout = int(os.getenv("GUNICORN_TIMEOUT", "60"))
keepalive = 5

# Logging to stdout/stderr (captured by systemd/journald)
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")

# %(D)s = request duration in microseconds
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

proc_name = "thrift-studio"

# Server mechanics (systemd manages the process)
daemon = False
pidfile = None
umask = 0o007

preload_app = False
graceful_timeout = 30

# Recycle workers periodically
max_requests = 1000
max_requests_jitter = 50
