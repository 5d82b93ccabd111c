"""
Gunicorn configuration for Inkwell production deployment.

Usage:
    gunicorn inkwell.main:app -c gunicorn.conf.py
"""

import multiprocessing
import os

# Bind to all interfaces; PORT overrides the default 8000
bind = f"0.0.0.0:{os.getenv('PORT', '8000')}"

# Worker processes: CPU cores * 2 + 1, or WEB_CONCURRENCY when set
workers = int(os.getenv("WEB_CONCURRENCY", multiprocessing.cpu_count() * 2 + 1))

# Use Uvicorn's ASGI worker for FastAPI
worker_class = "uvicorn.workers.UvicornWorker"

# Request timeout (seconds); photo uploads stream to object storage inside the request
timeout = 60

# Each worker runs its own lifespan; allow the background pool to drain
graceful_timeout = int(float(os.getenv("SHUTDOWN_TIMEOUT", "10"))) + 5

# Keep-alive connections (seconds)
keepalive = 5

# Logging
accesslog = "-"  # stdout
errorlog = "-"   # stderr
loglevel = "info"
