"""Gunicorn config for the Statewatch API (gunicorn statewatch.main:app -c gunicorn.conf.py)."""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# Uvicorn async workers. Each worker holds its own copy of the five datasets
# and fetches them once at startup. Tune via WEB_CONCURRENCY env var.
worker_class = "uvicorn.workers.UvicornWorker"
workers = int(os.environ.get("WEB_CONCURRENCY", "2"))

# Spreadsheet imports are the slowest requests
timeout = 60

graceful_timeout = 30

# Keep-alive must exceed the proxy keep-alive (default 60s)
keepalive = 65

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
