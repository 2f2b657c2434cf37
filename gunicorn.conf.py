"""Gunicorn configuration for the TaskHub ASGI app.

Start with: gunicorn -c gunicorn.conf.py taskhub.main:app
"""

import os

# Ensure ASGI worker is used even when started as `gunicorn taskhub.main:app`.
worker_class = "uvicorn.workers.UvicornWorker"

bind = f"0.0.0.0:{os.getenv('PORT', '8000')}"

workers = int(os.getenv("WEB_CONCURRENCY", "2"))
timeout = int(os.getenv("GUNICORN_TIMEOUT", "60"))
graceful_timeout = int(os.getenv("GUNICORN_GRACEFUL_TIMEOUT", "30"))
keepalive = 5

# Application logs are JSON on stdout; keep gunicorn's own output terse.
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")
accesslog = None
errorlog = "-"
