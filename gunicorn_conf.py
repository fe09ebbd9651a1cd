import os

wsgi_app = "shieldmate.main:app"
proc_name = "shieldmate-api"

bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("WEB_CONCURRENCY", 2))
worker_class = "uvicorn.workers.UvicornWorker"
timeout = int(os.getenv("GUNICORN_TIMEOUT", 30))
graceful_timeout = int(os.getenv("GUNICORN_GRACEFUL_TIMEOUT", 30))
keepalive = int(os.getenv("GUNICORN_KEEPALIVE", 5))
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# Intercepted into loguru by setup_logging()
accesslog = "-"
errorlog = "-"


def post_worker_init(worker):
    from shieldmate.utils.logger import setup_logging

    setup_logging()
    worker.log.info(f"Worker {worker.pid} ready")
