# gunicorn.conf.py
import multiprocessing, os

wsgi_app = "gatewheel.main:create_app()"
bind = f"0.0.0.0:{os.getenv('PORT','5000')}"
workers = max(2, min(4, multiprocessing.cpu_count()))  # lookups are O(1); a few sync workers suffice
threads = 1
worker_class = "sync"
timeout = 30
graceful_timeout = 15
keepalive = 2
accesslog = "-"   # stdout
errorlog = "-"    # stderr
loglevel = os.getenv("LOGLEVEL", "info")

# add request id if present
access_log_format = (
    '%(h)s - "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" '
    'req_id:%({X-Request-ID}i)s rt:%(L)s'
)
