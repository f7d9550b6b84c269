# gunicorn -c gunicorn.conf.py "authserver:create_app()"
import os

# Bind & workers
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
# Threaded workers: concurrent /token calls race on the same code row
threads = int(os.getenv("GUNICORN_THREADS", "4"))
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by Docker)
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
# Keep bearer tokens passed as ?access_token= out of the access log
access_log_format = '%(h)s "%(m)s %(U)s %(H)s" %(s)s %(b)s %(L)s "%({x-request-id}i)s"'

# Trust proxy headers
forwarded_allow_ips = "*"
proxy_protocol = False
