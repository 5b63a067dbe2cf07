# Entry point: the application factory
wsgi_app = "vending:create_app()"

# Bind & workers
bind = "0.0.0.0:8000"
workers = 2  # override with env GUNICORN_WORKERS; >1 needs REDIS_URL for shared sessions
threads = 1
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by Docker)
accesslog = "-"
errorlog = "-"
loglevel = "info"  # override with env LOG_LEVEL

# Trust proxy headers
forwarded_allow_ips = "*"
proxy_protocol = False
