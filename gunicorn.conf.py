import os

# Quiz state lives in process memory, so a single worker serves the learner
bind = "0.0.0.0:" + os.getenv("PORT", "5000")
wsgi_app = "app:app"
workers = 1
threads = int(os.getenv("GUNICORN_THREADS", "1"))
timeout = 90
graceful_timeout = 30
keepalive = 5
accesslog = "-"
errorlog = "-"
