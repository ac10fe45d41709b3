"""
WSGI entrypoint. In production, point your server (gunicorn/uwsgi) here:

    gunicorn 'wsgi:app' --bind 0.0.0.0:3000 --timeout 600
"""

from forensic_app import create_app

app = create_app()
