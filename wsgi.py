"""
WSGI entry point for OneReserve Comercial.

This file is used by WSGI servers (like Gunicorn or uWSGI)
to serve the API and the compiled frontend in production.

Usage examples:
    Gunicorn: gunicorn -w 4 -b 0.0.0.0:8000 wsgi:app
    uWSGI: uwsgi --http :8000 --wsgi-file wsgi.py --callable app
"""

from app import create_app
from config import ProductionConfig

app = create_app(ProductionConfig())

# Some hosts expect the variable to be called 'application'
application = app

if __name__ == "__main__":
    app.run()
