"""
Flask Extensions
Centralizes all Flask extension instances for the application.
"""

from flask import jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_caching import Cache

# Database
db = SQLAlchemy()

# Authentication (bearer tokens resolved in routes.auth)
login_manager = LoginManager()


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'error': 'Token requerido'}), 401


# Database migrations
migrate = Migrate()

# Caching
cache = Cache()


def init_extensions(app):
    """
    Initialize all Flask extensions with the application instance.

    Args:
        app: Flask application instance
    """
    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    cache.init_app(app)

    return app
