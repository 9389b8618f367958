"""
Routes package - Flask Blueprints for modular route organization.

This package contains all the route blueprints for the application:
- auth: Login and current user
- users: User management (admin)
- clients: Client folder (clients, contacts, expenses, documents)
- visits: Visit history and check-in
- places: Business search and address lookup
- api: Dashboard metrics and health check

Usage:
    from routes import register_blueprints
    register_blueprints(app)
"""

from flask import Flask


def register_blueprints(app: Flask) -> None:
    """Register all blueprints with the Flask application."""
    from routes.auth import auth_bp
    from routes.users import users_bp
    from routes.clients import clients_bp
    from routes.visits import visits_bp
    from routes.places import places_bp
    from routes.api import api_bp

    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(users_bp, url_prefix='/api')
    app.register_blueprint(clients_bp, url_prefix='/api')
    app.register_blueprint(visits_bp, url_prefix='/api')
    app.register_blueprint(places_bp, url_prefix='/api')
    app.register_blueprint(api_bp, url_prefix='/api')
