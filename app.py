"""
OneReserve Comercial - REST backend for the field sales app.
"""
import logging
import os

from flask import Flask, abort, jsonify, send_from_directory
from werkzeug.exceptions import HTTPException

from config import Config
from extensions import db, init_extensions

logger = logging.getLogger(__name__)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize all extensions
    init_extensions(app)

    # Setup logging
    from logging_config import setup_logging
    setup_logging(app)

    # Register API blueprints
    from routes import register_blueprints
    register_blueprints(app)

    register_error_handlers(app)
    register_frontend(app)

    # Register CLI commands
    from cli import register_commands
    register_commands(app)

    return app


def register_error_handlers(app):
    """JSON error bodies for the whole application."""

    @app.errorhandler(HTTPException)
    def http_error(error):
        return jsonify({'error': error.description}), error.code

    @app.errorhandler(413)
    def too_large(error):
        return jsonify({'error': 'El archivo es demasiado grande'}), 413

    @app.errorhandler(Exception)
    def internal_error(error):
        db.session.rollback()
        logger.exception(f"Unhandled error: {error}")
        return jsonify({'error': 'Error interno del servidor'}), 500


def register_frontend(app):
    """Serve the compiled single page app, falling back to index.html for client-side routes."""

    @app.route('/health')
    def health():
        from routes.api import health_check
        return health_check()

    @app.route('/', defaults={'path': ''})
    @app.route('/<path:path>')
    def frontend(path):
        if path.startswith('api/'):
            abort(404)

        dist = app.config.get('FRONTEND_DIST')
        if not dist or not os.path.isdir(dist):
            abort(404)

        if path and os.path.isfile(os.path.join(dist, path)):
            return send_from_directory(dist, path)
        if os.path.isfile(os.path.join(dist, 'index.html')):
            return send_from_directory(dist, 'index.html')
        abort(404)


if __name__ == '__main__':
    app = create_app()
    app.run(debug=False)
