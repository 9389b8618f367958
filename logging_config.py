"""
Logging configuration for OneReserve Comercial.

Root logger goes to the console, plus rotating files under ``LOGS_DIR`` outside
of tests. Business events (logins, check-ins, client folder changes) go to the
``audit`` logger through ``audit_logger``.
"""

import logging
import logging.handlers
import os
from datetime import datetime, timezone

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

NOISY_LOGGERS = ('werkzeug', 'sqlalchemy.engine', 'urllib3')


def _file_handler(path, level):
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(app):
    """
    Configure logging for the Flask application.

    ``LOG_LEVEL`` comes from the app config, then the environment.
    """
    log_level = (app.config.get('LOG_LEVEL') or os.environ.get('LOG_LEVEL', 'INFO')).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))
    root_logger.handlers = []

    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if app.debug else logging.INFO)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console)

    if not app.config.get('TESTING', False):
        logs_dir = app.config.get('LOGS_DIR') or os.path.join(os.path.dirname(__file__), 'logs')
        os.makedirs(logs_dir, exist_ok=True)
        root_logger.addHandler(_file_handler(os.path.join(logs_dir, 'comercial.log'), logging.INFO))
        root_logger.addHandler(_file_handler(os.path.join(logs_dir, 'errors.log'), logging.ERROR))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    app.logger.info(f"Logging configured: level={log_level}")


class AuditLogger:
    """
    Audit trail of the sales team's actions.

    Every entry is a single ``AUDIT:`` line with the action, the acting user
    and the records involved.
    """

    def __init__(self):
        self.logger = logging.getLogger('audit')
        self.logger.setLevel(logging.INFO)

    def log_action(self, action: str, user_id: str = None, **kwargs):
        context = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'action': action,
            'user_id': user_id,
            **kwargs
        }
        self.logger.info(f"AUDIT: {context}")

    def log_login(self, user_id: str, username: str, success: bool, ip_address: str = None):
        self.log_action('login_attempt', user_id=user_id, username=username,
                        success=success, ip_address=ip_address)

    def log_visit_created(self, visit, user_id: str):
        """Visit stored directly through POST /api/visits."""
        self.log_action('visit_created', user_id=user_id, visit_id=visit.id,
                        client_id=visit.client_id, status=visit.status,
                        expenses=len(visit.expenses), documents=len(visit.documents))

    def log_checkin(self, visit, client, user_id: str):
        """Visit recorded from the visit form, with the client it landed on."""
        self.log_action('visit_checkin', user_id=user_id, visit_id=visit.id,
                        client_id=client.id, client_name=client.name, status=visit.status,
                        duration_minutes=visit.duration_minutes)

    def log_client_change(self, client, user_id: str, change: str, fields=None):
        self.log_action(f'client_{change}', user_id=user_id, client_id=client.id,
                        client_name=client.name, fields=fields)

    def log_attachment_added(self, kind: str, record_id: str, client_id: str, user_id: str, **details):
        """Contact, expense or document added to a client folder."""
        self.log_action(f'{kind}_added', user_id=user_id, record_id=record_id,
                        client_id=client_id, **details)

    def log_user_created(self, user, created_by: str):
        self.log_action('user_created', user_id=created_by, new_user_id=user.id,
                        username=user.username, role=user.role)


audit_logger = AuditLogger()
