"""
Authentication routes - JSON login for the mobile app.
Uses JWT bearer tokens resolved by Flask-Login on every request.
"""

import logging
from datetime import datetime, timedelta, timezone

import jwt
from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user

from extensions import db, login_manager
from forms import LoginForm, form_from_json, form_errors
from logging_config import audit_logger
from models import User, utcnow
from utils.serializers import serialize_user

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


# --- JWT helpers ---

def create_token(user_id):
    """Create a JWT token for a user."""
    now = datetime.now(timezone.utc)
    payload = {
        'user_id': user_id,
        'exp': now + timedelta(
            hours=current_app.config.get('JWT_EXPIRATION_HOURS', 72)
        ),
        'iat': now,
    }
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET_KEY'],
        algorithm='HS256'
    )


def decode_token(token):
    """
    Decode a bearer token.

    Returns:
        The user id, or None if the token is invalid or expired.
    """
    try:
        payload = jwt.decode(
            token,
            current_app.config['JWT_SECRET_KEY'],
            algorithms=['HS256']
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        return None
    except jwt.InvalidTokenError:
        logger.warning("Rejected invalid token")
        return None
    return payload.get('user_id')


@login_manager.request_loader
def load_user_from_request(req):
    auth_header = req.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        return None

    user_id = decode_token(auth_header.split(' ', 1)[1])
    if not user_id:
        return None

    user = db.session.get(User, user_id)
    if not user or not user.is_active:
        return None
    return user


# --- Endpoints ---

@auth_bp.route('/login', methods=['POST'])
def login():
    """Authenticate user and return the user plus a JWT token."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Se requiere JSON con username y password'}), 400

    form = form_from_json(LoginForm, data)
    if not form.validate():
        return jsonify({'error': 'Usuario y contraseña son requeridos',
                        'details': form_errors(form)}), 400

    username = form.username.data.strip()
    user = User.query.filter_by(username=username).first()

    if not user:
        logger.warning(f"Failed login attempt for unknown user '{username}'")
        audit_logger.log_login(None, username, False, request.remote_addr)
        return jsonify({'error': 'Usuario no encontrado'}), 404

    if not user.check_password(form.password.data):
        logger.warning(f"Failed login attempt for '{username}'")
        audit_logger.log_login(user.id, username, False, request.remote_addr)
        return jsonify({'error': 'Credenciales inválidas'}), 401

    if not user.is_active:
        return jsonify({'error': 'Cuenta desactivada'}), 403

    user.last_login = utcnow()
    db.session.commit()

    logger.info(f"User '{username}' logged in")
    audit_logger.log_login(user.id, username, True, request.remote_addr)

    return jsonify({**serialize_user(user), 'token': create_token(user.id)})


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    """Return current user info."""
    return jsonify(serialize_user(current_user))
