"""
User management routes - admin only.
"""

import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from extensions import db
from forms import UserForm, form_from_json, form_errors
from logging_config import audit_logger
from models import User
from utils.decorators import admin_required
from utils.serializers import serialize_user

logger = logging.getLogger(__name__)

users_bp = Blueprint('users', __name__)


@users_bp.route('/users', methods=['GET'])
@login_required
@admin_required
def list_users():
    users = User.query.order_by(User.username).all()
    return jsonify([serialize_user(u) for u in users])


@users_bp.route('/users', methods=['POST'])
@login_required
@admin_required
def create_user():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Se requiere JSON'}), 400

    form = form_from_json(UserForm, data)
    if not form.validate():
        return jsonify({'error': 'Datos de usuario inválidos', 'details': form_errors(form)}), 400

    username = form.username.data.strip()
    if User.query.filter_by(username=username).first():
        return jsonify({'error': f"El usuario '{username}' ya existe"}), 409

    user = User(
        username=username,
        name=form.name.data.strip(),
        role=form.role.data or 'commercial',
    )
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.commit()

    logger.info(f"Admin '{current_user.username}' created user '{username}' ({user.role})")
    audit_logger.log_user_created(user, current_user.id)
    return jsonify(serialize_user(user)), 201
