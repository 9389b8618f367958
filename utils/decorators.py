"""
Decoradores de permisos para control de acceso
Dos roles: admin (panel directivo) y commercial (agentes de campo)
"""
from functools import wraps

from flask import jsonify
from flask_login import current_user


def role_required(*roles):
    """
    Requiere token válido y que el usuario tenga uno de los roles especificados

    Uso:
        @role_required('admin')
        def mi_vista():
            ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({'error': 'Token requerido'}), 401

            if current_user.role not in roles:
                return jsonify({'error': 'No tienes permisos para esta operación'}), 403

            return f(*args, **kwargs)
        return decorated_function
    return decorator


def admin_required(f):
    """
    Solo administradores pueden acceder
    """
    return role_required('admin')(f)
