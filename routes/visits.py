"""
Visit routes - visit history, plain creation and the check-in flow.
"""

import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from sqlalchemy.orm import selectinload

from extensions import cache
from logging_config import audit_logger
from models import Visit
from services.errors import DuplicateRecordError, ValidationError
from services.metrics_service import METRICS_CACHE_KEY
from services.places_service import PlacesService
from services.visit_service import create_visit, record_visit
from utils.serializers import serialize_client, serialize_visit

logger = logging.getLogger(__name__)

visits_bp = Blueprint('visits', __name__)


@visits_bp.route('/visits', methods=['GET'])
@login_required
def list_visits():
    """Visits newest first, optionally filtered by ?clientId=."""
    query = Visit.query.options(
        selectinload(Visit.expenses),
        selectinload(Visit.documents),
    )
    client_id = request.args.get('clientId')
    if client_id:
        query = query.filter(Visit.client_id == client_id)

    visits = query.order_by(Visit.timestamp.desc()).all()
    return jsonify([serialize_visit(v) for v in visits])


@visits_bp.route('/visits', methods=['POST'])
@login_required
def add_visit():
    """Store a visit with its expensesAdded, documentsAdded and voiceNotes."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Se requiere JSON'}), 400

    try:
        visit = create_visit(data, user=current_user)
    except DuplicateRecordError as e:
        return jsonify({'error': str(e)}), 409
    except ValidationError as e:
        return jsonify({'error': str(e)}), 400

    cache.delete(METRICS_CACHE_KEY)
    audit_logger.log_visit_created(visit, current_user.id)
    return jsonify(serialize_visit(visit)), 201


@visits_bp.route('/visits/checkin', methods=['POST'])
@login_required
def checkin():
    """
    Register a visit from the visit form.

    Input: {
        "visit": { ...VisitReport... },
        "client": { "name", "address", "location", "contactName", "phones", "emails" }
    }
    Output: {"visit": ..., "client": ...}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get('visit'), dict):
        return jsonify({'error': 'Se requiere JSON con la visita'}), 400

    try:
        client, visit = record_visit(data['visit'], data.get('client'), user=current_user)
    except DuplicateRecordError as e:
        return jsonify({'error': str(e)}), 409
    except ValidationError as e:
        return jsonify({'error': str(e)}), 400

    cache.delete(METRICS_CACHE_KEY)
    logger.info(f"User '{current_user.username}' checked in at '{visit.place_name}'")
    audit_logger.log_checkin(visit, client, current_user.id)

    return jsonify({
        'visit': serialize_visit(visit),
        'client': serialize_client(client),
    }), 201


@visits_bp.route('/visits/sentiment', methods=['POST'])
@login_required
def sentiment():
    """Classify visit feedback: positive, neutral or negative."""
    data = request.get_json(silent=True) or {}
    feedback = data.get('feedback') if isinstance(data, dict) else None
    if not isinstance(feedback, str):
        return jsonify({'error': 'Se requiere el texto de feedback'}), 400

    return jsonify({'sentiment': PlacesService().analyze_sentiment(feedback)})
