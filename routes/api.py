"""
API routes - admin dashboard metrics and health check.
"""

import logging

from flask import Blueprint, current_app, jsonify
from flask_login import login_required

from extensions import db, cache
from services.metrics_service import METRICS_CACHE_KEY, pipeline_metrics
from utils.decorators import admin_required
from utils.timezone_helper import now_local

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__)


@api_bp.route('/metrics/pipeline')
@login_required
@admin_required
@cache.cached(timeout=60, key_prefix=METRICS_CACHE_KEY)
def metrics_pipeline():
    """KPIs for the admin dashboard (cached 60s)."""
    return jsonify(pipeline_metrics(
        recent_limit=current_app.config.get('RECENT_ACTIVITY_LIMIT', 10)
    ))


@api_bp.route('/health')
def health_check():
    """Health check endpoint for monitoring."""
    try:
        # Test database connection
        db.session.execute(db.text('SELECT 1'))
        db_status = 'healthy'
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_status = 'unhealthy'

    return jsonify({
        'status': 'ok' if db_status == 'healthy' else 'degraded',
        'database': db_status,
        'timestamp': now_local().isoformat()
    })
