"""
Pipeline metrics for the admin dashboard.
"""

from sqlalchemy import func

from extensions import db
from models import Client, Document, Expense, User, Visit

# Shared by the cached view and the endpoints that invalidate it
METRICS_CACHE_KEY = 'pipeline_metrics'

# Orden en el que el panel directivo muestra el pipeline
PIPELINE_STAGES = [
    ('aceptado', 'Aceptados'),
    ('propuesta', 'En Propuesta'),
    ('rechazado', 'Rechazados'),
]


def close_rate(accepted, total):
    """Percentage of accepted visits, rounded half up; 0 when there are no visits."""
    if not total:
        return 0
    return int(accepted * 100 / total + 0.5)


def pipeline_metrics(recent_limit=10):
    """
    Aggregate KPIs over all clients and visits.

    Returns:
        dict with totals, status counts, close rate, team expenses,
        per-stage pipeline, per-agent visit counts and recent activity
    """
    total_clients = db.session.query(func.count(Client.id)).scalar() or 0

    status_counts = {status: 0 for status, _ in PIPELINE_STAGES}
    rows = db.session.query(Visit.status, func.count(Visit.id)).group_by(Visit.status).all()
    for status, count in rows:
        status_counts[status] = count
    total_visits = sum(status_counts.values())

    # Gastos del equipo: solo los registrados durante visitas
    total_expenses = db.session.query(
        func.coalesce(func.sum(Expense.amount), 0.0)
    ).filter(Expense.visit_id.isnot(None)).scalar() or 0.0

    pipeline = []
    for status, label in PIPELINE_STAGES:
        count = status_counts[status]
        pipeline.append({
            'status': status,
            'label': label,
            'count': count,
            'percent': round(count * 100 / (total_visits or 1), 1),
        })

    agent_rows = db.session.query(
        User.id, User.name, func.count(Visit.id)
    ).join(Visit, Visit.user_id == User.id).group_by(User.id, User.name).order_by(
        func.count(Visit.id).desc()
    ).all()
    by_agent = [
        {'userId': user_id, 'name': name, 'visits': count}
        for user_id, name, count in agent_rows
    ]

    recent_visits = Visit.query.order_by(Visit.timestamp.desc()).limit(recent_limit).all()
    recent_ids = [v.id for v in recent_visits]
    with_audio = set()
    if recent_ids:
        with_audio = {
            visit_id for (visit_id,) in db.session.query(Document.visit_id).filter(
                Document.visit_id.in_(recent_ids),
                Document.type == 'audio'
            ).distinct()
        }

    recent = [{
        'id': v.id,
        'clientId': v.client_id,
        'placeName': v.place_name,
        'feedback': v.feedback,
        'timestamp': v.timestamp,
        'status': v.status,
        'hasAudio': v.id in with_audio,
    } for v in recent_visits]

    return {
        'totalClients': total_clients,
        'totalVisits': total_visits,
        'statusCounts': status_counts,
        'closeRate': close_rate(status_counts['aceptado'], total_visits),
        'totalExpenses': float(total_expenses),
        'pipeline': pipeline,
        'byAgent': by_agent,
        'recentActivity': recent,
    }
