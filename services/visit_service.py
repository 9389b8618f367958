"""
Visit Service
Registers commercial visits and keeps the client folder in sync.

The check-in flow (``record_visit``) finds or creates the client behind a
visit, merges the contact data gathered on site and stores the visit with its
expenses, documents and voice notes. Everything is committed at once, so a
failure leaves neither a half-updated client nor an orphan visit behind.
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Tuple

from extensions import db
from models import Client, Document, Expense, Visit, VISIT_STATUSES, DOCUMENT_TYPES, generate_id
from services.errors import DuplicateRecordError, ValidationError
from utils.timezone_helper import now_ms

logger = logging.getLogger(__name__)


class VisitValidationError(ValidationError):
    """Raised when a visit payload cannot be stored."""
    pass


class VisitConflictError(DuplicateRecordError):
    """Raised when a visit, expense or document id already exists."""
    pass


def merge_unique(existing: Optional[Iterable[str]], incoming: Optional[Iterable[str]]) -> List[str]:
    """
    Concatenate two lists dropping repeated values.

    Order is preserved and the first occurrence wins.
    """
    merged = []
    for value in list(existing or []) + list(incoming or []):
        if value not in merged:
            merged.append(value)
    return merged


def parse_location(payload: Dict[str, Any], default=None) -> Optional[Tuple[float, float]]:
    """
    Read coordinates from ``location: {lat, lng}`` or flat ``lat``/``lng``.

    Returns ``default`` when neither form is present.
    """
    location = payload.get('location')
    if isinstance(location, dict) and 'lat' in location and 'lng' in location:
        lat, lng = location.get('lat'), location.get('lng')
    elif 'lat' in payload and 'lng' in payload:
        lat, lng = payload.get('lat'), payload.get('lng')
    else:
        return default

    if isinstance(lat, bool) or isinstance(lng, bool):
        raise VisitValidationError('Coordenadas inválidas')
    try:
        coords = float(lat or 0), float(lng or 0)
    except (TypeError, ValueError):
        raise VisitValidationError('Coordenadas inválidas')
    if not all(math.isfinite(c) for c in coords):
        raise VisitValidationError('Coordenadas inválidas')
    return coords


def _string(value, field, default=''):
    """Text field of the payload; ``default`` when absent."""
    if value is None:
        return default
    if not isinstance(value, str):
        raise VisitValidationError(f'{field} debe ser texto')
    return value


def _string_list(value, field):
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise VisitValidationError(f'{field} debe ser una lista de textos')
    return list(value)


def _items(payload, field):
    value = payload.get(field)
    if value is None:
        return []
    if not isinstance(value, list):
        raise VisitValidationError(f'{field} debe ser una lista')
    return value


def _int(value, field, default=0):
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        raise VisitValidationError(f'{field} debe ser un número entero')
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise VisitValidationError(f'{field} debe ser un número entero')


def _amount(value):
    if value is None or value == '' or isinstance(value, bool):
        raise VisitValidationError('El importe del gasto es requerido')
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise VisitValidationError('El importe del gasto es inválido')
    if not math.isfinite(amount) or amount < 0:
        raise VisitValidationError('El importe del gasto debe ser un número no negativo')
    return amount


def _record_id(model, value, seen):
    """
    Id for a new record: the one sent by the app, or a generated one.

    Raises:
        VisitConflictError: the id is already stored or repeated in the payload
    """
    if value is None or value == '':
        return generate_id()
    if not isinstance(value, str):
        raise VisitValidationError('Identificador inválido')

    key = (model.__tablename__, value)
    if key in seen or db.session.get(model, value) is not None:
        raise VisitConflictError(f'Ya existe un registro en {model.__tablename__} con id {value}')
    seen.add(key)
    return value


def _build_expense(data, visit, client_id, seen):
    if not isinstance(data, dict):
        raise VisitValidationError('Gasto inválido')
    concept = _string(data.get('concept'), 'concept').strip()
    if not concept:
        raise VisitValidationError('El concepto del gasto es requerido')

    return Expense(
        id=_record_id(Expense, data.get('id'), seen),
        visit=visit,
        client_id=client_id,
        amount=_amount(data.get('amount')),
        concept=concept,
        date=_int(data.get('date'), 'date', default=visit.timestamp),
    )


def _build_document(data, visit, client_id, seen, forced_type=None):
    if not isinstance(data, dict):
        raise VisitValidationError('Documento inválido')
    name = _string(data.get('name'), 'name').strip()
    if not name:
        raise VisitValidationError('El nombre del documento es requerido')
    doc_type = forced_type or data.get('type')
    if doc_type not in DOCUMENT_TYPES:
        raise VisitValidationError(f'Tipo de documento inválido: {doc_type}')

    return Document(
        id=_record_id(Document, data.get('id'), seen),
        visit=visit,
        client_id=client_id,
        name=name,
        type=doc_type,
        date=_int(data.get('date'), 'date', default=visit.timestamp),
        data=_string(data.get('data'), 'data', default=None),
    )


def _build_visit(payload: Dict[str, Any], visit_id=None, client_id=None, user=None) -> Visit:
    """Validate a visit payload and build the Visit with its attachments (not added to the session)."""
    if not isinstance(payload, dict):
        raise VisitValidationError('Se requiere un objeto visita')

    place_name = _string(payload.get('placeName'), 'placeName').strip()
    place_address = _string(payload.get('placeAddress'), 'placeAddress').strip()
    if not place_name or not place_address:
        raise VisitValidationError('Nombre y dirección del local son requeridos')

    status = payload.get('status')
    if status not in VISIT_STATUSES:
        raise VisitValidationError(f'Estado inválido: {status}')

    lat, lng = parse_location(payload, default=(0.0, 0.0))
    client_id = client_id or _string(payload.get('clientId'), 'clientId') or None

    seen = set()
    if visit_id is None:
        visit_id = _record_id(Visit, payload.get('id'), seen)

    visit = Visit(
        id=visit_id,
        client_id=client_id,
        user_id=user.id if user is not None else None,
        place_id=_string(payload.get('placeId'), 'placeId') or client_id or generate_id(),
        place_name=place_name,
        place_address=place_address,
        timestamp=_int(payload.get('timestamp'), 'timestamp', default=now_ms()),
        feedback=_string(payload.get('feedback'), 'feedback'),
        status=status,
        tags=_string_list(payload.get('tags'), 'tags'),
        lat=lat,
        lng=lng,
        duration_minutes=_int(payload.get('durationMinutes'), 'durationMinutes'),
    )
    if visit.duration_minutes < 0:
        raise VisitValidationError('La duración no puede ser negativa')

    for item in _items(payload, 'expensesAdded'):
        _build_expense(item, visit, client_id, seen)
    for item in _items(payload, 'documentsAdded'):
        _build_document(item, visit, client_id, seen)
    for item in _items(payload, 'voiceNotes'):
        _build_document(item, visit, client_id, seen, forced_type='audio')

    return visit


def create_visit(payload: Dict[str, Any], user=None) -> Visit:
    """
    Persist a visit exactly as sent, with its nested expenses, documents and voice notes.

    Raises:
        VisitValidationError: if the payload is incomplete or malformed
        VisitConflictError: if one of the supplied ids already exists
    """
    if not isinstance(payload, dict):
        raise VisitValidationError('Se requiere un objeto visita')
    client_id = _string(payload.get('clientId'), 'clientId')
    if client_id and db.session.get(Client, client_id) is None:
        raise VisitValidationError('Cliente no encontrado')

    try:
        visit = _build_visit(payload, user=user)
        db.session.add(visit)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(f"Visit {visit.id} created for '{visit.place_name}' ({visit.status})")
    return visit


def find_client_for_visit(report: Dict[str, Any]) -> Optional[Client]:
    """Match by explicit client id first, then by exact business name."""
    client_id = _string(report.get('clientId'), 'clientId')
    if client_id:
        client = db.session.get(Client, client_id)
        if client is not None:
            return client

    place_name = _string(report.get('placeName'), 'placeName').strip()
    if place_name:
        return Client.query.filter_by(name=place_name).first()
    return None


def _apply_client_updates(client: Client, updates: Dict[str, Any]):
    name = _string(updates.get('name'), 'name').strip()
    if name:
        client.name = name
    address = _string(updates.get('address'), 'address').strip()
    if address:
        client.address = address
    if 'contactName' in updates:
        client.contact_name = _string(updates.get('contactName'), 'contactName')

    location = parse_location(updates)
    if location is not None:
        client.lat, client.lng = location


def record_visit(report: Dict[str, Any], client_updates: Optional[Dict[str, Any]] = None,
                 user=None) -> Tuple[Client, Visit]:
    """
    Check-in flow: update or create the client behind a visit and store the visit.

    Args:
        report: visit payload (same shape as POST /api/visits)
        client_updates: contact data captured in the visit form
            (name, address, location, contactName, phones, emails)
        user: agent logging the visit

    Returns:
        (client, visit) after commit

    Raises:
        VisitValidationError: nothing is written in that case
        VisitConflictError: the visit or one of its attachments reuses an id
    """
    if not isinstance(report, dict):
        raise VisitValidationError('Se requiere un objeto visita')
    client_updates = client_updates or {}
    if not isinstance(client_updates, dict):
        raise VisitValidationError('Datos de cliente inválidos')

    phones = _string_list(client_updates.get('phones'), 'phones')
    emails = _string_list(client_updates.get('emails'), 'emails')
    duration = _int(report.get('durationMinutes'), 'durationMinutes')

    try:
        visit_id = _record_id(Visit, report.get('id'), set())
        client = find_client_for_visit(report)

        if client is not None:
            _apply_client_updates(client, client_updates)
            client.phones = merge_unique(client.phones, phones)
            client.emails = merge_unique(client.emails, emails)
            client.visit_ids = list(client.visit_ids or []) + [visit_id]
            client.total_time_spent_minutes = (client.total_time_spent_minutes or 0) + duration
            created = False
        else:
            place_name = _string(report.get('placeName'), 'placeName').strip()
            place_address = _string(report.get('placeAddress'), 'placeAddress').strip()
            if not place_name or not place_address:
                raise VisitValidationError('Nombre y dirección del local son requeridos')

            lat, lng = parse_location(report, default=(0.0, 0.0))
            client = Client(
                id=generate_id(),
                name=place_name,
                address=place_address,
                lat=lat,
                lng=lng,
                contact_name=_string(client_updates.get('contactName'), 'contactName'),
                phones=merge_unique([], phones),
                emails=merge_unique([], emails),
                total_time_spent_minutes=duration,
                visit_ids=[visit_id],
            )
            db.session.add(client)
            created = True

        visit = _build_visit(report, visit_id=visit_id, client_id=client.id, user=user)
        db.session.add(visit)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(
        f"Visit {visit.id} recorded for client {client.id} "
        f"({'new' if created else 'existing'}, +{duration} min)"
    )
    return client, visit
