"""
Client folder routes - clients, contacts and general expenses/documents.
"""

import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from sqlalchemy.orm import selectinload

from extensions import cache, db
from forms import ContactForm, ExpenseForm, DocumentForm, form_from_json, form_errors
from logging_config import audit_logger
from models import Client, Contact, Document, Expense, generate_id
from services.errors import ValidationError
from services.metrics_service import METRICS_CACHE_KEY
from services.visit_service import parse_location
from utils.serializers import (
    serialize_client, serialize_contact, serialize_document, serialize_expense
)
from utils.timezone_helper import now_ms

logger = logging.getLogger(__name__)

clients_bp = Blueprint('clients', __name__)


def _string_list(data, key):
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f'{key} debe ser una lista de textos')
    return list(value)


def _apply_client_payload(client, data, partial=False):
    """
    Copy the editable fields of ``data`` onto ``client``.

    With ``partial`` only the keys present in ``data`` are touched.
    """
    for key, attr in (('name', 'name'), ('address', 'address')):
        if key in data or not partial:
            value = data.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f'El campo {key} es requerido')
            setattr(client, attr, value.strip())

    if 'contactName' in data:
        contact_name = data.get('contactName')
        if contact_name is not None and not isinstance(contact_name, str):
            raise ValidationError('contactName debe ser texto')
        client.contact_name = contact_name or ''

    location = parse_location(data)
    if location is not None:
        client.lat, client.lng = location

    for key, attr in (('phones', 'phones'), ('emails', 'emails'), ('visitIds', 'visit_ids')):
        if key in data or not partial:
            setattr(client, attr, _string_list(data, key))

    if 'totalTimeSpentMinutes' in data or not partial:
        try:
            minutes = int(data.get('totalTimeSpentMinutes') or 0)
        except (TypeError, ValueError):
            raise ValidationError('totalTimeSpentMinutes debe ser un número entero')
        if minutes < 0:
            raise ValidationError('totalTimeSpentMinutes no puede ser negativo')
        client.total_time_spent_minutes = minutes


def _new_record_id(model, data):
    """Id sent by the app or a generated one; None when it is unusable or taken."""
    record_id = data.get('id')
    if record_id is None or record_id == '':
        return generate_id()
    if not isinstance(record_id, str) or db.session.get(model, record_id) is not None:
        return None
    return record_id


def _get_client_or_404(client_id):
    client = db.session.get(Client, client_id)
    if not client:
        return None, (jsonify({'error': 'Cliente no encontrado'}), 404)
    return client, None


@clients_bp.route('/clients', methods=['GET'])
@login_required
def list_clients():
    """All clients with their general expenses, documents and contacts."""
    clients = Client.query.options(
        selectinload(Client.contacts),
        selectinload(Client.expenses),
        selectinload(Client.documents),
    ).order_by(Client.created_at.desc()).all()
    return jsonify([serialize_client(c) for c in clients])


@clients_bp.route('/clients', methods=['POST'])
@login_required
def create_client():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Se requiere JSON'}), 400

    client_id = _new_record_id(Client, data)
    if client_id is None:
        return jsonify({'error': 'Ya existe un cliente con ese id'}), 409

    client = Client(id=client_id)
    try:
        _apply_client_payload(client, data)
    except ValidationError as e:
        return jsonify({'error': str(e)}), 400

    db.session.add(client)
    db.session.commit()
    cache.delete(METRICS_CACHE_KEY)

    logger.info(f"User '{current_user.username}' created client '{client.name}'")
    audit_logger.log_client_change(client, current_user.id, 'created')
    return jsonify(serialize_client(client)), 201


@clients_bp.route('/clients/<client_id>', methods=['GET'])
@login_required
def get_client(client_id):
    client, error = _get_client_or_404(client_id)
    if error:
        return error
    return jsonify(serialize_client(client))


@clients_bp.route('/clients/<client_id>', methods=['PUT'])
@login_required
def update_client(client_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Se requiere JSON'}), 400

    client, error = _get_client_or_404(client_id)
    if error:
        return error

    try:
        _apply_client_payload(client, data, partial=True)
    except ValidationError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400

    db.session.commit()

    logger.info(f"User '{current_user.username}' updated client #{client.id}")
    audit_logger.log_client_change(client, current_user.id, 'updated', fields=sorted(data.keys()))
    return jsonify(serialize_client(client))


# --- Contacts ---

@clients_bp.route('/clients/<client_id>/contacts', methods=['GET'])
@login_required
def list_contacts(client_id):
    client, error = _get_client_or_404(client_id)
    if error:
        return error
    return jsonify([serialize_contact(c) for c in client.contacts])


@clients_bp.route('/clients/<client_id>/contacts', methods=['POST'])
@login_required
def add_contact(client_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Se requiere JSON'}), 400

    client, error = _get_client_or_404(client_id)
    if error:
        return error

    form = form_from_json(ContactForm, data)
    if not form.validate():
        return jsonify({'error': 'Datos de contacto inválidos', 'details': form_errors(form)}), 400

    record_id = _new_record_id(Contact, data)
    if record_id is None:
        return jsonify({'error': 'Ya existe un registro con ese id'}), 409

    contact = Contact(
        id=record_id,
        client_id=client.id,
        name=form.name.data.strip(),
        role=form.role.data.strip(),
        phone=form.phone.data or None,
        email=form.email.data or None,
    )
    db.session.add(contact)
    db.session.commit()

    logger.info(f"Contact '{contact.name}' added to client #{client.id}")
    audit_logger.log_attachment_added('contact', contact.id, client.id, current_user.id)
    return jsonify(serialize_contact(contact)), 201


# --- General expenses and documents (not tied to a visit) ---

@clients_bp.route('/clients/<client_id>/expenses', methods=['POST'])
@login_required
def add_expense(client_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Se requiere JSON'}), 400

    client, error = _get_client_or_404(client_id)
    if error:
        return error

    form = form_from_json(ExpenseForm, data)
    if not form.validate():
        return jsonify({'error': 'Datos de gasto inválidos', 'details': form_errors(form)}), 400

    record_id = _new_record_id(Expense, data)
    if record_id is None:
        return jsonify({'error': 'Ya existe un registro con ese id'}), 409

    expense = Expense(
        id=record_id,
        client_id=client.id,
        amount=form.amount.data,
        concept=form.concept.data.strip(),
        date=form.date.data or now_ms(),
    )
    db.session.add(expense)
    db.session.commit()

    audit_logger.log_attachment_added('expense', expense.id, client.id, current_user.id,
                                      amount=expense.amount)
    return jsonify(serialize_expense(expense)), 201


@clients_bp.route('/clients/<client_id>/documents', methods=['POST'])
@login_required
def add_document(client_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Se requiere JSON'}), 400

    client, error = _get_client_or_404(client_id)
    if error:
        return error

    form = form_from_json(DocumentForm, data)
    if not form.validate():
        return jsonify({'error': 'Datos de documento inválidos', 'details': form_errors(form)}), 400

    record_id = _new_record_id(Document, data)
    if record_id is None:
        return jsonify({'error': 'Ya existe un registro con ese id'}), 409

    content = data.get('data')
    if content is not None and not isinstance(content, str):
        return jsonify({'error': 'El contenido debe ser texto base64'}), 400

    document = Document(
        id=record_id,
        client_id=client.id,
        name=form.name.data.strip(),
        type=form.type.data,
        date=form.date.data or now_ms(),
        data=content,
    )
    db.session.add(document)
    db.session.commit()

    audit_logger.log_attachment_added('document', document.id, client.id, current_user.id,
                                      type=document.type)
    return jsonify(serialize_document(document)), 201
