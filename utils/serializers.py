"""
JSON serializers for the mobile app.

Keys follow the camelCase shapes the frontend already consumes.
"""


def _location(lat, lng):
    return {'lat': lat or 0.0, 'lng': lng or 0.0}


def serialize_user(user):
    return {
        'id': user.id,
        'username': user.username,
        'role': user.role,
        'name': user.name,
    }


def serialize_contact(contact):
    return {
        'id': contact.id,
        'clientId': contact.client_id,
        'name': contact.name,
        'role': contact.role,
        'phone': contact.phone,
        'email': contact.email,
    }


def serialize_expense(expense):
    return {
        'id': expense.id,
        'clientId': expense.client_id,
        'visitId': expense.visit_id,
        'amount': expense.amount,
        'concept': expense.concept,
        'date': expense.date,
    }


def serialize_document(document):
    return {
        'id': document.id,
        'clientId': document.client_id,
        'visitId': document.visit_id,
        'name': document.name,
        'type': document.type,
        'date': document.date,
        'data': document.data,
    }


def serialize_client(client):
    """Serialize a Client; related lists only hold general (non-visit) records."""
    return {
        'id': client.id,
        'name': client.name,
        'address': client.address,
        'lat': client.lat,
        'lng': client.lng,
        'location': _location(client.lat, client.lng),
        'contactName': client.contact_name,
        'phones': list(client.phones or []),
        'emails': list(client.emails or []),
        'totalTimeSpentMinutes': client.total_time_spent_minutes or 0,
        'visitIds': list(client.visit_ids or []),
        'createdAt': client.created_at.isoformat() if client.created_at else None,
        'updatedAt': client.updated_at.isoformat() if client.updated_at else None,
        'expenses': [serialize_expense(e) for e in client.general_expenses],
        'documents': [serialize_document(d) for d in client.general_documents],
        'contacts': [serialize_contact(c) for c in client.contacts],
    }


def serialize_visit(visit):
    """Serialize a Visit, splitting audio documents out as voice notes."""
    documents = list(visit.documents)
    return {
        'id': visit.id,
        'clientId': visit.client_id,
        'userId': visit.user_id,
        'placeId': visit.place_id,
        'placeName': visit.place_name,
        'placeAddress': visit.place_address,
        'timestamp': visit.timestamp,
        'feedback': visit.feedback,
        'status': visit.status,
        'tags': list(visit.tags or []),
        'lat': visit.lat,
        'lng': visit.lng,
        'location': _location(visit.lat, visit.lng),
        'durationMinutes': visit.duration_minutes or 0,
        'expensesAdded': [serialize_expense(e) for e in visit.expenses],
        'documentsAdded': [serialize_document(d) for d in documents if d.type != 'audio'],
        'voiceNotes': [serialize_document(d) for d in documents if d.type == 'audio'],
        'createdAt': visit.created_at.isoformat() if visit.created_at else None,
    }
