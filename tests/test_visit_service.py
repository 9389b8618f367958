"""
Visit Service Tests
Client reconciliation behind the check-in flow.
"""

import pytest

from services.visit_service import (
    VisitConflictError, VisitValidationError, merge_unique, parse_location, record_visit, find_client_for_visit
)


class TestMergeUnique:
    """Order-preserving de-duplication of phones and emails"""

    def test_keeps_first_occurrence_order(self):
        assert merge_unique(['a', 'b'], ['b', 'c', 'a', 'd']) == ['a', 'b', 'c', 'd']

    def test_handles_missing_lists(self):
        assert merge_unique(None, ['x']) == ['x']
        assert merge_unique(['x'], None) == ['x']
        assert merge_unique(None, None) == []

    def test_drops_duplicates_inside_incoming(self):
        assert merge_unique([], ['1', '1', '2']) == ['1', '2']


class TestParseLocation:

    def test_nested_location(self):
        assert parse_location({'location': {'lat': 1, 'lng': 2}}) == (1.0, 2.0)

    def test_flat_coordinates(self):
        assert parse_location({'lat': '40.1', 'lng': '-3.5'}) == (40.1, -3.5)

    def test_default_when_absent(self):
        assert parse_location({}) is None
        assert parse_location({}, default=(0.0, 0.0)) == (0.0, 0.0)

    def test_invalid_coordinates(self):
        with pytest.raises(VisitValidationError):
            parse_location({'lat': 'norte', 'lng': 'oeste'})


class TestRecordVisit:
    """record_visit: find or create the client, then store the visit"""

    def test_new_client_from_visit(self, app, sample_visit, commercial_user):
        client, visit = record_visit(sample_visit, {'contactName': 'Lucía', 'phones': ['111']},
                                     user=commercial_user)

        assert client.name == 'Restaurante El Olivo'
        assert client.address == 'Calle de Alcalá 45, Madrid'
        assert (client.lat, client.lng) == (40.4192, -3.6967)
        assert client.contact_name == 'Lucía'
        assert client.phones == ['111']
        assert client.visit_ids == [visit.id]
        assert client.total_time_spent_minutes == 30
        assert visit.client_id == client.id
        assert visit.user_id == commercial_user.id

    def test_matches_by_client_id(self, app, sample_visit):
        client, _ = record_visit(sample_visit)
        # Different name, but the id wins
        same, visit = record_visit(dict(sample_visit, clientId=client.id, placeName='Olivo (terraza)'))

        assert same.id == client.id
        assert visit.place_name == 'Olivo (terraza)'
        assert len(same.visit_ids) == 2

    def test_matches_by_exact_name(self, app, sample_visit):
        client, _ = record_visit(sample_visit)
        same, _ = record_visit(dict(sample_visit, durationMinutes=10))

        assert same.id == client.id
        assert same.total_time_spent_minutes == 40

    def test_name_match_is_exact(self, app, sample_visit):
        record_visit(sample_visit)
        other, _ = record_visit(dict(sample_visit, placeName='restaurante el olivo'))

        from models import Client
        assert Client.query.count() == 2
        assert other.name == 'restaurante el olivo'

    def test_unknown_client_id_falls_back_to_name(self, app, sample_visit):
        client, _ = record_visit(sample_visit)
        same, _ = record_visit(dict(sample_visit, clientId='stale-id'))
        assert same.id == client.id

    def test_merges_contact_data(self, app, sample_visit):
        client, _ = record_visit(sample_visit, {'phones': ['111'], 'emails': ['a@x.es']})
        client, _ = record_visit(sample_visit, {'phones': ['222', '111'], 'emails': ['a@x.es']})

        assert client.phones == ['111', '222']
        assert client.emails == ['a@x.es']

    def test_applies_client_updates(self, app, sample_visit):
        record_visit(sample_visit)
        client, _ = record_visit(sample_visit, {
            'address': 'Calle de Alcalá 47, Madrid',
            'location': {'lat': 40.42, 'lng': -3.69},
            'contactName': 'Andrés',
        })

        assert client.address == 'Calle de Alcalá 47, Madrid'
        assert (client.lat, client.lng) == (40.42, -3.69)
        assert client.contact_name == 'Andrés'

    def test_visit_attachments_belong_to_client(self, app, sample_visit):
        client, visit = record_visit(dict(
            sample_visit,
            expensesAdded=[{'amount': 9.9, 'concept': 'Café'}],
            voiceNotes=[{'name': 'nota.webm', 'data': 'GkXf'}],
        ))

        assert visit.expenses[0].client_id == client.id
        assert visit.documents[0].type == 'audio'
        # Visit records are not part of the general folder
        assert client.general_expenses == []
        assert client.general_documents == []

    def test_invalid_nested_document_rolls_back(self, app, sample_visit):
        from extensions import db
        from models import Client, Visit

        client, _ = record_visit(sample_visit, {'phones': ['111']})
        client_id = client.id

        with pytest.raises(VisitValidationError):
            record_visit(
                dict(sample_visit, documentsAdded=[{'name': 'x.exe', 'type': 'exe'}]),
                {'phones': ['999']},
            )

        client = db.session.get(Client, client_id)
        assert find_client_for_visit(sample_visit).id == client_id
        assert client.phones == ['111']
        assert client.total_time_spent_minutes == 30
        assert len(client.visit_ids) == 1
        assert Visit.query.count() == 1

    def test_negative_duration_rejected(self, app, sample_visit):
        with pytest.raises(VisitValidationError):
            record_visit(dict(sample_visit, durationMinutes=-5))

    def test_rejects_non_string_phones(self, app, sample_visit):
        with pytest.raises(VisitValidationError):
            record_visit(sample_visit, {'phones': [123]})

    def test_requires_place_data_for_new_client(self, app, sample_visit):
        with pytest.raises(VisitValidationError):
            record_visit(dict(sample_visit, placeAddress=''))

    def test_rejects_non_text_fields(self, app, sample_visit):
        from models import Client

        with pytest.raises(VisitValidationError):
            record_visit(dict(sample_visit, placeName=123))
        with pytest.raises(VisitValidationError):
            record_visit(dict(sample_visit, feedback={'texto': 'bien'}))

        client, _ = record_visit(sample_visit)
        with pytest.raises(VisitValidationError):
            record_visit(dict(sample_visit, clientId=client.id), {'name': 5})
        with pytest.raises(VisitValidationError):
            record_visit(dict(sample_visit, clientId=client.id), {'contactName': ['Ana']})
        assert Client.query.count() == 1

    def test_rejects_bad_expense_amounts(self, app, sample_visit):
        from models import Client, Expense

        for amount in (-500, 'nan', float('inf'), True, None, 'diez'):
            with pytest.raises(VisitValidationError):
                record_visit(dict(sample_visit, expensesAdded=[{'amount': amount, 'concept': 'Taxi'}]))
        assert Client.query.count() == 0
        assert Expense.query.count() == 0

    def test_rejects_non_finite_coordinates(self, app, sample_visit):
        with pytest.raises(VisitValidationError):
            record_visit(dict(sample_visit, location={'lat': 'nan', 'lng': 2}))
        with pytest.raises(VisitValidationError):
            parse_location({'lat': True, 'lng': 1})

    def test_huge_duration_rejected(self, app, sample_visit):
        with pytest.raises(VisitValidationError):
            record_visit(dict(sample_visit, durationMinutes=float('inf')))

    def test_reused_visit_id_writes_nothing(self, app, sample_visit):
        from extensions import db
        from models import Client, Visit

        client, _ = record_visit(dict(sample_visit, id='visit-1'), {'phones': ['111']})
        client_id = client.id

        with pytest.raises(VisitConflictError):
            record_visit(dict(sample_visit, id='visit-1'), {'phones': ['222']})

        client = db.session.get(Client, client_id)
        assert client.phones == ['111']
        assert client.visit_ids == ['visit-1']
        assert Visit.query.count() == 1

    def test_reused_attachment_ids(self, app, sample_visit):
        from models import Expense

        record_visit(dict(sample_visit, expensesAdded=[{'id': 'exp-1', 'amount': 5, 'concept': 'Café'}]))

        with pytest.raises(VisitConflictError):
            record_visit(dict(sample_visit, expensesAdded=[{'id': 'exp-1', 'amount': 7, 'concept': 'Taxi'}]))
        with pytest.raises(VisitConflictError):
            record_visit(dict(sample_visit, documentsAdded=[
                {'id': 'doc-1', 'name': 'a.pdf', 'type': 'pdf'},
                {'id': 'doc-1', 'name': 'b.pdf', 'type': 'pdf'},
            ]))
        assert Expense.query.count() == 1
