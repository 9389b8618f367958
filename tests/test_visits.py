"""
Visit Route Tests
Visit history, plain creation, check-in and sentiment.
"""

from unittest.mock import patch


class TestCreateVisit:
    """POST /api/visits"""

    def test_create_visit(self, client, auth_headers, commercial_user, sample_visit):
        response = client.post('/api/visits', headers=auth_headers, json=dict(
            sample_visit,
            expensesAdded=[{'amount': 12.5, 'concept': 'Parking'}],
            documentsAdded=[{'name': 'carta.pdf', 'type': 'pdf', 'data': 'JVBER'}],
            voiceNotes=[{'name': 'nota.webm', 'type': 'doc', 'data': 'GkXf'}],
        ))
        assert response.status_code == 201
        data = response.get_json()
        assert data['placeName'] == 'Restaurante El Olivo'
        assert data['status'] == 'propuesta'
        assert data['userId'] == commercial_user.id
        assert data['location'] == {'lat': 40.4192, 'lng': -3.6967}
        assert data['durationMinutes'] == 30
        assert [e['concept'] for e in data['expensesAdded']] == ['Parking']
        assert data['expensesAdded'][0]['date'] == sample_visit['timestamp']
        assert [d['name'] for d in data['documentsAdded']] == ['carta.pdf']
        # Voice notes are always stored as audio
        assert data['voiceNotes'][0]['type'] == 'audio'

    def test_create_visit_keeps_client_supplied_id(self, client, auth_headers, sample_visit):
        response = client.post('/api/visits', headers=auth_headers,
                               json=dict(sample_visit, id='visit-xyz'))
        assert response.status_code == 201
        assert response.get_json()['id'] == 'visit-xyz'

    def test_invalid_status(self, client, auth_headers, sample_visit):
        response = client.post('/api/visits', headers=auth_headers,
                               json=dict(sample_visit, status='pendiente'))
        assert response.status_code == 400

    def test_missing_place_name(self, client, auth_headers, sample_visit):
        response = client.post('/api/visits', headers=auth_headers,
                               json=dict(sample_visit, placeName=''))
        assert response.status_code == 400

    def test_unknown_client_id(self, client, auth_headers, sample_visit):
        response = client.post('/api/visits', headers=auth_headers,
                               json=dict(sample_visit, clientId='nope'))
        assert response.status_code == 400

    def test_requires_token(self, client, sample_visit):
        response = client.post('/api/visits', json=sample_visit)
        assert response.status_code == 401


class TestListVisits:
    """GET /api/visits"""

    def test_newest_first(self, client, auth_headers, sample_visit):
        for i, ts in enumerate([1000, 3000, 2000]):
            client.post('/api/visits', headers=auth_headers,
                        json=dict(sample_visit, id=f'v{i}', timestamp=ts))

        visits = client.get('/api/visits', headers=auth_headers).get_json()
        assert [v['timestamp'] for v in visits] == [3000, 2000, 1000]

    def test_filter_by_client(self, client, auth_headers, sample_visit):
        first = client.post('/api/visits/checkin', headers=auth_headers, json={
            'visit': sample_visit, 'client': {},
        }).get_json()
        client.post('/api/visits/checkin', headers=auth_headers, json={
            'visit': dict(sample_visit, placeName='Café Central', placeAddress='Plaza del Ángel 10'),
            'client': {},
        })

        client_id = first['client']['id']
        visits = client.get(f'/api/visits?clientId={client_id}', headers=auth_headers).get_json()
        assert len(visits) == 1
        assert visits[0]['clientId'] == client_id

        assert len(client.get('/api/visits', headers=auth_headers).get_json()) == 2


class TestCheckin:
    """POST /api/visits/checkin"""

    def test_checkin_creates_client(self, client, auth_headers, sample_visit):
        response = client.post('/api/visits/checkin', headers=auth_headers, json={
            'visit': sample_visit,
            'client': {'contactName': 'Lucía', 'phones': ['+34 600 111 222'],
                       'emails': ['lucia@elolivo.es']},
        })
        assert response.status_code == 201
        data = response.get_json()
        assert data['client']['name'] == 'Restaurante El Olivo'
        assert data['client']['address'] == 'Calle de Alcalá 45, Madrid'
        assert data['client']['visitIds'] == [data['visit']['id']]
        assert data['client']['totalTimeSpentMinutes'] == 30
        assert data['client']['phones'] == ['+34 600 111 222']
        assert data['visit']['clientId'] == data['client']['id']

    def test_checkin_existing_client_merges(self, client, auth_headers, sample_visit):
        first = client.post('/api/visits/checkin', headers=auth_headers, json={
            'visit': sample_visit,
            'client': {'phones': ['111'], 'emails': ['a@olivo.es']},
        }).get_json()
        client_id = first['client']['id']

        response = client.post('/api/visits/checkin', headers=auth_headers, json={
            'visit': dict(sample_visit, clientId=client_id, durationMinutes=15, status='aceptado'),
            'client': {'phones': ['111', '222'], 'emails': ['b@olivo.es']},
        })
        assert response.status_code == 201
        data = response.get_json()
        assert data['client']['id'] == client_id
        assert data['client']['phones'] == ['111', '222']
        assert data['client']['emails'] == ['a@olivo.es', 'b@olivo.es']
        assert data['client']['totalTimeSpentMinutes'] == 45
        assert len(data['client']['visitIds']) == 2

        clients = client.get('/api/clients', headers=auth_headers).get_json()
        assert len(clients) == 1

    def test_checkin_requires_visit(self, client, auth_headers):
        response = client.post('/api/visits/checkin', headers=auth_headers, json={'client': {}})
        assert response.status_code == 400

    def test_checkin_invalid_status_writes_nothing(self, client, auth_headers, sample_visit):
        response = client.post('/api/visits/checkin', headers=auth_headers, json={
            'visit': dict(sample_visit, status='quizás'), 'client': {},
        })
        assert response.status_code == 400
        assert client.get('/api/clients', headers=auth_headers).get_json() == []
        assert client.get('/api/visits', headers=auth_headers).get_json() == []


class TestSentiment:
    """POST /api/visits/sentiment"""

    def test_sentiment(self, client, auth_headers):
        with patch('services.places_service.PlacesService.analyze_sentiment',
                   return_value='positive') as mock_analyze:
            response = client.post('/api/visits/sentiment', headers=auth_headers,
                                   json={'feedback': 'Les encantó la demo'})
        assert response.status_code == 200
        assert response.get_json() == {'sentiment': 'positive'}
        mock_analyze.assert_called_once_with('Les encantó la demo')

    def test_sentiment_requires_feedback(self, client, auth_headers):
        response = client.post('/api/visits/sentiment', headers=auth_headers, json={})
        assert response.status_code == 400


class TestVisitPayloadErrors:
    """Malformed or conflicting visits are answered with 4xx, never 500"""

    def test_non_text_place_name(self, client, auth_headers, sample_visit):
        response = client.post('/api/visits', headers=auth_headers,
                               json=dict(sample_visit, placeName=123))
        assert response.status_code == 400

    def test_non_text_feedback(self, client, auth_headers, sample_visit):
        response = client.post('/api/visits', headers=auth_headers,
                               json=dict(sample_visit, feedback={'a': 1}))
        assert response.status_code == 400

    def test_checkin_non_text_client_name(self, client, auth_headers, sample_visit):
        first = client.post('/api/visits/checkin', headers=auth_headers,
                            json={'visit': sample_visit, 'client': {}}).get_json()

        response = client.post('/api/visits/checkin', headers=auth_headers, json={
            'visit': dict(sample_visit, clientId=first['client']['id']),
            'client': {'name': 5},
        })
        assert response.status_code == 400
        assert len(client.get('/api/visits', headers=auth_headers).get_json()) == 1

    def test_negative_expense_amount(self, client, auth_headers, sample_visit):
        response = client.post('/api/visits', headers=auth_headers, json=dict(
            sample_visit, expensesAdded=[{'amount': -500, 'concept': 'Taxi'}],
        ))
        assert response.status_code == 400

    def test_nan_expense_amount(self, client, auth_headers, sample_visit):
        response = client.post('/api/visits', headers=auth_headers, json=dict(
            sample_visit, expensesAdded=[{'amount': 'nan', 'concept': 'Taxi'}],
        ))
        assert response.status_code == 400
        assert client.get('/api/visits', headers=auth_headers).get_json() == []

    def test_duplicate_visit_id(self, client, auth_headers, sample_visit):
        first = client.post('/api/visits', headers=auth_headers, json=dict(sample_visit, id='dup'))
        assert first.status_code == 201

        second = client.post('/api/visits', headers=auth_headers, json=dict(sample_visit, id='dup'))
        assert second.status_code == 409

    def test_duplicate_expense_id(self, client, auth_headers, sample_visit):
        expenses = [{'id': 'exp-1', 'amount': 5, 'concept': 'Café'}]
        client.post('/api/visits', headers=auth_headers, json=dict(sample_visit, expensesAdded=expenses))

        response = client.post('/api/visits', headers=auth_headers,
                               json=dict(sample_visit, expensesAdded=expenses))
        assert response.status_code == 409
        assert len(client.get('/api/visits', headers=auth_headers).get_json()) == 1

    def test_checkin_duplicate_id_writes_nothing(self, client, auth_headers, sample_visit):
        client.post('/api/visits', headers=auth_headers, json=dict(sample_visit, id='dup'))

        response = client.post('/api/visits/checkin', headers=auth_headers, json={
            'visit': dict(sample_visit, id='dup', placeName='Bar Nuevo'), 'client': {},
        })
        assert response.status_code == 409
        assert client.get('/api/clients', headers=auth_headers).get_json() == []


class TestVisitAudit:

    def test_checkin_is_audited(self, client, auth_headers, commercial_user, sample_visit, caplog):
        with caplog.at_level('INFO', logger='audit'):
            client.post('/api/visits/checkin', headers=auth_headers,
                        json={'visit': dict(sample_visit, id='visit-7'), 'client': {}})

        entries = [r.getMessage() for r in caplog.records if r.name == 'audit']
        assert len(entries) == 1
        assert "'action': 'visit_checkin'" in entries[0]
        assert "'visit_id': 'visit-7'" in entries[0]
        assert f"'user_id': '{commercial_user.id}'" in entries[0]
