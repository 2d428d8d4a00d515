"""Store overview and resource purchases"""

import pytest

from services.store_service import DEFAULT_COSTS, RESOURCE_AMOUNTS
from websocket import user_room


def test_store_requires_auth(client):
    assert client.get('/api/client/store').status_code == 401


def test_store_summary(client, panel, auth_headers):
    user = panel.user(balance=75)

    data = client.get('/api/client/store', headers=auth_headers(user)).get_json()['store']

    assert data['balance'] == 75
    assert data['costs'] == DEFAULT_COSTS
    assert data['amounts'] == RESOURCE_AMOUNTS
    assert data['resources']['memory'] == 0
    assert data['gateways'] == {'paypal': False}


def test_store_summary_shows_enabled_gateway(client, coordinator, panel, auth_headers):
    coordinator.settings.set('store:paypal:enabled', 'true')
    user = panel.user()
    data = client.get('/api/client/store', headers=auth_headers(user)).get_json()['store']
    assert data['gateways'] == {'paypal': True}


def test_purchase_resource(client, coordinator, panel, auth_headers, events):
    user = panel.user(balance=100)

    response = client.post('/api/client/store/resources', json={'resource': 'memory'},
                           headers=auth_headers(user))

    assert response.status_code == 200
    body = response.get_json()
    assert body['user']['store_balance'] == 50
    assert body['user']['store_memory'] == 1024
    assert 'password_hash' not in body['user']

    updates = events.named('store_balance_updated')
    assert updates == [('store_balance_updated', {'user_id': user['id'], 'store_balance': 50},
                        user_room(user['id']))]


def test_purchase_with_insufficient_credits(client, coordinator, panel, auth_headers):
    user = panel.user(balance=10)

    response = client.post('/api/client/store/resources', json={'resource': 'slot'},
                           headers=auth_headers(user))

    assert response.status_code == 400
    assert response.get_json()['message'] == 'You do not have enough credits.'
    assert coordinator.user_model.get(user['id'])['store_slots'] == 0


@pytest.mark.parametrize('payload', [{}, {'resource': 'gpu'}, {'resource': 5}])
def test_purchase_invalid_resource(client, panel, auth_headers, payload):
    user = panel.user(balance=1000)
    response = client.post('/api/client/store/resources', json=payload, headers=auth_headers(user))
    assert response.status_code == 422
    assert 'resource' in response.get_json()['errors']


def test_cost_override_from_settings(client, coordinator, panel, auth_headers):
    coordinator.settings.set('store:cost:cpu', '10')
    user = panel.user(balance=10)

    response = client.post('/api/client/store/resources', json={'resource': 'cpu'}, headers=auth_headers(user))

    assert response.status_code == 200
    assert response.get_json()['user']['store_balance'] == 0
    assert response.get_json()['user']['store_cpu'] == 50


def test_conditional_update_never_overdraws(coordinator, panel):
    user = panel.user(balance=20)
    assert coordinator.user_model.purchase_resource(user['id'], 'port', 20, 1) is True
    assert coordinator.user_model.purchase_resource(user['id'], 'port', 20, 1) is False

    user = coordinator.user_model.get(user['id'])
    assert user['store_balance'] == 0
    assert user['store_ports'] == 1


def test_purchase_with_non_object_body(client, panel, auth_headers):
    user = panel.user(balance=1000)
    response = client.post('/api/client/store/resources', json=['memory'], headers=auth_headers(user))
    assert response.status_code == 422
    assert response.get_json()['errors']['resource'] == ['The resource field is required.']
