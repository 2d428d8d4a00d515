"""Socket connections are authenticated and joined to user and admin rooms"""

import pytest

from app import create_app
from auth import generate_token
from websocket import ADMIN_ROOM, user_room, websocket_connections


@pytest.fixture
def socket_app(config, db_manager, daemon):
    app, socketio = create_app(config, db_manager, daemon_client=daemon, start_background=False)
    app.config['TESTING'] = True
    return app, socketio


def _user(app, username, admin=False):
    user_model = app.extensions['nodeforge'].user_model
    return user_model.get(user_model.create(username, f'{username}@example.com', 'password123', root_admin=admin))


def test_connection_without_token_is_rejected(socket_app):
    app, socketio = socket_app
    ws = socketio.test_client(app)
    assert not ws.is_connected()


def test_connection_with_invalid_token_is_rejected(socket_app):
    app, socketio = socket_app
    ws = socketio.test_client(app, auth={'token': 'garbage'})
    assert not ws.is_connected()


def test_user_receives_own_room_events(socket_app):
    app, socketio = socket_app
    alice = _user(app, 'alice')
    bob = _user(app, 'bob')

    alice_ws = socketio.test_client(app, auth={'token': generate_token(alice)[0]})
    bob_ws = socketio.test_client(app, auth={'token': generate_token(bob)[0]})
    assert alice_ws.is_connected()

    socketio.emit('store_balance_updated', {'user_id': alice['id'], 'store_balance': 5}, to=user_room(alice['id']))

    assert [m['name'] for m in alice_ws.get_received()] == ['store_balance_updated']
    assert bob_ws.get_received() == []

    alice_ws.disconnect()
    bob_ws.disconnect()


def test_only_admins_receive_transfer_events(socket_app):
    app, socketio = socket_app
    admin = _user(app, 'admin', admin=True)
    client_user = _user(app, 'client')

    admin_ws = socketio.test_client(app, auth={'token': generate_token(admin)[0]})
    client_ws = socketio.test_client(app, auth={'token': generate_token(client_user)[0]})

    socketio.emit('server_transfer_started', {'server_id': 1}, to=ADMIN_ROOM)

    assert [m['name'] for m in admin_ws.get_received()] == ['server_transfer_started']
    assert client_ws.get_received() == []

    admin_ws.disconnect()
    client_ws.disconnect()


def test_connections_are_tracked(socket_app):
    app, socketio = socket_app
    user = _user(app, 'tracked')
    before = len(websocket_connections)

    ws = socketio.test_client(app, auth={'token': generate_token(user)[0]})
    assert len(websocket_connections) == before + 1

    ws.disconnect()
    assert len(websocket_connections) == before
