"""
Shared fixtures: a panel app on a temporary sqlite database, with the node
daemons and the SocketIO server replaced by recorders.
"""

import pytest

from app import create_app
from auth import generate_token
from config import PanelConfig
from exceptions import DaemonConnectionError
from models import DatabaseManager


TEST_CONFIG = {
    'SECRET_KEY': 'test-secret-key',
    'JWT_SECRET_KEY': 'test-jwt-secret-key',
    'APP_URL': 'https://panel.example.com',
    'PAYPAL_CLIENT_ID': 'paypal-client',
    'PAYPAL_CLIENT_SECRET': 'paypal-secret',
    'PAYPAL_MODE': 'sandbox',
    'PAYPAL_COST': '2.50',
    'GATEWAY_CURRENCY': 'eur',
    'STORE_REDIRECT_URL': '/store',
}


class FakeDaemon:
    """Stands in for DaemonClient; records calls and fails the ones listed in fail_on"""

    def __init__(self):
        self.calls = []
        self.fail_on = set()

    def _call(self, name, node, *args):
        self.calls.append((name, node['id']) + args)
        if name in self.fail_on:
            raise DaemonConnectionError(f"Unable to connect to the daemon on node '{node['name']}'.")

    def get_system_information(self, node):
        self._call('system', node)
        return {'version': '1.11.0', 'os': 'linux'}

    def request_archive(self, node, server):
        self._call('archive', node, server['uuid'])

    def notify_transfer(self, node, payload):
        self._call('transfer', node, payload)

    def names(self):
        return [call[0] for call in self.calls]


class EventRecorder:
    """Collects socketio.emit calls"""

    def __init__(self):
        self.events = []

    def emit(self, event, payload, to=None, **kwargs):
        self.events.append((event, payload, to))

    def named(self, event):
        return [e for e in self.events if e[0] == event]


class PanelFactory:
    """Creates users, nodes, allocations and servers through the models"""

    def __init__(self, coordinator):
        self.coordinator = coordinator
        self._nodes = 0

    def user(self, username='client', admin=False, balance=0):
        user_id = self.coordinator.user_model.create(
            username, f'{username}@example.com', 'password123', root_admin=admin, store_balance=balance
        )
        return self.coordinator.user_model.get(user_id)

    def node(self, name=None, memory=4096, disk=20480, memory_overallocate=0, disk_overallocate=0,
             ports=(25565, 25566, 25567)):
        """Returns (node, [allocation ids])"""
        self._nodes += 1
        name = name or f'node-{self._nodes}'
        node_id = self.coordinator.node_model.create({
            'name': name,
            'fqdn': f'{name}.example.com',
            'daemon_token_id': f'tokenid{self._nodes}',
            'daemon_token': f'daemon-secret-{self._nodes}-0123456789abcdef',
            'memory': memory,
            'memory_overallocate': memory_overallocate,
            'disk': disk,
            'disk_overallocate': disk_overallocate,
        })
        allocations = [self.coordinator.allocation_model.create(node_id, '10.0.0.1', port) for port in ports]
        return self.coordinator.node_model.get(node_id), allocations

    def server(self, owner, node, allocation_id, memory=1024, disk=5120, status=None, additional=()):
        server_id = self.coordinator.server_model.create({
            'name': 'Survival',
            'owner_id': owner['id'],
            'node_id': node['id'],
            'allocation_id': allocation_id,
            'memory': memory,
            'disk': disk,
            'status': status,
        })
        if additional:
            self.coordinator.allocation_model.assign_to_server(additional, server_id)
        return self.coordinator.server_model.get(server_id)


@pytest.fixture
def config():
    return PanelConfig(env_file='missing_test_env.env', overrides=TEST_CONFIG)


@pytest.fixture
def db_manager(tmp_path):
    return DatabaseManager(str(tmp_path / 'panel.db'))


@pytest.fixture
def daemon():
    return FakeDaemon()


@pytest.fixture
def events():
    return EventRecorder()


@pytest.fixture
def app(config, db_manager, daemon, events):
    app, _ = create_app(config, db_manager, daemon_client=daemon, start_background=False)
    app.config['TESTING'] = True

    coordinator = app.extensions['nodeforge']
    coordinator.transfer_service.socketio = events
    coordinator.paypal_service.socketio = events
    coordinator.store_service.socketio = events
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def coordinator(app):
    return app.extensions['nodeforge']


@pytest.fixture
def panel(coordinator):
    return PanelFactory(coordinator)


@pytest.fixture
def auth_headers(app):
    def _headers(user):
        token, _ = generate_token(user)
        return {'Authorization': f'Bearer {token}'}
    return _headers


@pytest.fixture
def daemon_headers():
    def _headers(node):
        return {'Authorization': f"Bearer {node['daemon_token_id']}.{node['daemon_token']}"}
    return _headers


@pytest.fixture
def transfer_setup(panel):
    """Admin, a server on a source node with one extra allocation, and an empty target node"""
    admin = panel.user('admin', admin=True)
    source, source_allocations = panel.node('source')
    target, target_allocations = panel.node('target', ports=(27015, 27016, 27017))
    server = panel.server(admin, source, source_allocations[0], additional=[source_allocations[1]])
    return {
        'admin': admin,
        'source': source,
        'source_allocations': source_allocations,
        'target': target,
        'target_allocations': target_allocations,
        'server': server,
    }
