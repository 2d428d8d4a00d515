"""DaemonClient against a monkeypatched requests"""

import pytest
import requests

import daemon as daemon_module
from daemon import DaemonClient
from exceptions import DaemonConnectionError


NODE = {
    'id': 1,
    'name': 'node-1',
    'scheme': 'https',
    'fqdn': 'node1.example.com',
    'daemon_listen': 8080,
    'daemon_token': 'daemon-secret',
}
SERVER = {'uuid': 'a1b2c3d4-0000-4000-8000-000000000001'}


class _Response:
    def __init__(self, status_code, data=None):
        self.status_code = status_code
        self._data = data

    def json(self):
        if self._data is None:
            raise ValueError('no json')
        return self._data


@pytest.fixture
def sent(monkeypatch):
    """Captures outgoing requests; set sent.response to control the answer"""
    class Sent(list):
        response = _Response(200, {'version': '1.11.0'})

    calls = Sent()

    def fake_request(method, url, **kwargs):
        calls.append((method, url, kwargs))
        if isinstance(calls.response, Exception):
            raise calls.response
        return calls.response

    monkeypatch.setattr(daemon_module.requests, 'request', fake_request)
    return calls


def test_system_information_request(sent):
    info = DaemonClient(timeout=7, connect_timeout=3).get_system_information(NODE)

    method, url, kwargs = sent[0]
    assert info == {'version': '1.11.0'}
    assert method == 'GET'
    assert url == 'https://node1.example.com:8080/api/system'
    assert kwargs['headers']['Authorization'] == 'Bearer daemon-secret'
    assert kwargs['timeout'] == (3, 7)


def test_system_information_without_json_body(sent):
    sent.response = _Response(200)
    assert DaemonClient().get_system_information(NODE) == {}


def test_request_archive_url(sent):
    DaemonClient().request_archive(NODE, SERVER)
    method, url, _ = sent[0]
    assert method == 'POST'
    assert url == f"https://node1.example.com:8080/api/servers/{SERVER['uuid']}/archive"


def test_notify_transfer_sends_payload(sent):
    payload = {'server_id': SERVER['uuid'], 'url': 'https://old/api/servers/x/archive', 'token': 'Bearer t'}
    DaemonClient().notify_transfer(NODE, payload)
    method, url, kwargs = sent[0]
    assert (method, url) == ('POST', 'https://node1.example.com:8080/api/transfer')
    assert kwargs['json'] == payload


def test_connection_error_is_wrapped(sent):
    sent.response = requests.ConnectionError('connection refused')

    with pytest.raises(DaemonConnectionError) as exc_info:
        DaemonClient().get_system_information(NODE)

    assert "node-1" in exc_info.value.message
    assert exc_info.value.status is None
    assert isinstance(exc_info.value.__cause__, requests.ConnectionError)


def test_timeout_is_wrapped(sent):
    sent.response = requests.Timeout('read timed out')
    with pytest.raises(DaemonConnectionError):
        DaemonClient().request_archive(NODE, SERVER)


@pytest.mark.parametrize('status', [400, 404, 500, 503])
def test_error_status_is_wrapped(sent, status):
    sent.response = _Response(status, {'error': 'nope'})

    with pytest.raises(DaemonConnectionError) as exc_info:
        DaemonClient().notify_transfer(NODE, {})

    assert exc_info.value.status == status
    assert exc_info.value.status_code == 502
