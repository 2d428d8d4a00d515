"""Login, token refresh and the health check"""


def _login(client, username='admin', password='password123'):
    return client.post('/api/auth/login', json={'username': username, 'password': password})


def test_login_success(client, panel):
    panel.user('admin', admin=True)

    response = _login(client)

    assert response.status_code == 200
    data = response.get_json()
    assert data['token']
    assert data['refresh_token']
    assert data['user']['username'] == 'admin'
    assert 'password_hash' not in data['user']


def test_login_wrong_password(client, panel):
    panel.user('admin')
    response = _login(client, password='wrong')
    assert response.status_code == 401
    assert response.get_json()['code'] == 'INVALID_CREDENTIALS'


def test_login_missing_credentials(client):
    response = client.post('/api/auth/login', json={'username': 'admin'})
    assert response.status_code == 400
    assert response.get_json()['code'] == 'MISSING_CREDENTIALS'


def test_login_requires_json(client):
    response = client.post('/api/auth/login', data={'username': 'admin', 'password': 'x'})
    assert response.status_code == 400


def test_verify_and_me(client, panel):
    panel.user('admin')
    token = _login(client).get_json()['token']
    headers = {'Authorization': f'Bearer {token}'}

    verify = client.get('/api/auth/verify', headers=headers).get_json()
    assert verify['valid'] is True
    assert verify['remaining_seconds'] > 0

    me = client.get('/api/auth/me', headers=headers).get_json()
    assert me['user']['username'] == 'admin'


def test_verify_without_token(client):
    assert client.get('/api/auth/verify').get_json()['valid'] is False


def test_invalid_token_is_rejected(client):
    response = client.get('/api/auth/me', headers={'Authorization': 'Bearer not-a-jwt'})
    assert response.status_code == 401
    assert response.get_json()['code'] == 'INVALID_TOKEN'


def test_refresh_token(client, panel):
    panel.user('admin')
    tokens = _login(client).get_json()

    response = client.post('/api/auth/refresh', json={'refresh_token': tokens['refresh_token']})
    assert response.status_code == 200
    assert response.get_json()['token']


def test_access_token_cannot_refresh(client, panel):
    panel.user('admin')
    tokens = _login(client).get_json()

    response = client.post('/api/auth/refresh', json={'refresh_token': tokens['token']})
    assert response.status_code == 401


def test_refresh_token_cannot_authenticate(client, panel):
    panel.user('admin')
    tokens = _login(client).get_json()

    response = client.get('/api/auth/me', headers={'Authorization': f"Bearer {tokens['refresh_token']}"})
    assert response.status_code == 401


def test_health(client):
    data = client.get('/health').get_json()
    assert data['status'] == 'success'
    assert data['version']
