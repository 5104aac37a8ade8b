import pytest
from cleancity.storage import get_storage
from conftest import auth

@pytest.fixture
def ny_code(app):
    with app.app_context():
        get_storage().create_admin_secret_code('ADMIN123', 'New York')

def test_register(client):
    response = client.post('/api/auth/register', json={
        'fullName': 'Test User',
        'email': 'Test@Example.com',
        'password': 'Password123!',
        'city': 'New York',
    })
    assert response.status_code == 201
    user = response.json['user']
    assert user['email'] == 'test@example.com'
    assert user['role'] == 'user'
    assert user['rewardPoints'] == 0
    assert user['isActive'] is True
    assert 'password' not in user
    assert 'access_token' in response.json

def test_register_ignores_privileged_fields(client):
    response = client.post('/api/auth/register', json={
        'fullName': 'Greedy',
        'email': 'greedy@example.com',
        'password': 'Password123!',
        'city': 'New York',
        'rewardPoints': 10000,
        'isActive': False,
    })
    assert response.status_code == 201
    assert response.json['user']['rewardPoints'] == 0
    assert response.json['user']['isActive'] is True

def test_register_missing_fields(client):
    response = client.post('/api/auth/register', json={'email': 'x@example.com'})
    assert response.status_code == 400
    assert 'fullName' in response.json['error']

def test_register_duplicate_email(client, register):
    register('dup@example.com')
    response = client.post('/api/auth/register', json={
        'fullName': 'Again',
        'email': 'DUP@example.com',
        'password': 'Password123!',
        'city': 'New York',
    })
    assert response.status_code == 409
    assert response.json['kind'] == 'already_exists'

def test_login(client, register):
    register('login@example.com')
    response = client.post('/api/auth/login', json={
        'email': 'LOGIN@example.com',
        'password': 'Password123!'
    })
    assert response.status_code == 200
    assert 'access_token' in response.json
    assert response.json['user']['email'] == 'login@example.com'

def test_login_invalid(client):
    response = client.post('/api/auth/login', json={
        'email': 'wrong@example.com',
        'password': 'wrong'
    })
    assert response.status_code == 401
    assert response.json['error'] == 'Invalid credentials'

def test_login_wrong_role(client, register):
    register('citizen@example.com')
    response = client.post('/api/auth/login', json={
        'email': 'citizen@example.com',
        'password': 'Password123!',
        'role': 'admin'
    })
    assert response.status_code == 403

def test_me(client, register):
    token = register('me@example.com', city='Chicago')
    response = client.get('/api/auth/me', headers=auth(token))
    assert response.status_code == 200
    assert response.json['email'] == 'me@example.com'
    assert response.json['city'] == 'Chicago'

def test_me_requires_token(client):
    assert client.get('/api/auth/me').status_code == 401
    assert client.get('/api/auth/me', headers=auth('garbage')).status_code == 401

def test_logout(client):
    assert client.post('/api/auth/logout').status_code == 200

def test_register_admin_with_code(client, ny_code, register):
    token = register('boss@city.gov', role='admin', secret_code='ADMIN123')
    response = client.get('/api/auth/me', headers=auth(token))
    assert response.json['role'] == 'admin'

def test_admin_code_single_use(client, ny_code, register):
    register('boss@city.gov', role='admin', secret_code='ADMIN123')
    response = client.post('/api/auth/register', json={
        'fullName': 'Second Boss',
        'email': 'boss2@city.gov',
        'password': 'Password123!',
        'city': 'New York',
        'role': 'admin',
        'secretCode': 'ADMIN123',
    })
    assert response.status_code == 409
    assert response.json['kind'] == 'admin_code_used'

@pytest.mark.parametrize('code, city, kind', [
    ('WRONG', 'New York', 'admin_code_not_found'),
    ('ADMIN123', 'Chicago', 'admin_code_city_mismatch'),
])
def test_register_admin_rejected(client, ny_code, code, city, kind):
    response = client.post('/api/auth/register', json={
        'fullName': 'Boss',
        'email': 'boss@city.gov',
        'password': 'Password123!',
        'city': city,
        'role': 'admin',
        'secretCode': code,
    })
    assert response.status_code == 400
    assert response.json['kind'] == kind

def test_register_admin_requires_code(client):
    response = client.post('/api/auth/register', json={
        'fullName': 'Boss',
        'email': 'boss@city.gov',
        'password': 'Password123!',
        'city': 'New York',
        'role': 'admin',
    })
    assert response.status_code == 400

def test_deactivated_user_cannot_login(client, app, register):
    token = register('gone@example.com')
    with app.app_context():
        storage = get_storage()
        user = storage.get_user_by_email('gone@example.com')
        storage.update_user(user.id, {'is_active': False})

    response = client.post('/api/auth/login', json={
        'email': 'gone@example.com',
        'password': 'Password123!'
    })
    assert response.status_code == 403
    assert client.get('/api/auth/me', headers=auth(token)).status_code == 401
