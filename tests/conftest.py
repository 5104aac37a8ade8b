import pytest
from cleancity import create_app
from cleancity.extensions import db
from cleancity.storage import MemStorage

@pytest.fixture
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture(params=['memory', 'database'])
def storage(request):
    """Each storage backend inside an app context, for contract tests."""
    backend = MemStorage() if request.param == 'memory' else None
    app = create_app('testing', storage=backend)
    with app.app_context():
        yield app.extensions['cleancity.storage']
        db.session.remove()
        db.drop_all()

@pytest.fixture
def lifecycle(storage):
    from flask import current_app
    return current_app.extensions['cleancity.lifecycle']

def make_user_data(email='citizen@example.com', city='New York', **overrides):
    data = {
        'email': email,
        'full_name': 'Test Citizen',
        'password': 'hashed',
        'phone': '555-0100',
        'dob': '1990-01-01',
        'address': '1 Main St',
        'city': city,
        'state': 'NY',
        'pincode': '10001',
    }
    data.update(overrides)
    return data

def make_report_data(user_id, **overrides):
    data = {
        'user_id': user_id,
        'title': 'Overflowing bins',
        'description': 'Bins on the corner have not been emptied',
        'address': '5th Ave & 42nd St',
        'latitude': '40.7527',
        'longitude': '-73.9772',
        'photo': 'https://img.example.com/1.jpg',
    }
    data.update(overrides)
    return data

@pytest.fixture
def register(client):
    """Register an account over HTTP and return its access token."""
    def _register(email, city='New York', role='user', secret_code=None, password='Password123!'):
        payload = {
            'fullName': email.split('@')[0],
            'email': email,
            'password': password,
            'phone': '555-0100',
            'dob': '1990-01-01',
            'address': '1 Main St',
            'city': city,
            'state': 'NY',
            'pincode': '10001',
            'role': role,
        }
        if secret_code:
            payload['secretCode'] = secret_code
        response = client.post('/api/auth/register', json=payload)
        assert response.status_code == 201, response.json
        return response.json['access_token']
    return _register

def auth(token):
    return {'Authorization': f'Bearer {token}'}
