"""
Pytest Configuration and Fixtures
"""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@pytest.fixture(scope='function')
def app():
    """Create application for testing with a fresh in-memory database"""
    from config import TestingConfig
    from app import create_app
    from extensions import db

    test_app = create_app(TestingConfig)

    # The fixture holds one app context for the whole test, which Flask reuses
    # for every test-client request; drop Flask-Login's per-context user cache
    # so each request authenticates from its own headers, as in production.
    @test_app.before_request
    def _reset_login_user_cache():
        from flask import g
        g.pop('_login_user', None)

    with test_app.app_context():
        db.create_all()
        yield test_app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client"""
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app):
    """Create CLI test runner"""
    return app.test_cli_runner()


def _make_user(username, name, role, password):
    from extensions import db
    from models import User

    user = User(username=username, name=name, role=role)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture(scope='function')
def admin_user(app):
    """Admin (panel directivo)"""
    return _make_user('admin', 'Directivo', 'admin', 'adminpassword')


@pytest.fixture(scope='function')
def commercial_user(app):
    """Field sales agent"""
    return _make_user('comercial', 'Comercial', 'commercial', 'password')


@pytest.fixture(scope='function')
def auth_headers(commercial_user):
    """Bearer token headers for the commercial user"""
    from routes.auth import create_token
    return {'Authorization': f'Bearer {create_token(commercial_user.id)}'}


@pytest.fixture(scope='function')
def admin_headers(admin_user):
    """Bearer token headers for the admin user"""
    from routes.auth import create_token
    return {'Authorization': f'Bearer {create_token(admin_user.id)}'}


@pytest.fixture
def sample_visit():
    """Visit payload as sent by the visit form"""
    return {
        'placeId': 'place-1700000000000-0',
        'placeName': 'Restaurante El Olivo',
        'placeAddress': 'Calle de Alcalá 45, Madrid',
        'timestamp': 1700000000000,
        'feedback': 'Interesados en la demo',
        'status': 'propuesta',
        'tags': ['Seguimiento'],
        'location': {'lat': 40.4192, 'lng': -3.6967},
        'durationMinutes': 30,
    }


@pytest.fixture
def simple_cache(app):
    """Swap the NullCache of the testing config for an in-memory cache"""
    from extensions import cache

    app.config['CACHE_TYPE'] = 'SimpleCache'
    cache.init_app(app)
    yield cache
    cache.clear()
