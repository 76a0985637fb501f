"""
Pytest fixtures for BillCraft backend tests.

Provides test database setup, two separate accounts, storage helpers and
the test client.
"""

from decimal import Decimal

import pytest
from billcraft import create_app
from billcraft.extensions import db
from billcraft.services import auth_service, session_service
from billcraft.services.cart_service import CARTS_EXTENSION_KEY
from billcraft.storage import get_storage

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'STORAGE_BACKEND': 'sql',
    'DEMO_MODE': False,
    'BCRYPT_LOG_ROUNDS': 4,
    'EXPOSE_ONE_TIME_CODES': True,
}

PASSWORD = "secret123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database (and empty carts) for each test."""
    with app.app_context():
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        app.extensions.pop(CARTS_EXTENSION_KEY, None)

        yield db.session

        db.session.rollback()


@pytest.fixture(scope='function')
def storage(db_session):
    return get_storage()


@pytest.fixture(scope='function')
def user_a(db_session):
    """Account A."""
    return auth_service.sign_up("owner_a@example.com", PASSWORD)


@pytest.fixture(scope='function')
def user_b(db_session):
    """Account B."""
    return auth_service.sign_up("owner_b@example.com", PASSWORD)


@pytest.fixture(scope='function')
def token_a(user_a):
    _, token = session_service.create_session(user_a.id)
    return token


@pytest.fixture(scope='function')
def token_b(user_b):
    _, token = session_service.create_session(user_b.id)
    return token


def make_product(storage, owner_id: int, **overrides) -> dict:
    """Insert a product directly through storage."""
    record = {
        "name": "Widget",
        "sku": f"SKU-{overrides.get('name', 'Widget')}".upper().replace(" ", "-"),
        "price": Decimal("100.00"),
        "stock": 10,
        "low_stock_threshold": 10,
    }
    record.update(overrides)
    return storage.products.insert(owner_id, record)


def get_auth_token(client, email: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for an account."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
