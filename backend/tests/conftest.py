"""
Pytest fixtures for FLOUZ backend tests.

Every app-level test runs twice: once against the in-memory storage and once
against Flask-SQLAlchemy on an in-memory SQLite database.
"""

import pytest

from flouz import create_app
from flouz.config import TestingConfig
from flouz.extensions import db
from flouz.services import account_service, catalog_service


PASSWORD = "Password123!"


def _testing_config(backend: str) -> dict:
    config = {
        key: getattr(TestingConfig, key)
        for key in dir(TestingConfig)
        if key.isupper()
    }
    config["STORAGE_BACKEND"] = backend
    config["TELEGRAM_API_BASE"] = "https://telegram.test"
    return config


@pytest.fixture(params=["memory", "database"])
def app(request):
    """Create application for testing, once per storage backend."""
    app = create_app(_testing_config(request.param))

    with app.app_context():
        yield app
        if request.param == "database":
            db.session.remove()
            db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def owner(app):
    """Account with Telegram configured and one active employee."""
    account = account_service.create_account(
        email="owner@shop.test",
        password=PASSWORD,
        telegram_chat_id="12345",
        telegram_bot_token="bot-token",
    )
    employee = account_service.create_employee(account_id=account.id, first_name="Alice", last_name="Martin")
    return account, employee


@pytest.fixture
def master(app):
    return account_service.create_account(email="master@shop.test", password=PASSWORD, is_master=True)


@pytest.fixture
def owner_token(client, owner):
    return get_auth_token(client, "owner@shop.test", PASSWORD)


@pytest.fixture
def owner_headers(owner_token):
    return auth_headers(owner_token)


@pytest.fixture
def cashier_headers(client, owner, owner_headers):
    """Owner session with the employee selected, ready to sell."""
    _, employee = owner
    resp = client.post("/api/auth/select-employee", json={"employee_id": employee.id}, headers=owner_headers)
    assert resp.status_code == 200
    return owner_headers


@pytest.fixture
def master_headers(client, master):
    return auth_headers(get_auth_token(client, "master@shop.test", PASSWORD))


@pytest.fixture
def cola(app):
    """Product{price "2.50", stock 5}."""
    category = catalog_service.create_category(name="Boissons")
    return catalog_service.create_product({
        "name": "Coca-Cola",
        "price_cents": 250,
        "category_id": category.id,
        "barcode": "5449000000996",
        "stock": 5,
    })


def get_auth_token(client, email: str, password: str) -> str:
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
