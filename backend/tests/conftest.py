"""
Pytest fixtures for asset tracker backend tests.

Provides test database setup, users per role with session tokens, and
small factories for employees, categories and assets.
"""

import pytest
from asset_tracker import create_app
from asset_tracker.extensions import db
from asset_tracker.models import User, Employee, Category
from asset_tracker.services.auth_service import hash_password
from asset_tracker.services import session_service, lifecycle_service


TEST_PASSWORD = "secret123"

# bcrypt is deliberately slow; hash once per run and reuse
_password_hash = None


def _cached_hash() -> str:
    global _password_hash
    if _password_hash is None:
        _password_hash = hash_password(TEST_PASSWORD)
    return _password_hash


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'UPLOAD_FOLDER': str(tmp_path_factory.mktemp('uploads')),
    })

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
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def _make_user(db_session, name: str, email: str, role: str, status: str = "active") -> User:
    user = User(name=name, email=email, password_hash=_cached_hash(), role=role, status=status)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def admin_user(db_session):
    return _make_user(db_session, "Admin User", "admin@assetmanagement.com", "Admin")


@pytest.fixture(scope='function')
def manager_user(db_session):
    return _make_user(db_session, "Manager User", "manager@assetmanagement.com", "Manager")


@pytest.fixture(scope='function')
def employee_user(db_session):
    """Login account whose email matches the `employee` fixture record."""
    return _make_user(db_session, "John Doe", "john.doe@company.com", "Employee")


def _headers_for(user: User) -> dict:
    _, token = session_service.create_session(user.id)
    return auth_headers(token)


@pytest.fixture(scope='function')
def admin_headers(admin_user):
    return _headers_for(admin_user)


@pytest.fixture(scope='function')
def manager_headers(manager_user):
    return _headers_for(manager_user)


@pytest.fixture(scope='function')
def employee_headers(employee_user):
    return _headers_for(employee_user)


@pytest.fixture(scope='function')
def employee(db_session):
    """Active employee EMP001."""
    emp = Employee(
        employee_id="EMP001",
        name="John Doe",
        email="john.doe@company.com",
        department="IT",
        designation="Software Engineer",
    )
    db_session.add(emp)
    db_session.commit()
    return emp


@pytest.fixture(scope='function')
def inactive_employee(db_session):
    emp = Employee(
        employee_id="EMP099",
        name="Former Staff",
        email="former@company.com",
        department="Finance",
        status="inactive",
    )
    db_session.add(emp)
    db_session.commit()
    return emp


@pytest.fixture(scope='function')
def category(db_session):
    cat = Category(name="Laptop", code="LAP", description="Laptop computers")
    db_session.add(cat)
    db_session.commit()
    return cat


@pytest.fixture(scope='function')
def make_asset(db_session, category, admin_user):
    """Factory: register an asset (with its Purchase record) and return its dict."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        payload = {
            "assetTag": f"AST-{counter['n']:04d}",
            "serialNumber": f"SN-{counter['n']:06d}",
            "categoryId": category.id,
            "make": "Dell",
            "model": "Latitude 5440",
            "purchasePrice": "1200.00",
        }
        payload.update(overrides)
        return lifecycle_service.register_asset(payload, performed_by=admin_user.id)

    return _make


def get_auth_token(client, email: str, password: str = TEST_PASSWORD) -> str:
    """Helper to get auth token for a user."""
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
