"""
Pytest fixtures for dronemart backend tests.

Provides the in-memory app, a per-test table wipe, factories for users,
businesses and products, and helpers that mint bearer headers.
"""

import pytest
from dronemart import create_app
from dronemart.extensions import db
from dronemart.models import Admin, Business, Drone, Product, User
from dronemart.services.auth_service import hash_password
from dronemart.services.credential_service import CredentialCodec, CredentialSettings
from dronemart.time_utils import epoch_seconds


TEST_PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_ENGINE_OPTIONS': {},
        'CREDENTIAL_SECRET': 'test-credential-secret',
        'BCRYPT_ROUNDS': 4,
        'REQUEST_LOGGING': False,
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


@pytest.fixture(scope='function')
def codec(app):
    """The codec the app verifies credentials with."""
    return app.extensions["credential_codec"]


@pytest.fixture(scope='function')
def codec_at(app):
    """Build a codec that shares the app's key but runs on a shifted clock."""
    settings = CredentialSettings.from_config(app.config)

    def build(offset_seconds: int) -> CredentialCodec:
        return CredentialCodec(settings, clock=lambda: epoch_seconds() + offset_seconds)

    return build


@pytest.fixture(scope='function')
def make_user(db_session):
    """Factory: create a user (active by default)."""
    counter = {"n": 0}

    def create(username=None, active=True, admin=False):
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        user = User(
            username=username,
            name="Test",
            lastname=username.capitalize(),
            email=f"{username}@example.com",
            password_hash=hash_password(TEST_PASSWORD),
            is_active=active,
        )
        db_session.add(user)
        db_session.flush()
        if admin:
            db_session.add(Admin(user_id=user.id))
        db_session.commit()
        return user

    return create


@pytest.fixture(scope='function')
def make_business(db_session):
    """Factory: create a business for an owner (verified by default)."""
    def create(owner, verified=True, active=True, name="Sky Bakery"):
        business = Business(
            name=name,
            description="Fresh bread by air",
            owner_id=owner.id,
            is_verified=verified,
            is_active=active,
        )
        db_session.add(business)
        db_session.commit()
        return business

    return create


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: create a product (10.00, active by default)."""
    def create(business, price_cents=1000, active=True, name="Baguette"):
        product = Product(
            business_id=business.id,
            name=name,
            price_cents=price_cents,
            is_active=active,
        )
        db_session.add(product)
        db_session.commit()
        return product

    return create


@pytest.fixture(scope='function')
def make_drone(db_session):
    """Factory: create a drone for an owner."""
    counter = {"n": 100}

    def create(owner, active=True, number=None):
        counter["n"] += 1
        drone = Drone(
            name=f"Drone {counter['n']}",
            number=number if number is not None else counter["n"],
            user_id=owner.id,
            is_active=active,
        )
        db_session.add(drone)
        db_session.commit()
        return drone

    return create


@pytest.fixture(scope='function')
def auth_headers(codec):
    """Build Authorization headers carrying a fresh credential for a user."""
    def build(user):
        token = codec.issue(user.id, user.username)
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture(scope='function')
def alice(make_user):
    return make_user("alice")


@pytest.fixture(scope='function')
def bob(make_user):
    return make_user("bob")
