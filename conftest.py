"""
PyTest Configuration for the Storefront API
Provides fixtures for testing with a throwaway database and signed tokens.

Uses SQLite for tests instead of PostgreSQL so they run without an external DB.
"""
import os

# Must be set before main/config.database are imported
TEST_DATABASE_URL = os.getenv('TEST_DATABASE_URL', 'sqlite:///./test.db')
os.environ.setdefault('DATABASE_URL', TEST_DATABASE_URL)
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret-key-for-storefront-tests')
os.environ.setdefault('UPLOAD_DIR', './test-public-assets')

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient
from config.database import Base, get_db
from main import app

# SQLite needs check_same_thread=False for FastAPI's threaded test client
connect_args = {"check_same_thread": False, "timeout": 30} if "sqlite" in TEST_DATABASE_URL else {}
test_engine = create_engine(TEST_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


# Enable foreign keys for SQLite
@event.listens_for(test_engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    if "sqlite" in TEST_DATABASE_URL:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database for each test.
    """
    Base.metadata.create_all(bind=test_engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    FastAPI TestClient with overridden database dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def make_token(user_id, email=None, **claims):
    import jwt
    from main import JWT_SECRET, JWT_ALGORITHM

    payload = {"sub": user_id, **claims}
    if email:
        payload["email"] = email
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


@pytest.fixture
def auth_headers():
    """
    Bearer token for the retailer created by `sample_retailer`.
    """
    token = make_token("test_user_id", email="owner@teststore.com")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers():
    """Bearer token for a second, unrelated retailer."""
    token = make_token("other_user_id", email="owner@otherstore.com")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def sample_retailer(db_session):
    """Create a sample retailer for testing."""
    from models import Retailer

    retailer = Retailer(
        user_id="test_user_id",
        name="Test Store",
        email="owner@teststore.com",
        theme="default",
    )
    db_session.add(retailer)
    db_session.commit()
    db_session.refresh(retailer)
    return retailer


@pytest.fixture
def other_retailer(db_session):
    from models import Retailer

    retailer = Retailer(
        user_id="other_user_id",
        name="Other Store",
        email="owner@otherstore.com",
        theme="modern",
    )
    db_session.add(retailer)
    db_session.commit()
    db_session.refresh(retailer)
    return retailer


@pytest.fixture
def sample_product(db_session, sample_retailer):
    """Create a sample product (stock 20, price 100.00) for testing."""
    from product.models import Product

    product = Product(
        retailer_id=sample_retailer.id,
        name="Test Widget",
        description="A widget for tests",
        price=100.00,
        stock=20,
        category="Widgets",
        is_active=True,
    )
    db_session.add(product)
    db_session.commit()
    db_session.refresh(product)
    return product


@pytest.fixture
def sample_order(db_session, sample_retailer, sample_product):
    """Create a pending order for 2 units of the sample product."""
    from orders.models import Order

    order = Order(
        retailer_id=sample_retailer.id,
        product_id=sample_product.id,
        customer_name="Jane Customer",
        customer_email="jane@example.com",
        quantity=2,
        unit_price=100.00,
        total_amount=200.00,
        status="pending",
    )
    db_session.add(order)
    db_session.commit()
    db_session.refresh(order)
    return order


@pytest.fixture
def temp_storage(tmp_path):
    """Point the app's object storage at a temporary directory."""
    from uploads.storage import LocalObjectStorage

    original = app.state.storage
    app.state.storage = LocalObjectStorage(str(tmp_path), "http://testserver/public-assets")
    yield app.state.storage
    app.state.storage = original


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
