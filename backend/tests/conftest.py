"""Pytest configuration and fixtures."""

import os

# Keep the app's own engine off the developer database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from barcount.db.base import Base
from barcount.db.session import get_db
from barcount.main import app
from barcount.models.supplier import Supplier
from barcount.models.product import Product as ProductRow
from barcount.schemas.product import Product
from barcount.services.repository import product_cache

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(autouse=True)
def clear_product_cache():
    """The product cache is process wide; every test starts from an empty one."""
    product_cache.clear()
    yield
    product_cache.clear()


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    # Don't raise server exceptions so we can test error status codes
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def test_supplier(db_session: Session) -> Supplier:
    """Create a test supplier."""
    supplier = Supplier(
        name="Test Supplier",
        contact_phone="+7 900 000 00 00",
        contact_email="supplier@example.com",
    )
    db_session.add(supplier)
    db_session.commit()
    db_session.refresh(supplier)
    return supplier


@pytest.fixture
def test_product(db_session: Session, test_supplier: Supplier) -> ProductRow:
    """Create a stored product with a reorder rule."""
    product = ProductRow(
        name="Jameson",
        bottle_volume_ml=700,
        cost_per_bottle=1400,
        selling_price_per_portion=350,
        portion_volume_ml=40,
        reorder_point_ml=500,
        reorder_quantity=6,
        default_supplier_id=test_supplier.id,
    )
    db_session.add(product)
    db_session.commit()
    db_session.refresh(product)
    return product


@pytest.fixture
def make_product():
    """Factory for validated product schemas with sensible bar defaults."""
    def _make(product_id: str = "p1", **overrides) -> Product:
        data = {
            "id": product_id,
            "name": f"Product {product_id}",
            "bottle_volume_ml": 700,
            "cost_per_bottle": 1400,
            "selling_price_per_portion": 350,
            "portion_volume_ml": 40,
        }
        data.update(overrides)
        return Product(**data)
    return _make
