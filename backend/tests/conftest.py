"""
Pytest fixtures for Polimarket backend tests.

Provides test database setup, party/product fixtures, and test client.
"""

from decimal import Decimal

import pytest
from polimarket import create_app
from polimarket.extensions import db
from polimarket.models import Party, PartyProfile
from polimarket.services import party_service, products_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'WRITE_RETRY_ATTEMPTS': 1,
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
def seller(db_session):
    """Active seller; initial stock is attributed to the first one."""
    return party_service.create_party(
        name="Main Seller",
        document="S-0001",
        profile="SELLER",
    )


@pytest.fixture(scope='function')
def customer(db_session):
    """Active customer."""
    return party_service.create_party(
        name="Ana Customer",
        document="C-0001",
        profile="CUSTOMER",
        email="ana@example.com",
    )


@pytest.fixture(scope='function')
def inactive_customer(db_session):
    """Customer that exists but may not take part in new operations."""
    party = Party(
        name="Old Customer",
        document="C-0999",
        profile=PartyProfile.CUSTOMER,
        is_active=False,
    )
    db_session.add(party)
    db_session.commit()
    return party


@pytest.fixture(scope='function')
def make_product(seller):
    """Factory that creates a product through provisioning and returns its id."""
    def _make(name="Widget", unit_price="100.00", initial_quantity=10, sale_unit="unit"):
        receipt = products_service.create_product(
            name=name,
            sale_unit=sale_unit,
            unit_price=Decimal(unit_price),
            initial_quantity=initial_quantity,
        )
        return receipt.id

    return _make


@pytest.fixture(scope='function')
def product_id(make_product):
    """Product with 10 units available at 100.00."""
    return make_product()
