"""
Pytest fixtures for the order ledger backend tests.

Provides the test database, actor profiles, a small catalog with courier
rates, and the Flask test client with X-Actor-Id headers.
"""

import pytest
from wholesale import create_app
from wholesale.extensions import db
from wholesale.models import CourierRate, Product, Profile
from wholesale.services import catalog_service, inventory_service
from wholesale.services.identity_service import actor_from_profile


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'LOG_LEVEL': 'WARNING',
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
        # Bulk deletes bypass mapper events
        catalog_service.invalidate()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def _profile(db_session, actor_id, name, role, rate_bps=3000):
    profile = Profile(
        id=actor_id,
        display_name=name,
        role=role,
        commission_rate_bps=rate_bps,
        is_active=True,
    )
    db_session.add(profile)
    db_session.commit()
    return profile


@pytest.fixture(scope='function')
def owner_profile(db_session):
    return _profile(db_session, "u_owner", "Olivia Owner", "owner")


@pytest.fixture(scope='function')
def admin_profile(db_session):
    return _profile(db_session, "u_admin", "Adrian Admin", "admin")


@pytest.fixture(scope='function')
def staff_a_profile(db_session):
    return _profile(db_session, "u_staff_a", "Sam Staff", "staff")


@pytest.fixture(scope='function')
def staff_b_profile(db_session):
    return _profile(db_session, "u_staff_b", "Bea Staff", "staff", rate_bps=2500)


@pytest.fixture(scope='function')
def owner(owner_profile):
    return actor_from_profile(owner_profile)


@pytest.fixture(scope='function')
def admin(admin_profile):
    return actor_from_profile(admin_profile)


@pytest.fixture(scope='function')
def staff_a(staff_a_profile):
    return actor_from_profile(staff_a_profile)


@pytest.fixture(scope='function')
def staff_b(staff_b_profile):
    return actor_from_profile(staff_b_profile)


@pytest.fixture(scope='function')
def catalog(db_session):
    """
    Products (cents):
    - SHIRT: apparel, cost 60.00, price 100.00
    - MUG:   homeware, cost 45.00, price 80.00
    - TOTE:  bags, cost 70.00, price 125.00
    - OLD:   archived
    """
    products = {
        "SHIRT": Product(sku="SHIRT", name="Shirt", category="apparel",
                         unit_cost_cents=6000, sell_price_cents=10000, is_active=True),
        "MUG": Product(sku="MUG", name="Mug", category="homeware",
                       unit_cost_cents=4500, sell_price_cents=8000, is_active=True),
        "TOTE": Product(sku="TOTE", name="Tote", category="bags",
                        unit_cost_cents=7000, sell_price_cents=12500, is_active=True),
        "OLD": Product(sku="OLD", name="Retired", category="apparel",
                       unit_cost_cents=1000, sell_price_cents=2000, is_active=False),
    }
    db_session.add_all(products.values())
    db_session.commit()
    return products


@pytest.fixture(scope='function')
def rates(db_session):
    """Luzon and Visayas configured; Mindanao deliberately missing."""
    db_session.add_all([
        CourierRate(region="luzon", cost_cents=12000),
        CourierRate(region="visayas", cost_cents=15000),
    ])
    db_session.commit()


@pytest.fixture(scope='function')
def stocked(catalog, owner):
    """20 units of every active product."""
    for sku in ("SHIRT", "MUG", "TOTE"):
        inventory_service.adjust(sku, 20, actor=owner, reason="opening_stock")
    return catalog


def actor_headers(actor_id: str) -> dict:
    """Helper to create identity gateway headers."""
    return {'X-Actor-Id': actor_id}


@pytest.fixture(scope='function')
def owner_headers(owner):
    return actor_headers(owner.id)


@pytest.fixture(scope='function')
def staff_a_headers(staff_a):
    return actor_headers(staff_a.id)


@pytest.fixture(scope='function')
def staff_b_headers(staff_b):
    return actor_headers(staff_b.id)
