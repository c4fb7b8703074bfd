"""
Pytest fixtures for shopledger backend tests.

Provides an in-memory application, per-test table cleanup, one shop with
staff and catalog items, and a test client.
"""

import pytest

from shopledger import create_app
from shopledger.extensions import db
from shopledger.services import catalog_service, shop_service, staff_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        # Fast hashes; cost does not matter for correctness
        'PASSCODE_BCRYPT_ROUNDS': 4,
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
    """Empty every table before the test; the schema is kept."""
    with app.app_context():
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        db.session.rollback()


@pytest.fixture(scope='function')
def shop(db_session):
    """Shop in UTC so local days match UTC days unless a test says otherwise."""
    return shop_service.create_shop({"name": "Corner Store", "currency": "INR", "timezone": "UTC"})


@pytest.fixture(scope='function')
def other_shop(db_session):
    return shop_service.create_shop({"name": "Other Store", "timezone": "UTC"})


@pytest.fixture(scope='function')
def cashier(shop):
    return staff_service.upsert_staff(shop.id, {"name": "Asha", "passcode": "129"})


@pytest.fixture(scope='function')
def helper(shop):
    return staff_service.upsert_staff(shop.id, {"name": "Ravi", "passcode": "4821"})


@pytest.fixture(scope='function')
def tea(shop):
    """base 100, 10% or 5.00 fixed: discount limit is 10.00."""
    return catalog_service.upsert_item(
        shop.id,
        {
            "name": "Tea Packet",
            "base_price": "100.00",
            "stock_quantity": 20,
            "min_stock_alert": 5,
            "max_discount_percentage": "10",
            "max_discount_fixed": "5.00",
        },
    )


@pytest.fixture(scope='function')
def soap(shop):
    return catalog_service.upsert_item(
        shop.id,
        {"name": "Soap", "base_price": "40.00", "stock_quantity": 2, "min_stock_alert": 3},
    )


@pytest.fixture(scope='function')
def recorded():
    """
    Capture events on both channels for the test.

    Returns the list the events are appended to.
    """
    from shopledger.events import CHANNELS, get_bus

    events = []
    bus = get_bus()
    subs = [bus.subscribe(channel, None, events.append) for channel in CHANNELS]
    yield events
    for sub in subs:
        sub.unsubscribe()
