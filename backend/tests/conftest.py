"""
Shared fixtures for the shop ledger tests.

One app on in-memory SQLite for the whole run; every test starts from
empty tables and gets a LedgerStore bound to the app's session.
"""

import pytest
from shopledger import create_app
from shopledger.extensions import db
from shopledger.services.ledger_store import LedgerStore


TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'CURRENCY_SYMBOL': '$',
    'LOG_LEVEL': 'DEBUG',
}


def _wipe_tables():
    # Children first so foreign keys never dangle mid-wipe
    for table in reversed(db.metadata.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()
    db.session.expunge_all()


@pytest.fixture(scope='session')
def app():
    app = create_app(TEST_CONFIG)
    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db_session(app):
    """Empty ledger tables; rolls back anything left uncommitted."""
    _wipe_tables()
    yield db.session
    db.session.rollback()


@pytest.fixture
def store(db_session):
    return LedgerStore(db_session)


@pytest.fixture
def product_a(store):
    """Product A: 10 units at 5.00."""
    return store.add_product("A", "Product A", unit_price_cents=500, starting_stock=10)


@pytest.fixture
def product_b(store):
    """Product B: 4 units at 10.00."""
    return store.add_product("B", "Product B", unit_price_cents=1000, starting_stock=4)
