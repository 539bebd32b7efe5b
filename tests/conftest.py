# tests/conftest.py
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from catalyst.data.database import Base
from catalyst.data.models import KeyValueRecordModel  # noqa: F401
from catalyst.repos.kv_repo import KeyValueRepo
from catalyst.services.persistence import PersistenceSync
from catalyst.services.store_service import StoreService

TODAY = date(2025, 6, 1)
NOW_MS = 1_717_200_000_000


class StubNotifier:
    def __init__(self):
        self.orders = []
        self.products = []

    def send_order_confirmation(self, order):
        self.orders.append(order)

    def announce_new_product(self, product):
        self.products.append(product)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repo(db):
    return KeyValueRepo(db)


@pytest.fixture
def sync(repo):
    return PersistenceSync(repo)


@pytest.fixture
def notifier():
    return StubNotifier()


@pytest.fixture
def make_service(notifier):
    def _make(sync):
        return StoreService(sync, notifier=notifier, today=lambda: TODAY, clock=lambda: NOW_MS)

    return _make


@pytest.fixture
def service(make_service, sync):
    return make_service(sync)
