import os
import pathlib
import sys
from datetime import datetime, timezone

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
os.environ.setdefault("APP_ENV", "test")

import pytest

from minerent import create_app
from minerent.models.store import Store
from minerent.models.tier import TierCatalog, TierSpec
from minerent.services.rental_service import RentalService
from minerent.utils.clock import FrozenClock

T0 = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FrozenClock(T0)


@pytest.fixture
def catalog():
    """Small synthetic catalog; 'epic' matches the worked example (0.8/h, 15/day)."""
    return TierCatalog([
        TierSpec("free", hourly_rate=0.1, base_daily_price=0, name="Basic Miner"),
        TierSpec("epic", hourly_rate=0.8, base_daily_price=15, name="Epic Miner"),
        TierSpec("super", hourly_rate=8, base_daily_price=2500, name="Super Miner"),
    ])


@pytest.fixture
def store():
    """Fresh in-memory store (no file)."""
    return Store()


@pytest.fixture
def service(store, catalog, clock):
    return RentalService(store=store, catalog=catalog, clock=clock)


@pytest.fixture
def alice(store):
    return store.create_user("alice", 1000.0)


@pytest.fixture
def bob(store):
    return store.create_user("bob", 1000.0)


@pytest.fixture
def client(store, catalog, clock):
    app = create_app({"TESTING": True, "APP_ENV": "test"},
                     store=store, catalog=catalog, clock=clock)
    with app.test_client() as c:
        yield c
