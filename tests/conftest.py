import pytest

import db
import sites
import workers
from models import Site, Worker


@pytest.fixture
def store(tmp_path):
    return db.init_db(tmp_path / "crewledger.db")


@pytest.fixture
def make_worker(store):
    def _make(name="Ramesh Kumar", active=True, role="Mason"):
        return workers.insert_worker(
            store, Worker(None, name, "9800000001", "Nagpur", role, "1234 5678 9012", "2024-01-01", active)
        )
    return _make


@pytest.fixture
def make_site(store):
    def _make(name="Green Valley", status="ACTIVE"):
        return sites.insert_site(
            store, Site(None, name, "Wardha Road", "Mehta Builders", "9811111111", "2024-01-01", None, status)
        )
    return _make
