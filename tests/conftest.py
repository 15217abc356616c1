import pytest
from fastapi.testclient import TestClient

from config import Settings
from db import Database
from estimator import FixedMultiplierEstimator
from main import create_app

TESTLAND = {
    "name": "Testland",
    "capital": "Test City",
    "region": "TestRegion",
    "population": 1000,
    "currencies": [{"code": "TST", "name": "Test dollar", "symbol": "T"}],
    "flag": "http://x/flag.svg",
}


class FakeSources:
    """Stands in for service.fetch_sources; swap ``countries``/``rates`` or set ``error``."""

    def __init__(self, countries=None, rates=None):
        self.countries = countries if countries is not None else [dict(TESTLAND)]
        self.rates = rates if rates is not None else {"TST": 2}
        self.error = None
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.countries, self.rates


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def session(database):
    s = database.session()
    yield s
    s.close()


@pytest.fixture
def sources():
    return FakeSources()


def _make_client(sources, estimator=None):
    app = create_app(Settings(database_url="sqlite://"), fetcher=sources, estimator=estimator)
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def client(sources):
    with _make_client(sources) as c:
        yield c


@pytest.fixture
def fixed_client(sources):
    with _make_client(sources, FixedMultiplierEstimator(1500)) as c:
        yield c
