# tests/conftest.py
import pytest

from bitforex_connector.exchange.bitforex import BitforexExchange
from bitforex_connector.exchange.config import ConnectorConfig, Credentials
from tests.fixtures.bitforex_fakes import NOW_MS, FakeTransport


@pytest.fixture(autouse=True)
def _no_env_credentials(monkeypatch):
    """Keep developer credentials out of test runs."""
    monkeypatch.delenv("BITFOREX_API_KEY", raising=False)
    monkeypatch.delenv("BITFOREX_API_SECRET", raising=False)
    monkeypatch.delenv("BITFOREX_CONFIG", raising=False)


@pytest.fixture
def credentials():
    return Credentials(api_key="test-key", api_secret="test-secret")


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def exchange(fake_transport, credentials):
    config = ConnectorConfig(credentials=credentials)
    return BitforexExchange(config=config, transport=fake_transport, clock=lambda: NOW_MS)


@pytest.fixture
def public_exchange(fake_transport):
    return BitforexExchange(transport=fake_transport, clock=lambda: NOW_MS)
