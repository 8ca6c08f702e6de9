import pytest

from alloy_core import api, http_client
from alloy_core.state import Credentials, Token

from tests.fakes import BASE_URL, FakeClock, FakeSession


@pytest.fixture
def session(monkeypatch):
    fake = FakeSession()
    monkeypatch.setattr(http_client, "http", fake)
    # reset_session() hands back the same scripted session
    monkeypatch.setattr(http_client, "create_session", lambda: fake)
    return fake


@pytest.fixture
def clock(monkeypatch):
    fake = FakeClock()
    monkeypatch.setattr(api, "time", fake)
    return fake


@pytest.fixture
def credentials():
    return Credentials("agent-client", "s3cret")


@pytest.fixture
def token():
    return Token()


@pytest.fixture
def valid_token(clock):
    return Token(
        access_token="tok-0",
        token_type="Bearer",
        expires_in=3600,
        issued_at=clock.now,
    )


@pytest.fixture
def base_url():
    return BASE_URL
