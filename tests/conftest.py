"""Test configuration and fixtures for enriched-events."""

from unittest.mock import Mock

import pytest
import requests

from enriched_events.core.config import Settings, settings

NOW_MILLIS = 1_593_561_600_000  # 2020-07-01T00:00:00Z
HOUR_MILLIS = 3_600_000


@pytest.fixture(autouse=True)
def no_ambient_token(monkeypatch):
    """Keep a token from the developer's environment out of the tests."""
    monkeypatch.delenv("OPTIMIZELY_API_TOKEN", raising=False)
    monkeypatch.delenv("ENRICHED_EVENTS_API_TOKEN", raising=False)
    monkeypatch.setattr(settings, "api_token", None)


@pytest.fixture
def test_settings():
    """Settings with a fixed endpoint and bucket."""
    return Settings(
        api_token=None,
        credentials_url="https://api.example.com/v2/export/credentials",
        bucket="test-bucket",
    )


@pytest.fixture
def credentials_body():
    """A complete token-exchange response body."""
    return {
        "credentials": {
            "accessKeyId": "ASIAEXAMPLE",
            "secretAccessKey": "secret",
            "sessionToken": "session",
            "expiration": NOW_MILLIS + HOUR_MILLIS,
        },
        "s3Path": "s3://test-bucket/v1/account_id=12345/",
    }


def _make_response(body=None, status_code=200):
    """Build a fake requests response."""
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def http_session(credentials_body):
    """A fake HTTP session returning a valid credential response."""
    session = Mock(spec=requests.Session)
    session.get.return_value = _make_response(credentials_body)
    return session


class FakeClock:
    """Settable clock returning epoch millis."""

    def __init__(self, now=NOW_MILLIS):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_response():
    """Factory for fake requests responses."""
    return _make_response


@pytest.fixture
def temp_dir(tmp_path):
    """Create a temporary directory for testing."""
    return tmp_path
