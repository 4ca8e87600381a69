"""Tests for temporary credential management."""

from unittest.mock import patch

import pytest
import requests

from enriched_events.core.exceptions import AuthError, ConfigError
from enriched_events.credentials import CredentialManager

NOW_MILLIS = 1_593_561_600_000
HOUR_MILLIS = 3_600_000


@pytest.fixture
def manager(test_settings, http_session, clock):
    """Credential manager with a token and a fake HTTP session."""
    return CredentialManager(
        settings=test_settings, token="api-token", session=http_session, clock=clock
    )


class TestRefresh:
    """Test the token exchange."""

    def test_refresh_success(self, manager, http_session):
        credential = manager.refresh()

        assert credential.access_key_id == "ASIAEXAMPLE"
        assert credential.secret_access_key == "secret"
        assert credential.session_token == "session"
        assert credential.expiration == NOW_MILLIS + HOUR_MILLIS
        assert credential.base_path == "s3://test-bucket/v1/account_id=12345/"
        assert manager.credential == credential
        http_session.get.assert_called_once_with(
            "https://api.example.com/v2/export/credentials",
            headers={"Authorization": "Bearer api-token"},
            timeout=None,
        )

    def test_refresh_normalises_base_path(self, manager, http_session,
                                          credentials_body, make_response):
        credentials_body["s3Path"] = "s3://test-bucket/v1/account_id=12345"
        http_session.get.return_value = make_response(credentials_body)

        assert manager.refresh().base_path == "s3://test-bucket/v1/account_id=12345/"

    def test_refresh_without_token(self, test_settings, http_session):
        manager = CredentialManager(settings=test_settings, session=http_session)

        with pytest.raises(AuthError, match="No API token"):
            manager.refresh()
        http_session.get.assert_not_called()

    @pytest.mark.parametrize("status_code", [401, 403, 500])
    def test_refresh_error_status(self, manager, http_session, credentials_body,
                                  make_response, status_code):
        http_session.get.return_value = make_response(credentials_body, status_code)

        with pytest.raises(AuthError, match=f"status {status_code}"):
            manager.refresh()
        assert manager.credential is None

    def test_refresh_request_failure(self, manager, http_session):
        http_session.get.side_effect = requests.ConnectionError("unreachable")

        with pytest.raises(AuthError, match="unreachable"):
            manager.refresh()

    def test_refresh_non_json_body(self, manager, http_session, make_response):
        http_session.get.return_value = make_response(ValueError("not json"))

        with pytest.raises(AuthError, match="Malformed"):
            manager.refresh()

    def test_missing_field_keeps_previous_credential(
        self, manager, http_session, credentials_body, make_response
    ):
        previous = manager.refresh()

        del credentials_body["credentials"]["accessKeyId"]
        http_session.get.return_value = make_response(credentials_body)

        with pytest.raises(AuthError, match="Malformed"):
            manager.refresh()
        assert manager.credential is previous

    @pytest.mark.parametrize("field", ["secretAccessKey", "sessionToken"])
    def test_empty_field_rejected(self, manager, http_session, credentials_body,
                                  make_response, field):
        credentials_body["credentials"][field] = ""
        http_session.get.return_value = make_response(credentials_body)

        with pytest.raises(AuthError):
            manager.refresh()
        assert manager.credential is None

    def test_missing_s3_path(self, manager, http_session, credentials_body,
                             make_response):
        del credentials_body["s3Path"]
        http_session.get.return_value = make_response(credentials_body)

        with pytest.raises(AuthError):
            manager.refresh()


class TestEnsureFresh:
    """Test refresh-on-expiry behaviour."""

    def test_is_fresh(self, manager, clock):
        assert manager.is_fresh() is False
        manager.refresh()
        assert manager.is_fresh() is True

        clock.now = NOW_MILLIS + HOUR_MILLIS
        assert manager.is_fresh() is False

    def test_single_remote_call_within_window(self, manager, http_session):
        manager.ensure_fresh()
        manager.ensure_fresh()

        assert http_session.get.call_count == 1

    def test_refreshes_after_expiry(self, manager, http_session, clock):
        manager.ensure_fresh()
        clock.now = NOW_MILLIS + 2 * HOUR_MILLIS
        manager.ensure_fresh()

        assert http_session.get.call_count == 2

    def test_no_token_is_noop(self, test_settings, http_session):
        manager = CredentialManager(settings=test_settings, session=http_session)

        manager.ensure_fresh()

        assert manager.credential is None
        http_session.get.assert_not_called()

    def test_run_refreshes_then_executes(self, manager, http_session):
        result = manager.run(lambda a, b=0: a + b, 1, b=2)

        assert result == 3
        assert http_session.get.call_count == 1


class TestResolveBasePath:
    """Test base path resolution."""

    def test_with_token(self, manager):
        assert manager.resolve_base_path() == "s3://test-bucket/v1/account_id=12345/"

    def test_with_token_ignores_account_id(self, manager):
        path = manager.resolve_base_path(account_id="999", bucket="other")
        assert path == "s3://test-bucket/v1/account_id=12345/"

    def test_synthesized(self, test_settings, http_session):
        manager = CredentialManager(settings=test_settings, session=http_session)

        path = manager.resolve_base_path(account_id="12345", bucket="bucket")

        assert path == "s3://bucket/v1/account_id=12345/"
        http_session.get.assert_not_called()

    def test_synthesized_default_bucket(self, test_settings):
        manager = CredentialManager(settings=test_settings)
        assert (
            manager.resolve_base_path(account_id="12345")
            == "s3://test-bucket/v1/account_id=12345/"
        )

    def test_no_token_no_account(self, test_settings):
        manager = CredentialManager(settings=test_settings)

        with pytest.raises(ConfigError):
            manager.resolve_base_path()


class TestExports:
    """Test credential export and provider output."""

    def test_export_lines(self, manager):
        manager.refresh()

        assert manager.export_lines() == [
            "export AWS_ACCESS_KEY_ID=ASIAEXAMPLE",
            "export AWS_SECRET_ACCESS_KEY=secret",
            "export AWS_SESSION_TOKEN=session",
            f"export AWS_SESSION_EXPIRATION={NOW_MILLIS + HOUR_MILLIS}",
            "export S3_BASE_PATH=s3://test-bucket/v1/account_id=12345/",
        ]

    def test_export_lines_before_auth(self, manager):
        with pytest.raises(AuthError):
            manager.export_lines()

    def test_provider(self, manager):
        provider = manager.as_provider()

        assert provider() == {
            "access_key": "ASIAEXAMPLE",
            "secret_key": "secret",
            "token": "session",
            "expiry_time": "2020-07-01T01:00:00Z",
        }

    def test_no_provider_without_token(self, test_settings):
        assert CredentialManager(settings=test_settings).as_provider() is None


class TestMissingCredential:
    """Test guards when a refresh leaves no credential behind."""

    def test_resolve_base_path_without_credential(self, manager):
        with patch.object(manager, "ensure_fresh"):
            with pytest.raises(AuthError, match="No credential available"):
                manager.resolve_base_path()

    def test_provider_without_credential(self, manager):
        provider = manager.as_provider()

        with patch.object(manager, "ensure_fresh"):
            with pytest.raises(AuthError, match="No credential available"):
                provider()
