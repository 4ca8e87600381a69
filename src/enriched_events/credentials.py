"""Temporary credential management.

The CredentialManager exchanges a long-lived API token for short-lived S3
credentials and caches them until they expire. The cached credential is
replaced in a single assignment, so readers never observe a partially
updated set.

Modes:
    1. Token configured: credentials and base path come from the
       token-exchange endpoint and are refreshed when expired.
    2. No token: nothing is fetched; S3 calls use explicit keys or the
       default boto3 credential chain, and the base path is synthesized
       from the bucket and account id.
"""

import time
from typing import Any, Callable, Optional, TypeVar

import requests
from pydantic import ValidationError as PydanticValidationError

from enriched_events.core import get_logger, get_tracer
from enriched_events.core.config import Settings, settings as default_settings
from enriched_events.core.exceptions import AuthError, ConfigError
from enriched_events.schemas import Credential, CredentialsResponse

logger = get_logger(__name__)
tracer = get_tracer(__name__)

T = TypeVar("T")


def _now_millis() -> int:
    return int(time.time() * 1000)


class CredentialManager:
    """Tracks and refreshes the temporary credential set."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], int] = _now_millis,
    ):
        """Initialize the credential manager.

        Args:
            settings: Application settings, defaults to the environment
            token: API token, overrides the one from settings
            session: HTTP session used for the token exchange
            clock: Returns the current time in epoch millis
        """
        self.settings = settings or default_settings
        self.token = token or self.settings.api_token
        self.session = session or requests.Session()
        self.clock = clock
        self._credential: Optional[Credential] = None

    @property
    def credential(self) -> Optional[Credential]:
        """The cached credential, if any."""
        return self._credential

    def is_fresh(self) -> bool:
        """Return True if a cached credential exists and has not expired."""
        credential = self._credential
        return credential is not None and credential.expiration > self.clock()

    def refresh(self, token: Optional[str] = None) -> Credential:
        """Exchange the API token for a new temporary credential.

        Raises:
            AuthError: If no token is available, the request fails, or the
                response is not a complete credential set
        """
        token = token or self.token
        if not token:
            raise AuthError("No API token configured")

        url = self.settings.credentials_url
        logger.info("Requesting temporary credentials", url=url)

        with tracer.start_as_current_span("credentials.refresh"):
            try:
                response = self.session.get(
                    url,
                    headers={"Authorization": f"Bearer {token}"},
                    timeout=self.settings.request_timeout,
                )
            except requests.RequestException as e:
                raise AuthError(f"Credential request to {url} failed: {e}")

            if not 200 <= response.status_code < 300:
                raise AuthError(
                    f"Credential request to {url} returned status "
                    f"{response.status_code}"
                )

            try:
                body = CredentialsResponse.model_validate(response.json())
                credential = body.to_credential()
            except (ValueError, PydanticValidationError) as e:
                raise AuthError(f"Malformed credential response: {e}")

        self._credential = credential
        logger.info(
            "Temporary credentials refreshed",
            expiration=credential.expiration,
            base_path=credential.base_path,
        )
        return credential

    def ensure_fresh(self, token: Optional[str] = None) -> None:
        """Refresh the credential unless it is still valid.

        A no-op when no token is configured.
        """
        token = token or self.token
        if not token:
            logger.debug("No API token configured, using direct credentials")
            return
        if self.is_fresh():
            return
        self.refresh(token)

    def resolve_base_path(
        self, account_id: Optional[str] = None, bucket: Optional[str] = None
    ) -> str:
        """Resolve the account scoped base path.

        Raises:
            ConfigError: If neither a token nor an account id is available
        """
        if self.token:
            self.ensure_fresh()
            credential = self._credential
            if credential is None:
                raise AuthError("No credential available")
            return credential.base_path

        bucket = bucket or self.settings.bucket
        if not account_id or not bucket:
            raise ConfigError(
                "An API token or an account id and bucket are required"
            )
        return f"{self.settings.scheme}://{bucket}/v1/account_id={account_id}/"

    def run(self, operation: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Ensure the credential is fresh, then run the operation."""
        self.ensure_fresh()
        return operation(*args, **kwargs)

    def as_provider(self) -> Optional[Callable[[], dict[str, str]]]:
        """Return a credential provider for the S3 client.

        None when no token is configured, in which case the S3 client
        falls back to its own credential sources.
        """
        if not self.token:
            return None

        def provider() -> dict[str, str]:
            self.ensure_fresh()
            credential = self._credential
            if credential is None:
                raise AuthError("No credential available")
            return {
                "access_key": credential.access_key_id,
                "secret_key": credential.secret_access_key,
                "token": credential.session_token,
                "expiry_time": _iso_expiry(credential.expiration),
            }

        return provider

    def export_lines(self) -> list[str]:
        """Return shell ``export`` lines for the cached credential."""
        credential = self._credential
        if credential is None:
            raise AuthError("No credential available, authenticate first")
        return [
            f"export AWS_ACCESS_KEY_ID={credential.access_key_id}",
            f"export AWS_SECRET_ACCESS_KEY={credential.secret_access_key}",
            f"export AWS_SESSION_TOKEN={credential.session_token}",
            f"export AWS_SESSION_EXPIRATION={credential.expiration}",
            f"export S3_BASE_PATH={credential.base_path}",
        ]


def _iso_expiry(expiration_millis: int) -> str:
    return time.strftime(
        "%Y-%m-%dT%H:%M:%SZ", time.gmtime(expiration_millis / 1000)
    )
