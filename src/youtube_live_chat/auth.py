"""
Credential providers for the YouTube Live Chat client.

The polling engine only depends on ``CredentialProvider``; the concrete
providers here cover the two common ways of holding YouTube OAuth credentials.
"""

from abc import ABC, abstractmethod

import httpx
import structlog

from .config import Settings
from .client import YouTubeClient
from .exceptions import AuthenticationError, ConfigurationError

logger = structlog.get_logger(__name__)


class CredentialProvider(ABC):
    """Supplies an authorized YouTube client on demand."""

    @abstractmethod
    async def get_authorized_client(self) -> YouTubeClient:
        """Create an authorized client handle."""


class AccessTokenCredentialProvider(CredentialProvider):
    """Builds clients from an already issued OAuth access token."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    async def get_authorized_client(self) -> YouTubeClient:
        if not self.settings.youtube_access_token:
            raise AuthenticationError("No YouTube access token configured")

        api = self.settings.api_config
        logger.info("Using configured YouTube access token")
        return YouTubeClient(
            self.settings.youtube_access_token,
            api_url=api.api_url,
            application_name=api.application_name,
            timeout=api.request_timeout_seconds,
        )


class RefreshTokenCredentialProvider(CredentialProvider):
    """Exchanges an OAuth refresh token for an access token, then builds a client."""

    def __init__(
        self, settings: Settings, http_client: httpx.AsyncClient | None = None
    ) -> None:
        """
        Initialize the provider.

        Args:
            settings: Application settings holding the OAuth client and token
            http_client: HTTP client for the token exchange, mainly for tests
        """
        self.settings = settings
        self._http_client = http_client

    async def _exchange_refresh_token(self) -> str:
        """Get a fresh access token from the token endpoint."""
        payload = {
            "grant_type": "refresh_token",
            "client_id": self.settings.google_client_id,
            "client_secret": self.settings.google_client_secret,
            "refresh_token": self.settings.google_refresh_token,
        }

        try:
            if self._http_client is not None:
                response = await self._http_client.post(
                    self.settings.google_token_uri, data=payload
                )
            else:
                async with httpx.AsyncClient(
                    timeout=self.settings.request_timeout_seconds
                ) as client:
                    response = await client.post(
                        self.settings.google_token_uri, data=payload
                    )
        except httpx.HTTPError as e:
            raise AuthenticationError(f"Token endpoint unreachable: {e}") from e

        if response.status_code != 200:
            raise AuthenticationError(
                f"Failed to refresh access token: {response.text}",
                context={"status_code": response.status_code},
            )

        token = response.json().get("access_token")
        if isinstance(token, str) and token:
            return token
        raise AuthenticationError(f"Invalid access token type: {type(token)}")

    async def get_authorized_client(self) -> YouTubeClient:
        access_token = await self._exchange_refresh_token()
        logger.info("YouTube access token refreshed")

        api = self.settings.api_config
        return YouTubeClient(
            access_token,
            api_url=api.api_url,
            application_name=api.application_name,
            timeout=api.request_timeout_seconds,
        )


def create_credential_provider(settings: Settings) -> CredentialProvider:
    """
    Pick the credential provider matching the configured credentials.

    Refresh credentials take precedence over a static access token.
    """
    if settings.has_refresh_credentials:
        return RefreshTokenCredentialProvider(settings)
    if settings.has_access_token:
        return AccessTokenCredentialProvider(settings)
    raise ConfigurationError(
        "No YouTube credentials configured. Set YOUTUBE_ACCESS_TOKEN or "
        "GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET and GOOGLE_REFRESH_TOKEN."
    )
