"""
Shopify access token cache.

Dev Dashboard apps use the client credentials grant: client id + client secret
are exchanged for a short-lived (~24h) Admin API access token. The cache keeps
the current token and refreshes it shortly before it expires.

Concurrent callers that find the token stale share a single refresh.
"""

import asyncio
import logging
from datetime import UTC, datetime, timedelta

import httpx

from cardsurfer.config import DEFAULT_TOKEN_LIFETIME_SECONDS
from cardsurfer.models.failure import ConfigurationError, UpstreamAuthError, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_MARGIN = timedelta(minutes=5)


class ShopifyTokenCache:
    """
    Cached Shopify Admin API bearer token.

    Holds ``token`` and ``expires_at``; ``get_access_token()`` returns the
    cached token while ``now < expires_at - refresh_margin`` and performs the
    credential exchange otherwise.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        store_domain: str,
        *,
        refresh_margin: timedelta = DEFAULT_REFRESH_MARGIN,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.store_domain = store_domain
        self.refresh_margin = refresh_margin
        self.token: str | None = None
        self.expires_at: datetime | None = None
        self._http_client = http_client
        self._lock = asyncio.Lock()

    @property
    def token_url(self) -> str:
        return f"https://{self.store_domain}/admin/oauth/access_token"

    def is_fresh(self, now: datetime) -> bool:
        """True if the cached token can still be used at ``now``."""
        if self.token is None or self.expires_at is None:
            return False
        return now < self.expires_at - self.refresh_margin

    def missing_credentials(self) -> list[str]:
        """Names of the required settings that are empty."""
        required = {
            "SHOPIFY_CLIENT_ID": self.client_id,
            "SHOPIFY_CLIENT_SECRET": self.client_secret,
            "SHOPIFY_STORE_DOMAIN": self.store_domain,
        }
        return [name for name, value in required.items() if not value]

    async def get_access_token(self, now: datetime | None = None) -> str:
        """
        Return a valid access token, refreshing it if needed.

        Args:
            now: Current time (defaults to the wall clock; injectable for tests)

        Raises:
            ConfigurationError: If any credential is missing (checked before any request)
            UpstreamAuthError: If Shopify rejects the exchange
            UpstreamError: If the token endpoint cannot be reached
        """
        now = now or datetime.now(UTC)
        if self.is_fresh(now):
            logger.debug("Using cached access token")
            return self.token  # type: ignore[return-value]

        async with self._lock:
            # Another caller may have refreshed while we waited
            if self.is_fresh(now):
                return self.token  # type: ignore[return-value]
            return await self._refresh(now)

    def invalidate(self) -> None:
        """Drop the cached token so the next call re-authenticates."""
        self.token = None
        self.expires_at = None

    async def _refresh(self, now: datetime) -> str:
        missing = self.missing_credentials()
        if missing:
            logger.error("Missing Shopify credentials: %s", ", ".join(missing))
            raise ConfigurationError(missing)

        logger.info(
            "Requesting new Shopify access token for %s (client id %s...)",
            self.store_domain,
            self.client_id[:8],
        )

        form = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }

        try:
            if self._http_client:
                response = await self._http_client.post(self.token_url, data=form)
            else:
                async with httpx.AsyncClient(timeout=30.0) as client:
                    response = await client.post(self.token_url, data=form)
        except httpx.RequestError as e:
            raise UpstreamError(f"Could not reach Shopify token endpoint: {e}") from e

        if not response.is_success:
            logger.error("Token request failed: %d - %s", response.status_code, response.text)
            raise UpstreamAuthError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            logger.error("Token response was not JSON: %s", response.text)
            raise UpstreamAuthError(response.status_code, response.text) from e
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise UpstreamAuthError(response.status_code, response.text)
        lifetime = data.get("expires_in") or DEFAULT_TOKEN_LIFETIME_SECONDS

        self.token = token
        self.expires_at = now + timedelta(seconds=lifetime)

        logger.info("Obtained new access token (expires in ~%dh)", round(lifetime / 3600))
        return self.token
