"""OAuth2 client-credentials token handling for the OverDrive API.

`TokenManager` owns the access token: it reads it from a `TokenCache`, checks
it against a safety margin before expiry, and requests a new one from the
OAuth endpoint when needed.
"""

from __future__ import annotations

import base64
import time
from dataclasses import dataclass

from loguru import logger

from overdrive_import.clients.base import BaseClient
from overdrive_import.config import settings
from overdrive_import.errors import AuthError, FetchError
from overdrive_import.models import AccessToken
from overdrive_import.utils.caching import Clock, TokenCache

TOKEN_CACHE_KEY = "overdrive_access_token"


@dataclass(frozen=True)
class ClientCredentials:
    client_id: str
    client_secret: str

    @classmethod
    def from_settings(cls) -> ClientCredentials:
        return cls(settings.client_id, settings.client_secret)

    def basic_auth(self) -> str:
        key = f"{self.client_id}:{self.client_secret}".encode()
        return "Basic " + base64.b64encode(key).decode("ascii")


class TokenManager:
    """Acquire, cache and refresh OverDrive access tokens."""

    def __init__(
        self,
        credentials: ClientCredentials,
        cache: TokenCache,
        http: BaseClient,
        *,
        token_url: str | None = None,
        safety_margin: int | None = None,
        clock: Clock = time.time,
    ) -> None:
        """Initialize a TokenManager.

        Args:
            credentials (ClientCredentials): API client id and secret.
            cache (TokenCache): Shared cache the token and its expiry live in.
            http (BaseClient): Client used to POST to the token endpoint.
            token_url (str | None): OAuth endpoint; defaults to `settings.oauth_url`.
            safety_margin (int | None): Seconds before expiry at which a token is
                no longer used; defaults to `settings.token_safety_margin`.
            clock (Clock): Returns the current epoch time; injectable for tests.

        """
        self.credentials = credentials
        self.cache = cache
        self.http = http
        self.token_url = token_url or settings.oauth_url
        self.safety_margin = (
            settings.token_safety_margin if safety_margin is None else safety_margin
        )
        self.clock = clock
        self.logger = logger.bind(client=self.__class__.__name__)
        self._token: AccessToken | None = None

    def cached(self) -> AccessToken | None:
        """Return the token held in memory or in the cache, usable or not."""
        value = self.cache.get(TOKEN_CACHE_KEY)
        if value is None:
            return self._token
        expires_at = self.cache.expires_at(TOKEN_CACHE_KEY)
        if self._token is not None and self._token.value == value:
            return self._token
        return AccessToken(value=value, expires_at=expires_at or 0)

    async def ensure_valid(self) -> AccessToken:
        """Return a usable token, refreshing it when missing or close to expiry.

        Raises:
            AuthError: When a refresh is needed and fails.

        """
        token = self.cached()
        if token is not None and token.is_usable(self.clock(), self.safety_margin):
            self._token = token
            return token
        return await self.refresh()

    async def refresh(self) -> AccessToken:
        """Request a new token with the client-credentials grant and cache it.

        A failed refresh leaves any previously cached token in place.

        Raises:
            AuthError: On transport failure, non-2xx status, or a response
                without `access_token`.

        """
        headers = {
            "Authorization": self.credentials.basic_auth(),
            "Content-Type": "application/x-www-form-urlencoded;charset=UTF-8",
        }
        try:
            data = await self.http.request_json(
                "POST",
                self.token_url,
                content="grant_type=client_credentials",
                headers=headers,
            )
        except FetchError as e:
            self.logger.error("Token request failed: {}", e)
            raise AuthError(f"Could not obtain access token: {e}") from e

        if not isinstance(data, dict) or not data.get("access_token"):
            self.logger.error("Token response did not include an access_token")
            raise AuthError("Token response did not include an access_token")

        expires_in = int(data.get("expires_in") or 0)
        expires_at = self.cache.set(TOKEN_CACHE_KEY, data["access_token"], expires_in)
        self._token = AccessToken(value=data["access_token"], expires_at=expires_at)
        self.logger.info(
            "Obtained {} token valid for {}s", data.get("token_type", "bearer"), expires_in
        )
        return self._token
