"""OverDrive API client module.

Provides `OverDriveClient`, an async client for the library account, search
and metadata endpoints. Every call is authorized with a bearer token from
`TokenManager`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

from overdrive_import.clients.auth import ClientCredentials, TokenManager
from overdrive_import.clients.base import BaseClient
from overdrive_import.config import settings
from overdrive_import.errors import FetchError, NotFound
from overdrive_import.models import LibraryAccount, LibraryConfig, ProductPage
from overdrive_import.utils.caching import TokenCache
from overdrive_import.utils.persistence import KeyValueStore, MemoryStore
from overdrive_import.utils.validation import require_ids


class OverDriveClient(BaseClient):
    """Client for the OverDrive library, search and metadata APIs."""

    BULK_LIMIT = 25

    def __init__(
        self,
        *,
        credentials: ClientCredentials | None = None,
        libraries: Mapping[str, LibraryConfig] | None = None,
        store: KeyValueStore | None = None,
        token_manager: TokenManager | None = None,
        base_url: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the client.

        Args:
            credentials (ClientCredentials | None): API credentials; defaults to
                the values in `settings`.
            libraries (Mapping[str, LibraryConfig] | None): Library id to
                endpoint table; defaults to `settings.libraries`.
            store (KeyValueStore | None): Store backing the token cache when no
                `token_manager` is given; defaults to an in-memory store.
            token_manager (TokenManager | None): Pre-built token manager.
            base_url (str | None): API root; defaults to `settings.api_base_url`.
            **kwargs: Forwarded to `BaseClient` (timeout, transport, ...).

        """
        self.credentials = credentials or ClientCredentials.from_settings()
        kwargs.setdefault("headers", {"User-Agent": self.credentials.client_id})
        super().__init__(**kwargs)
        if libraries is None:
            libraries = {
                str(k): LibraryConfig.from_dict(v) for k, v in settings.libraries.items()
            }
        self.libraries = dict(libraries)
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.tokens = token_manager or TokenManager(
            self.credentials, TokenCache(store if store is not None else MemoryStore()), self
        )

    def library(self, library_id: str | int) -> LibraryConfig:
        try:
            return self.libraries[str(library_id)]
        except KeyError:
            raise NotFound(f"No configuration for library {library_id}") from None

    async def get(self, url: str, **kwargs: Any) -> Any:
        """GET `url` with bearer authorization and return the decoded JSON body."""
        token = await self.tokens.ensure_valid()
        headers = {"Authorization": f"Bearer {token.value}"}
        return await self.request_json("GET", url, headers=headers, **kwargs)

    async def get_library_account(self, library_id: str | int) -> LibraryAccount | None:
        """Look up a library account; None when the response has no `id`."""
        body = await self.get(f"{self.base_url}/v1/libraries/{library_id}")
        if not isinstance(body, dict) or "id" not in body:
            self.logger.warning("Library {} not found", library_id)
            return None
        return LibraryAccount.from_api(body)

    async def get_metadata(self, library_id: str | int, record_id: str) -> dict[str, Any]:
        token = self.library(library_id).collection_token
        return await self.get(
            f"{self.base_url}/v1/collections/{token}/products/{record_id}/metadata"
        )

    async def get_bulk_metadata(
        self, library_id: str | int, record_ids: list[str]
    ) -> list[dict[str, Any]]:
        """Fetch metadata for up to 25 records in one request.

        Callers chunk their ids; more than `BULK_LIMIT` ids is rejected.

        Returns:
            list[dict]: The `metadata` records that carry an `id`.

        """
        if len(record_ids) > self.BULK_LIMIT:
            raise ValueError(f"At most {self.BULK_LIMIT} ids per bulk metadata request")
        token = self.library(library_id).collection_token
        url = (
            f"{self.base_url}/v1/collections/{token}/bulkmetadata"
            f"?reserveIds={','.join(record_ids)}"
        )
        body = await self.get(url)
        if not isinstance(body, dict):
            raise FetchError("Unexpected bulk metadata response", url=url)
        return require_ids(body.get("metadata") or [], "metadata")

    async def search_products(
        self, library_id: str | int, query: Mapping[str, Any] | None = None
    ) -> ProductPage | None:
        """Query the library's products endpoint.

        The query mapping is serialized into the URL as given. Returns None
        when the response carries no `totalItems`.
        """
        url = self.library(library_id).products
        if query:
            url = f"{url}?{urlencode(dict(query))}"
        body = await self.get(url)
        if not isinstance(body, dict) or "totalItems" not in body:
            self.logger.warning("Product search for library {} returned no totalItems", library_id)
            return None
        raw = body.get("products") or []
        return ProductPage(
            total_items=int(body["totalItems"]),
            products=require_ids(raw, "product"),
            fetched=len(raw),
        )

    async def get_advantage_accounts(self, library_id: str | int) -> list[dict[str, Any]]:
        body = await self.get(f"{self.base_url}/v1/libraries/{library_id}/advantageAccounts")
        if isinstance(body, dict):
            return body.get("advantageAccounts") or []
        return body or []
