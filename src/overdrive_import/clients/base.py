"""Base HTTP client helpers with retry and context manager support.

This module provides the `BaseClient` class which wraps an async httpx
client with optional retry behavior (using `tenacity`) and logging, and
converts transport failures into `FetchError`.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from overdrive_import.config import settings
from overdrive_import.errors import FetchError


def _is_retriable_exception(exc: BaseException) -> bool:
    """Return True for exceptions that should be retried by `tenacity`.

    Args:
        exc (BaseException): Exception instance raised during HTTP requests.

    Returns:
        bool: True if the exception is considered retriable (network errors,
            429, or 5xx status codes); False otherwise.

    """
    if isinstance(exc, httpx.RequestError):
        return True
    if isinstance(exc, httpx.HTTPStatusError) and exc.response is not None:
        status = exc.response.status_code
        return status == 429 or 500 <= status < 600
    return False


class BaseClient:
    """Base async client with bounded retries and logging.

    Subclasses should use `await self.request("GET", url, params=params)` or
    `await self.request_json(...)` so that retry and error handling are applied
    uniformly.
    """

    def __init__(
        self,
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        max_attempts: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize a BaseClient with optional headers and timeout.

        Args:
            headers (dict[str, str] | None): Default HTTP headers; defaults to a
                User-Agent built from `settings.client_id`.
            timeout (float | None): Optional default timeout (seconds) for requests.
            max_attempts (int | None): Total attempts per request; defaults to
                `settings.http_max_attempts` (1 means no retry).
            transport (httpx.AsyncBaseTransport | None): Optional transport,
                mainly for tests using `httpx.MockTransport`.

        """
        self.headers = headers or {"User-Agent": settings.client_id or "overdrive-import"}
        self.timeout = timeout or settings.default_timeout
        self.max_attempts = max(1, max_attempts or settings.http_max_attempts)
        self.client = httpx.AsyncClient(
            headers=self.headers, timeout=self.timeout, transport=transport
        )
        self.logger = logger.bind(client=self.__class__.__name__)

    async def __aenter__(self) -> BaseClient:
        return self

    async def __aexit__(self, exc_type, exc, tb):
        """Close the underlying HTTP client, logging errors without raising them."""
        try:
            await self.client.aclose()
        except Exception:
            self.logger.exception("Error closing httpx AsyncClient")

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Perform an HTTP request, retrying transient errors up to `max_attempts`.

        This method raises on non-2xx responses via `response.raise_for_status()`;
        the last exception is re-raised once attempts are exhausted.
        """
        if "timeout" not in kwargs and self.timeout is not None:
            kwargs["timeout"] = self.timeout

        async for attempt in AsyncRetrying(
            retry=retry_if_exception(_is_retriable_exception),
            wait=wait_exponential(min=1, max=20),
            stop=stop_after_attempt(self.max_attempts),
            before_sleep=before_sleep_log(logging.getLogger(__name__), logging.WARNING),
            reraise=True,
        ):
            with attempt:
                try:
                    response = await self.client.request(method, url, **kwargs)
                    # httpx does not raise for 4xx/5xx unless we ask
                    response.raise_for_status()
                except httpx.HTTPStatusError as e:
                    self.logger.warning("HTTPStatus error on {} {}: {}", method, url, e)
                    raise
                except httpx.RequestError as e:
                    self.logger.warning("HTTP Request error on {} {}: {}", method, url, e)
                    raise
        return response

    async def request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        """Perform a request and decode its JSON body.

        Raises:
            FetchError: On transport failure, non-2xx status, or a body that is
                not valid JSON. `status_code` is set whenever a response arrived.

        """
        try:
            response = await self.request(method, url, **kwargs)
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"{method} {url} returned {e.response.status_code}",
                url=url,
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise FetchError(f"{method} {url} failed: {e}", url=url) from e
        try:
            return response.json()
        except ValueError as e:
            raise FetchError(
                f"{method} {url} returned a non-JSON body",
                url=url,
                status_code=response.status_code,
            ) from e
