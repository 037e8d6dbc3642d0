"""HTTP client for the remote Firebase services."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], str | None]
RefreshHandler = Callable[[], Awaitable[Any]]


class APIClient:
    """Thin wrapper over ``httpx.AsyncClient``.

    Adds a bearer token from ``token_provider`` to every request, retries
    connection errors and 5xx responses with exponential backoff, and on a
    401 calls ``refresh_handler`` once before retrying the request.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30,
        retry: int = 3,
        token_provider: TokenProvider | None = None,
        refresh_handler: RefreshHandler | None = None,
        default_params: dict[str, Any] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry = retry
        self.token_provider = token_provider
        self.refresh_handler = refresh_handler
        self.default_params = default_params or {}
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "APIClient":
        """Enter the async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the async context manager and ensure the client is closed."""
        await self.close()

    def _get_headers(self, skip_auth: bool = False) -> dict[str, str]:
        """Get HTTP headers with authentication."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        if not skip_auth and self.token_provider is not None:
            token = self.token_provider()
            if token:
                headers["Authorization"] = f"Bearer {token}"

        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _try_refresh_token(self) -> bool:
        """Ask the refresh handler for a new token. Returns True on success."""
        if self.refresh_handler is None:
            return False
        try:
            refreshed = await self.refresh_handler()
        except Exception as e:
            logger.warning("token refresh failed: %s", e)
            return False
        if refreshed:
            logger.info("token refreshed automatically")
        return bool(refreshed)

    async def _send(
        self,
        method: str,
        url: str,
        *,
        json: dict[str, Any] | None,
        params: dict[str, Any],
        skip_auth: bool,
    ) -> httpx.Response:
        client = await self._get_client()
        response = await client.request(
            method=method,
            url=url,
            json=json,
            params=params or None,
            headers=self._get_headers(skip_auth=skip_auth),
        )
        response.raise_for_status()
        return response

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        retry: int | None = None,
        skip_auth: bool = False,
    ) -> httpx.Response:
        """Make an HTTP request to the API."""
        if retry is None:
            retry = self.retry

        url = f"{path}" if path.startswith("/") else f"/{path}"
        merged_params = {**self.default_params, **(params or {})}

        last_exception: Exception | None = None
        for attempt in range(retry + 1):
            try:
                return await self._send(
                    method, url, json=json, params=merged_params, skip_auth=skip_auth
                )
            except httpx.HTTPStatusError as e:
                # Handle 401 Unauthorized - try to refresh the token once
                if e.response.status_code == 401 and not skip_auth:
                    if await self._try_refresh_token():
                        try:
                            return await self._send(
                                method,
                                url,
                                json=json,
                                params=merged_params,
                                skip_auth=skip_auth,
                            )
                        except httpx.HTTPStatusError:
                            # If still fails after refresh, raise original error
                            raise e from None
                    raise

                # Don't retry other client errors (4xx)
                if 400 <= e.response.status_code < 500:
                    raise
                last_exception = e
            except httpx.RequestError as e:
                last_exception = e

            if attempt < retry:
                logger.debug(
                    "%s %s failed (attempt %d/%d): %s",
                    method,
                    url,
                    attempt + 1,
                    retry + 1,
                    last_exception,
                )
                await asyncio.sleep(2**attempt)

        # All retries failed
        if last_exception:
            raise last_exception
        raise RuntimeError("Request failed after all retries")

    async def get(
        self, path: str, *, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        """Make a GET request."""
        return await self.request("GET", path, params=params)

    async def post(
        self,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        skip_auth: bool = False,
    ) -> httpx.Response:
        """Make a POST request."""
        return await self.request(
            "POST", path, json=json, params=params, skip_auth=skip_auth
        )

    async def patch(
        self,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Make a PATCH request."""
        return await self.request("PATCH", path, json=json, params=params)

    async def delete(
        self, path: str, *, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        """Make a DELETE request."""
        return await self.request("DELETE", path, params=params)
