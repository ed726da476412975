"""Asynchronous client for the Steam store endpoints whose responses get cached.

:class:`SteamClient` wraps :class:`httpx.AsyncClient` and returns decoded
JSON only; mapping fields onto view models is left to the caller. Each
fetch has a matching ``*_producer`` factory that plugs straight into
:meth:`~gamecache.cache.service.CacheService.get_or_compute`::

    async with SteamClient(config) as steam:
        details = await cache.get_or_compute(
            make_key(ResourceKind.GAME_DETAILS, 1245620),
            steam.details_producer(1245620),
        )

Requests are made once. Retrying is up to the caller.
"""

from __future__ import annotations

import functools
from typing import Any, Awaitable, Callable, Optional

import httpx

from gamecache.exceptions import ConnectionError_, NotFoundError, ServerError
from gamecache.models import ClientConfig
from gamecache.output import debug

STORE_URL = "https://store.steampowered.com"


class SteamClient:
    """Fetches app details, reviews, and generated summaries.

    Must be used as an async context manager.

    Args:
        config: Timeout, locale, and summarize endpoint settings.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> SteamClient:
        self._client = httpx.AsyncClient(
            timeout=self._config.timeout,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Fetches
    # ------------------------------------------------------------------ #

    async def app_details(self, appid: int) -> dict[str, Any]:
        """Return the store ``data`` object for *appid*.

        Raises:
            NotFoundError: If the store reports no data for the app.
            ServerError: On an error status or a malformed body.
            ConnectionError_: On network or timeout errors.
        """
        body = await self._request_json(
            "GET",
            f"{STORE_URL}/api/appdetails/",
            params={
                "appids": appid,
                "l": self._config.language,
                "cc": self._config.country,
            },
        )
        entry = body.get(str(appid)) if isinstance(body, dict) else None
        if not isinstance(entry, dict) or not entry.get("success"):
            raise NotFoundError(f"No store data for app {appid}")
        data = entry.get("data")
        if not isinstance(data, dict):
            raise ServerError(f"Malformed store data for app {appid}")
        return data

    async def reviews(self, appid: int) -> dict[str, Any]:
        """Return the review batch for *appid* (``query_summary`` plus ``reviews``)."""
        body = await self._request_json(
            "GET",
            f"{STORE_URL}/appreviews/{appid}",
            params={"json": 1, "language": self._config.language},
        )
        if not isinstance(body, dict):
            raise ServerError(f"Malformed reviews response for app {appid}")
        return body

    async def summarize(self, appid: int) -> dict[str, Any]:
        """Ask the summarize endpoint for a review summary of *appid*.

        Returns:
            A dict with ``summary``, ``pros``, ``cons``, and
            ``recommendation`` keys as sent by the service.
        """
        body = await self._request_json(
            "POST",
            self._config.summarize_url,
            json={"game_id": str(appid)},
        )
        if not isinstance(body, dict):
            raise ServerError(f"Malformed summary response for app {appid}")
        return body

    # ------------------------------------------------------------------ #
    # Producers for get_or_compute
    # ------------------------------------------------------------------ #

    def details_producer(self, appid: int) -> Callable[[], Awaitable[dict[str, Any]]]:
        """Return a zero-argument coroutine factory fetching :meth:`app_details`."""
        return functools.partial(self.app_details, appid)

    def reviews_producer(self, appid: int) -> Callable[[], Awaitable[dict[str, Any]]]:
        """Return a zero-argument coroutine factory fetching :meth:`reviews`."""
        return functools.partial(self.reviews, appid)

    def summary_producer(self, appid: int) -> Callable[[], Awaitable[dict[str, Any]]]:
        """Return a zero-argument coroutine factory fetching :meth:`summarize`."""
        return functools.partial(self.summarize, appid)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send a request, map error statuses, and decode the JSON body."""
        assert self._client is not None, "Client not initialised -- use as async context manager"

        debug(f"{method} {url}")
        try:
            response = await self._client.request(method, url, **kwargs)
        except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
            raise ConnectionError_(f"Request to {url} failed: {exc}") from exc

        self._map_response_error(response)

        try:
            return response.json()
        except ValueError as exc:
            raise ServerError(f"Invalid JSON from {url}: {exc}") from exc

    @staticmethod
    def _map_response_error(response: httpx.Response) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        msg = response.text[:200] if response.text else ""
        prefix = f"HTTP {status}"
        full_msg = f"{prefix}: {msg}" if msg else prefix

        if status == 404:
            raise NotFoundError(full_msg)
        raise ServerError(full_msg)
