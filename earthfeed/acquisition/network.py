"""JSON-over-HTTP client used by the image acquirer.

``NetworkClient`` is the narrow interface the engine depends on;
``HttpxNetworkClient`` implements it with ``httpx.AsyncClient``.

Failures below HTTP (timeouts, refused connections, TLS errors) are
raised as ``RequestTimeout`` / ``TransportError``.  Any HTTP status is
returned as a ``NetworkResponse`` and classified by the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from earthfeed import __version__
from earthfeed.acquisition.base import RequestTimeout, TransportError

logger = logging.getLogger("earthfeed.acquisition.network")

_USER_AGENT = f"earthfeed/{__version__}"


@dataclass(frozen=True, slots=True)
class NetworkResponse:
    """Status and parsed JSON body of one response.

    ``body`` is ``None`` when the response was not valid JSON.
    """

    status: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class NetworkClient(Protocol):
    """Fetch and parse a JSON document."""

    async def request(self, url: str, *, timeout_s: float) -> NetworkResponse:
        """GET *url*.

        Raises:
            RequestTimeout: If no response arrived within *timeout_s*.
            TransportError: On connection-level failures.
        """
        ...


class HttpxNetworkClient:
    """``NetworkClient`` backed by a shared ``httpx.AsyncClient``.

    Pass an existing client to share its connection pool (or to use a
    mock transport in tests); otherwise one is created on first use and
    closed by ``aclose()``.
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                follow_redirects=True,
                headers={"User-Agent": _USER_AGENT, "Accept": "application/json"},
            )
        return self._client

    async def request(self, url: str, *, timeout_s: float) -> NetworkResponse:
        client = self._get_client()
        try:
            response = await client.get(url, timeout=timeout_s)
        except httpx.TimeoutException as exc:
            msg = f"No response within {timeout_s:.1f}s"
            raise RequestTimeout(msg) from exc
        except httpx.TransportError as exc:
            msg = f"Transport failure: {exc.__class__.__name__}"
            raise TransportError(msg) from exc

        try:
            body = response.json()
        except ValueError:
            logger.debug("Response body is not JSON | status=%d", response.status_code)
            body = None

        return NetworkResponse(status=response.status_code, body=body)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpxNetworkClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
