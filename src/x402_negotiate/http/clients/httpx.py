"""httpx integration for the x402 fetch wrapper."""

from __future__ import annotations

from typing import Any

import httpx

from ..x402_fetch import Fetch, WrapOptions, wrap, x402Fetch


def httpx_fetch(client: httpx.AsyncClient) -> Fetch:
    """Adapt an AsyncClient into a fetch callable for ``wrap``."""

    async def fetch(request: httpx.Request) -> httpx.Response:
        return await client.send(request)

    return fetch


class x402AsyncTransport(httpx.AsyncBaseTransport):
    """Async transport that negotiates x402 payments transparently.

    Wraps another transport; every request goes through an x402Fetch whose
    paid attempts are sent over the same inner transport.
    """

    def __init__(
        self,
        options: WrapOptions,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Create x402AsyncTransport.

        Args:
            options: Handlers, chooser and retry policy.
            transport: Inner transport. Defaults to httpx.AsyncHTTPTransport.
        """
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._fetch: x402Fetch = wrap(self._transport.handle_async_request, options)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self._fetch(request)

    async def aclose(self) -> None:
        await self._transport.aclose()


def wrapHttpxWithPayment(options: WrapOptions, **httpx_kwargs: Any) -> httpx.AsyncClient:
    """Create an httpx.AsyncClient that pays for 402 responses.

    Args:
        options: Handlers, chooser and retry policy.
        **httpx_kwargs: Passed to httpx.AsyncClient. A ``transport`` given
            here becomes the inner transport.

    Returns:
        Configured httpx.AsyncClient.
    """
    inner = httpx_kwargs.pop("transport", None)
    return httpx.AsyncClient(transport=x402AsyncTransport(options, inner), **httpx_kwargs)
