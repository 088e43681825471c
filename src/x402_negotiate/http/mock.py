"""Fetch doubles for exercising x402Fetch without a network."""

from __future__ import annotations

from typing import Sequence, Union

import httpx

from .x402_fetch import Fetch

FeedItem = Union[httpx.Response, Fetch]


class ResponseFeeder:
    """Fetch that serves prepared responses in order.

    Items may be responses or fetch callables for dynamic behaviour.

    Attributes:
        requests: Every request received, in order.
    """

    def __init__(self, responses: Sequence[FeedItem]) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    @property
    def remaining(self) -> int:
        return len(self._responses)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            raise IndexError("out of responses to feed")
        item = self._responses.pop(0)
        if isinstance(item, httpx.Response):
            try:
                item.request
            except RuntimeError:
                item.request = request
            return item
        return await item(request)


def response_feeder(responses: Sequence[FeedItem]) -> ResponseFeeder:
    """Create a fetch that returns ``responses`` one per call."""
    return ResponseFeeder(responses)
