"""HTTP client integrations."""

from .httpx import httpx_fetch, wrapHttpxWithPayment, x402AsyncTransport

__all__ = ["httpx_fetch", "wrapHttpxWithPayment", "x402AsyncTransport"]
