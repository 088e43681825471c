"""Error types for x402-negotiate."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx
    from pydantic import ValidationError


class X402Error(Exception):
    """Base class for x402 negotiation errors."""

    pass


class PaymentValidationError(X402Error):
    """Inbound payment data was malformed.

    Attributes:
        summary: Human-readable summary, safe to return in a 400 body.
    """

    def __init__(self, summary: str):
        self.summary = summary
        super().__init__(summary)

    @classmethod
    def from_pydantic(cls, error: ValidationError, prefix: str = "") -> PaymentValidationError:
        """Build from a pydantic ValidationError, one clause per failing field."""
        parts = []
        for item in error.errors():
            loc = ".".join(str(p) for p in item.get("loc", ())) or "body"
            parts.append(f"{loc}: {item.get('msg', 'invalid')}")
        summary = "; ".join(parts) or str(error)
        return cls(f"{prefix}{summary}" if prefix else summary)


class AdapterInvariantError(X402Error, ValueError):
    """A response could not be translated without inventing data."""

    pass


class NoApplicablePayersError(X402Error):
    """No payment handler offered a way to pay any of the accepted requirements."""

    def __init__(self, message: str = "no applicable payers found"):
        super().__init__(message)


class PaymentRetryExhaustedError(X402Error):
    """The server still answered 402 after every payment attempt.

    Attributes:
        response: The last 402 response received.
        attempts: Number of paid attempts made.
    """

    def __init__(self, response: httpx.Response, attempts: int):
        self.response = response
        self.attempts = attempts
        super().__init__(
            f"payment still required after {attempts} attempt(s): HTTP {response.status_code}"
        )


class FacilitatorResponseError(X402Error):
    """A remote facilitator answered with a non-200 status.

    Attributes:
        status_code: HTTP status returned by the facilitator.
        body: Response body text.
    """

    def __init__(self, operation: str, status_code: int, body: Any):
        self.operation = operation
        self.status_code = status_code
        self.body = body
        super().__init__(f"Facilitator {operation} failed ({status_code}): {body}")
