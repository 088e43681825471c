"""Client-side negotiate-then-pay engine around a fetch-like callable.

``wrap`` turns a single logical request into the x402 round trip: send the
request, and on 402 parse the offered requirements, collect candidates from
every registered PaymentHandler, execute the chosen one, and resend with the
payment header. Paid attempts that still get 402 are retried with a doubling
backoff until the retry budget is spent.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Union

import httpx
from pydantic import ValidationError

from ..adapters import adapt_payment_required_v1_to_v2
from ..interfaces import PaymentExecer, PaymentHandler, RequestContext
from ..networks import normalize_network_id, translate_network_to_legacy
from ..schemas import (
    NoApplicablePayersError,
    PaymentPayload,
    PaymentPayloadV1,
    PaymentRequired,
    PaymentRequirements,
    PaymentRetryExhaustedError,
    PaymentValidationError,
    ResourceInfo,
    parse_payment_required,
)
from .constants import PAYMENT_REQUIRED_HEADER, PAYMENT_REQUIRED_STATUS, payment_header_name
from .utils import decode_payment_required_header, encode_payment_header

logger = logging.getLogger(__name__)

# ============================================================================
# Type Aliases
# ============================================================================

Fetch = Callable[[httpx.Request], Awaitable[httpx.Response]]

PayerChooser = Callable[
    [list[PaymentExecer]], Union[PaymentExecer, Awaitable[PaymentExecer]]
]

Sleep = Callable[[float], Awaitable[None]]


def choose_first_available(candidates: list[PaymentExecer]) -> PaymentExecer:
    """Default chooser: the first candidate in handler order.

    Raises:
        NoApplicablePayersError: If there are no candidates.
    """
    if not candidates:
        raise NoApplicablePayersError()
    return candidates[0]


# ============================================================================
# Configuration
# ============================================================================


@dataclass
class WrapOptions:
    """Options for ``wrap``.

    Attributes:
        handlers: Payment handlers, asked concurrently for candidates.
        payer_chooser: Picks one candidate; may be sync or async.
        phase1_fetch: Fetch for the initial unpaid request. Defaults to the
            wrapped fetch.
        retry_count: Paid attempts allowed after the first one.
        initial_retry_delay: Backoff before the second paid attempt, in
            milliseconds. Doubles after each further 402.
        return_payment_failure: Return the last 402 instead of raising
            PaymentRetryExhaustedError when attempts run out.
        verbose: Log each step at INFO instead of DEBUG.
        logger: Logger to use; defaults to this module's logger.
        sleep: Coroutine used for the backoff wait, taking seconds.
    """

    handlers: list[PaymentHandler]
    payer_chooser: PayerChooser = choose_first_available
    phase1_fetch: Fetch | None = None
    retry_count: int = 2
    initial_retry_delay: float = 100
    return_payment_failure: bool = False
    verbose: bool = False
    logger: logging.Logger | None = None
    sleep: Sleep = field(default=asyncio.sleep, repr=False)

    def __post_init__(self) -> None:
        if self.retry_count < 0:
            raise ValueError("retry_count must not be negative")
        if self.initial_retry_delay < 0:
            raise ValueError("initial_retry_delay must not be negative")


# ============================================================================
# Negotiation
# ============================================================================


@dataclass
class PreparedPayment:
    """The payment chosen for one paid attempt.

    Attributes:
        header_name: X-PAYMENT for v1 servers, PAYMENT-SIGNATURE for v2.
        header_value: base64(JSON) encoded payload.
        payload: The payload that was encoded.
        requirements: The requirements that were paid.
    """

    header_name: str
    header_value: str
    payload: PaymentPayload | PaymentPayloadV1
    requirements: PaymentRequirements


async def _read_payment_required(
    request: httpx.Request,
    response: httpx.Response,
) -> tuple[int, PaymentRequired]:
    header = response.headers.get(PAYMENT_REQUIRED_HEADER)
    if header:
        required = decode_payment_required_header(header)
    else:
        await response.aread()
        try:
            required = parse_payment_required(response.json())
        except ValidationError as e:
            raise PaymentValidationError.from_pydantic(
                e, "couldn't parse payment required response: "
            ) from e
        except (json.JSONDecodeError, ValueError) as e:
            raise PaymentValidationError(
                f"couldn't parse payment required response: {e}"
            ) from e

    if isinstance(required, PaymentRequired):
        return 2, required
    return 1, adapt_payment_required_v1_to_v2(required, str(request.url), normalize_network_id)


async def process_payment_required_response(
    request: httpx.Request,
    response: httpx.Response,
    handlers: list[PaymentHandler],
    payer_chooser: PayerChooser = choose_first_available,
) -> PreparedPayment:
    """Turn a 402 response into the payment header for the next attempt.

    The PAYMENT-REQUIRED header is preferred; without it the body is read as
    a v1 response and its requirements are adapted to v2 with CAIP-2
    networks. Every handler is asked for candidates concurrently, and only
    the chosen candidate is executed.

    Args:
        request: The request that received the 402.
        response: The 402 response.
        handlers: Payment handlers, in priority order.
        payer_chooser: Picks one of the collected candidates.

    Returns:
        PreparedPayment for the retry.

    Raises:
        PaymentValidationError: If the 402 response cannot be parsed.
        NoApplicablePayersError: From the default chooser, when no handler can pay.
    """
    version, required = await _read_payment_required(request, response)
    context = RequestContext(request=request, x402_version=version, resource=required.resource)

    results = await asyncio.gather(
        *(handler.get_execers(context, list(required.accepts)) for handler in handlers)
    )
    candidates = [execer for result in results for execer in result]

    chosen = payer_chooser(candidates)
    if inspect.isawaitable(chosen):
        chosen = await chosen
    result = await chosen.exec()

    requirements = chosen.requirements
    payload: PaymentPayload | PaymentPayloadV1
    if version == 2:
        payload = PaymentPayload(
            accepted=requirements,
            payload=result.payload,
            resource=required.resource,
        )
    else:
        payload = PaymentPayloadV1(
            scheme=requirements.scheme,
            network=translate_network_to_legacy(requirements.network),
            asset=requirements.asset,
            payload=result.payload,
        )

    return PreparedPayment(
        header_name=payment_header_name(version),
        header_value=encode_payment_header(payload),
        payload=payload,
        requirements=requirements,
    )


def _with_payment_header(request: httpx.Request, name: str, value: str) -> httpx.Request:
    headers = request.headers.copy()
    headers[name] = value
    return httpx.Request(
        request.method,
        request.url,
        headers=headers,
        content=request.content,
        extensions=dict(request.extensions),
    )


# ============================================================================
# Engine
# ============================================================================


class x402Fetch:
    """Fetch wrapper that pays for 402 responses.

    Holds only configuration; every call keeps its negotiation state local,
    so one instance can serve concurrent requests.
    """

    def __init__(self, fetch: Fetch, options: WrapOptions) -> None:
        """Create x402Fetch.

        Args:
            fetch: Fetch used for paid attempts (and the first request unless
                ``options.phase1_fetch`` is set).
            options: Handlers, chooser and retry policy.
        """
        self._fetch = fetch
        self._options = options
        self._logger = options.logger or logger

    @property
    def options(self) -> WrapOptions:
        return self._options

    def _log(self, msg: str) -> None:
        level = logging.INFO if self._options.verbose else logging.DEBUG
        self._logger.log(level, msg)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        options = self._options
        phase1 = options.phase1_fetch or self._fetch

        self._log(f"x402: sending {request.method} {request.url}")
        response = await phase1(request)
        if response.status_code != PAYMENT_REQUIRED_STATUS:
            return response

        attempts = options.retry_count + 1
        delay = options.initial_retry_delay
        for attempt in range(1, attempts + 1):
            self._log(f"x402: payment required, negotiating attempt {attempt}/{attempts}")
            try:
                prepared = await process_payment_required_response(
                    request, response, options.handlers, options.payer_chooser
                )
            except PaymentValidationError as e:
                if attempt == 1:
                    await response.aclose()
                    raise
                # A rejected payment may answer 402 without new requirements.
                self._logger.warning(
                    f"x402: paid attempt rejected without requirements to renegotiate: {e}"
                )
                return self._give_up(request, response, attempt - 1)
            except Exception:
                await response.aclose()
                raise
            await response.aclose()
            self._log(
                f"x402: paying with scheme={prepared.requirements.scheme} "
                f"network={prepared.requirements.network} via {prepared.header_name}"
            )

            response = await self._fetch(
                _with_payment_header(request, prepared.header_name, prepared.header_value)
            )
            if response.status_code != PAYMENT_REQUIRED_STATUS:
                self._log(f"x402: paid request completed with HTTP {response.status_code}")
                return response

            if attempt < attempts:
                self._log(f"x402: payment rejected, retrying in {delay}ms")
                await options.sleep(delay / 1000)
                delay *= 2

        return self._give_up(request, response, attempts)

    def _give_up(
        self,
        request: httpx.Request,
        response: httpx.Response,
        attempts: int,
    ) -> httpx.Response:
        self._logger.warning(
            f"x402: payment still required after {attempts} attempt(s) for {request.url}"
        )
        if self._options.return_payment_failure:
            return response
        raise PaymentRetryExhaustedError(response, attempts)


def wrap(fetch: Fetch, options: WrapOptions) -> x402Fetch:
    """Wrap a fetch callable with x402 payment negotiation.

    Args:
        fetch: Async callable taking an httpx.Request and returning an httpx.Response.
        options: Handlers, chooser and retry policy.

    Returns:
        x402Fetch, itself a fetch callable.

    Example:
        ```python
        async with httpx.AsyncClient() as client:
            fetch = wrap(httpx_fetch(client), WrapOptions(handlers=[my_handler]))
            response = await fetch(client.build_request("GET", url))
        ```
    """
    return x402Fetch(fetch, options)
