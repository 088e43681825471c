"""Capability interfaces implemented by chain-specific collaborators.

Client side, a ``PaymentHandler`` describes which offered requirements it can
pay, as deferred ``PaymentExecer`` candidates; only the chosen candidate is
executed. Server side, a ``FacilitatorHandler`` filters requirements and
verifies or settles the payments it recognises, returning None for payments
that belong to another handler.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Protocol, runtime_checkable

from .adapters import adapt_requirements_v1_to_v2, adapt_requirements_v2_to_v1
from .networks import NetworkTranslator, normalize_network_id, translate_network_to_legacy
from .schemas import (
    PaymentPayload,
    PaymentRequirements,
    PaymentRequirementsV1,
    ResourceInfo,
    SettleResponse,
    SupportedKind,
    VerifyResponse,
)

if TYPE_CHECKING:
    import httpx


# ============================================================================
# Client-Side
# ============================================================================


@dataclass
class RequestContext:
    """What a PaymentHandler knows about the request being paid for.

    Attributes:
        request: The outgoing request that received a 402.
        x402_version: Protocol version the server answered with.
        resource: Resource advertised by the server, if any.
    """

    request: httpx.Request
    x402_version: int = 2
    resource: ResourceInfo | None = None


@dataclass
class PaymentExecResult:
    """Opaque scheme-specific payment artifact produced by ``exec()``."""

    payload: dict[str, Any]


@runtime_checkable
class PaymentExecer(Protocol):
    """A payable candidate: one set of requirements plus a deferred exec."""

    @property
    def requirements(self) -> PaymentRequirements: ...

    async def exec(self) -> PaymentExecResult: ...


@runtime_checkable
class PaymentExecerV1(Protocol):
    @property
    def requirements(self) -> PaymentRequirementsV1: ...

    async def exec(self) -> PaymentExecResult: ...


@dataclass
class DeferredPaymentExecer:
    """PaymentExecer whose artifact is built by ``run`` only when executed.

    Example:
        ```python
        DeferredPaymentExecer(requirements, lambda: signer.sign(requirements))
        ```
    """

    requirements: PaymentRequirements
    run: Callable[[], Awaitable[PaymentExecResult]] = field(repr=False)

    async def exec(self) -> PaymentExecResult:
        return await self.run()


@dataclass
class DeferredPaymentExecerV1:
    requirements: PaymentRequirementsV1
    run: Callable[[], Awaitable[PaymentExecResult]] = field(repr=False)

    async def exec(self) -> PaymentExecResult:
        return await self.run()


class PaymentHandler(ABC):
    """Client-side payment capability for v2 requirements."""

    @abstractmethod
    async def get_execers(
        self,
        context: RequestContext,
        accepts: list[PaymentRequirements],
    ) -> list[PaymentExecer]:
        """Return a candidate for every offered requirement this handler can pay.

        Must not sign or perform I/O for the payment itself; that belongs in
        the returned execer's ``exec()``.
        """
        ...


class PaymentHandlerV1(ABC):
    """Client-side payment capability written against v1 requirements."""

    @abstractmethod
    async def get_execers(
        self,
        context: RequestContext,
        accepts: list[PaymentRequirementsV1],
    ) -> list[PaymentExecerV1]: ...


class _V1PaymentHandlerAsV2(PaymentHandler):
    def __init__(
        self,
        handler: PaymentHandlerV1,
        to_legacy: NetworkTranslator,
        to_caip2: NetworkTranslator,
    ):
        self._handler = handler
        self._to_legacy = to_legacy
        self._to_caip2 = to_caip2

    async def get_execers(self, context, accepts):
        resource = context.resource or ResourceInfo(url="")
        accepts_v1 = [adapt_requirements_v2_to_v1(r, resource, self._to_legacy) for r in accepts]
        execers = await self._handler.get_execers(context, accepts_v1)
        return [
            DeferredPaymentExecer(
                adapt_requirements_v1_to_v2(e.requirements, self._to_caip2),
                e.exec,
            )
            for e in execers
        ]


class _V2PaymentHandlerAsV1(PaymentHandlerV1):
    def __init__(
        self,
        handler: PaymentHandler,
        to_legacy: NetworkTranslator,
        to_caip2: NetworkTranslator,
    ):
        self._handler = handler
        self._to_legacy = to_legacy
        self._to_caip2 = to_caip2

    async def get_execers(self, context, accepts):
        accepts_v2 = [adapt_requirements_v1_to_v2(r, self._to_caip2) for r in accepts]
        execers = await self._handler.get_execers(context, accepts_v2)
        resource = context.resource or ResourceInfo(url="")
        return [
            DeferredPaymentExecerV1(
                adapt_requirements_v2_to_v1(e.requirements, resource, self._to_legacy),
                e.exec,
            )
            for e in execers
        ]


def adapt_payment_handler_v1_to_v2(
    handler: PaymentHandlerV1,
    to_legacy: NetworkTranslator = translate_network_to_legacy,
    to_caip2: NetworkTranslator = normalize_network_id,
) -> PaymentHandler:
    """Let a v1 payment handler take part in v2 negotiation."""
    return _V1PaymentHandlerAsV2(handler, to_legacy, to_caip2)


def adapt_payment_handler_v2_to_v1(
    handler: PaymentHandler,
    to_legacy: NetworkTranslator = translate_network_to_legacy,
    to_caip2: NetworkTranslator = normalize_network_id,
) -> PaymentHandlerV1:
    """Expose a v2 payment handler to code that speaks v1 requirements."""
    return _V2PaymentHandlerAsV1(handler, to_legacy, to_caip2)


# ============================================================================
# Facilitator-Side
# ============================================================================


class HandlerCapability(Enum):
    """Optional FacilitatorHandler methods, probed with ``has_capability``."""

    SUPPORTED = "get_supported"
    VERIFY = "handle_verify"
    SIGNERS = "get_signers"


class FacilitatorHandler(ABC):
    """Server-side payment capability registered with a facilitator.

    Subclasses must implement ``get_requirements`` and ``handle_settle`` and
    may override ``get_supported``, ``handle_verify`` and ``get_signers``.
    Callers check for the optional ones with ``has_capability``.
    """

    @abstractmethod
    async def get_requirements(
        self,
        accepts: list[PaymentRequirements],
        resource: ResourceInfo | None = None,
    ) -> list[PaymentRequirements]:
        """Filter and enrich candidate requirements to the ones this handler can fulfil.

        Returns an empty list, not an error, when nothing applies.
        """
        ...

    @abstractmethod
    async def handle_settle(
        self,
        requirements: PaymentRequirements,
        payment: PaymentPayload,
    ) -> SettleResponse | None:
        """Settle the payment, or return None if it belongs to another handler."""
        ...

    async def handle_verify(
        self,
        requirements: PaymentRequirements,
        payment: PaymentPayload,
    ) -> VerifyResponse | None:
        """Verify the payment, or return None if it belongs to another handler."""
        raise NotImplementedError

    async def get_supported(self) -> list[SupportedKind]:
        raise NotImplementedError

    async def get_signers(self) -> dict[str, list[str]]:
        raise NotImplementedError

    def capabilities(self) -> frozenset[HandlerCapability]:
        """Optional methods this handler implements.

        Defaults to the methods the subclass overrides. Wrappers whose
        support depends on what they wrap override this instead.
        """
        return frozenset(
            c
            for c in HandlerCapability
            if getattr(type(self), c.value) is not getattr(FacilitatorHandler, c.value)
        )


def has_capability(handler: FacilitatorHandler, capability: HandlerCapability) -> bool:
    """Report whether the handler implements the given optional method."""
    return capability in handler.capabilities()
