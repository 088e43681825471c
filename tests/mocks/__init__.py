"""Mock implementations for testing."""

from .handlers import (
    TEST_ASSET,
    TEST_NETWORK,
    TEST_PAY_TO,
    TEST_SCHEME,
    RecordingPaymentHandler,
    StubFacilitatorHandler,
    VerifyingFacilitatorHandler,
    build_payment_required,
    build_payment_requirements,
    build_payment_requirements_v1,
    build_resource_info,
    settled,
    verified,
)

__all__ = [
    "TEST_ASSET",
    "TEST_NETWORK",
    "TEST_PAY_TO",
    "TEST_SCHEME",
    "RecordingPaymentHandler",
    "StubFacilitatorHandler",
    "VerifyingFacilitatorHandler",
    "build_payment_required",
    "build_payment_requirements",
    "build_payment_requirements_v1",
    "build_resource_info",
    "settled",
    "verified",
]
