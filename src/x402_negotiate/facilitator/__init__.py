"""Facilitator side: handler dispatch, v1 handler bridging and HTTP routes."""

from .app import FacilitatorAppConfig, create_app, serve
from .dispatcher import DispatchResult, FacilitatorDispatcher
from .legacy import LegacyFacilitatorHandler, adapt_handler_v1_to_v2
from .routes import create_facilitator_router

__all__ = [
    "DispatchResult",
    "FacilitatorDispatcher",
    "LegacyFacilitatorHandler",
    "adapt_handler_v1_to_v2",
    "create_facilitator_router",
    "FacilitatorAppConfig",
    "create_app",
    "serve",
]
