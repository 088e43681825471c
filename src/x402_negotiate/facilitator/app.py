"""Standalone facilitator service."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Sequence

from dotenv import load_dotenv
from fastapi import FastAPI

from ..interfaces import FacilitatorHandler
from .dispatcher import FacilitatorDispatcher
from .routes import create_facilitator_router

logger = logging.getLogger(__name__)

DEFAULT_PORT = 4000


@dataclass
class FacilitatorAppConfig:
    """Configuration for the facilitator service.

    Attributes:
        host: Interface to bind.
        port: Port to listen on.
        log_level: Root log level name.
        title: OpenAPI title.
    """

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    title: str = "x402 Facilitator"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> FacilitatorAppConfig:
        """Read HOST, PORT and LOG_LEVEL, optionally loading a .env file first."""
        if load_env_file:
            load_dotenv()
        return cls(
            host=os.environ.get("HOST", cls.host),
            port=int(os.environ.get("PORT", str(DEFAULT_PORT))),
            log_level=os.environ.get("LOG_LEVEL", cls.log_level).upper(),
        )


def create_app(
    handlers: Sequence[FacilitatorHandler],
    config: FacilitatorAppConfig | None = None,
) -> FastAPI:
    """Create a FastAPI app serving the facilitator endpoints plus /health."""
    config = config or FacilitatorAppConfig()
    dispatcher = FacilitatorDispatcher(handlers)

    app = FastAPI(title=config.title)
    app.state.dispatcher = dispatcher
    app.include_router(create_facilitator_router(dispatcher))

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "ok", "handlers": len(dispatcher.handlers)}

    return app


def serve(
    handlers: Sequence[FacilitatorHandler],
    config: FacilitatorAppConfig | None = None,
) -> None:
    """Configure logging once and run the facilitator with uvicorn."""
    import uvicorn

    config = config or FacilitatorAppConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"Facilitator listening on http://{config.host}:{config.port}")
    uvicorn.run(create_app(handlers, config), host=config.host, port=config.port)
