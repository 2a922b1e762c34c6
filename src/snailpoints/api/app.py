"""FastAPI application factory hosting the web dashboard."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from snailpoints import __version__
from snailpoints.config import ClientConfig
from snailpoints.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(config: ClientConfig | None = None, enable_ui: bool = True) -> FastAPI:
    """Create the FastAPI application.

    Args:
        config: Client configuration; read from the environment when omitted.
        enable_ui: Whether to mount the NiceGUI web dashboard.

    Returns:
        Configured FastAPI application instance.
    """
    config = config or ClientConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(level=config.log_level, json_output=config.json_logs)
        logger.info("snailpoints_ui_starting", api_base=config.api_base)
        yield
        logger.info("snailpoints_ui_stopped")

    app = FastAPI(
        title="Snail Points",
        description="Web dashboard for the Snail Points reward tracker",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "version": __version__, "api_base": config.api_base}

    if enable_ui:
        from snailpoints.ui.main import setup_ui
        setup_ui(app, config)

    return app
