"""FastAPI application factory and lifespan management.

This module contains the create_app() factory function that creates and configures
the FastAPI application instance, including lifespan management for startup/shutdown
and router registration.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from funcall_server.capabilities import CapabilityRegistry, ToolCatalog
from funcall_server.config import FuncallServerSettings
from funcall_server.dispatch import DispatchLoop
from funcall_server.llm import create_model_client
from funcall_server.routers import capabilities, chat, health

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for FastAPI application.

    The capability registry, tool catalog, model client and dispatch loop are
    built once at startup and stored in app.state for reuse across all
    requests. A missing or unreadable source directory aborts startup.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control is yielded while the app is running.
    """
    settings: FuncallServerSettings = app.state.settings

    registry = CapabilityRegistry.discover(settings.resolved_functions_dir)
    catalog = ToolCatalog.discover(settings.resolved_tools_dir, capability_names=registry)
    app.state.registry = registry
    app.state.catalog = catalog

    app.state.model_client = create_model_client(settings)
    logger.info(
        f"Initialized {settings.model_backend} model client with host: "
        f"{app.state.model_client.host}"
    )

    if settings.check_model_on_startup:
        connected = await app.state.model_client.check_connection()
        if connected:
            logger.info("Successfully connected to the model service")
        else:
            logger.warning("Could not connect to the model service - check host and credentials")

    app.state.dispatcher = DispatchLoop(
        registry=registry,
        catalog=catalog,
        model_client=app.state.model_client,
        system_prompt=settings.system_prompt,
    )

    yield

    # Shutdown: Clean up resources
    if hasattr(app.state, "model_client"):
        await app.state.model_client.close()
        logger.info("Model client closed")


def create_app(settings: FuncallServerSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional FuncallServerSettings instance. If not provided,
                  settings will be loaded from environment variables.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        from funcall_server.dependencies import get_settings

        settings = get_settings()

    app = FastAPI(
        title="funcall-server",
        description="Chat server dispatching LLM function calls to local Python capabilities",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings in app.state for lifespan access
    app.state.settings = settings

    # Note: FastAPI's type hints for add_middleware are overly strict
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(chat.router)
    app.include_router(capabilities.router)

    return app
