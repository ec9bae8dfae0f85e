"""Dependency injection providers for FastAPI endpoints."""

from functools import lru_cache

from fastapi import HTTPException, Request

from funcall_server.capabilities import CapabilityRegistry, ToolCatalog
from funcall_server.config import FuncallServerSettings
from funcall_server.dispatch import DispatchLoop


@lru_cache
def get_settings() -> FuncallServerSettings:
    """Get the application settings instance.

    Cached so the same settings instance is reused across all requests.
    Settings are loaded from environment variables with the FUNCALL_ prefix.

    Returns:
        FuncallServerSettings: The application configuration settings.
    """
    return FuncallServerSettings()


def _not_initialized(component: str) -> HTTPException:
    return HTTPException(
        status_code=503,
        detail={
            "error": {
                "code": "not_initialized",
                "message": f"{component} not initialized",
                "details": {},
            }
        },
    )


def get_dispatcher(request: Request) -> DispatchLoop:
    """Get the DispatchLoop created during application startup.

    Raises:
        HTTPException: If startup has not run (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "dispatcher"):
        raise _not_initialized("Dispatch loop")
    return request.app.state.dispatcher


def get_registry(request: Request) -> CapabilityRegistry:
    """Get the capability registry from app state."""
    if not hasattr(request.app.state, "registry"):
        raise _not_initialized("Capability registry")
    return request.app.state.registry


def get_catalog(request: Request) -> ToolCatalog:
    """Get the tool schema catalog from app state."""
    if not hasattr(request.app.state, "catalog"):
        raise _not_initialized("Tool catalog")
    return request.app.state.catalog
