"""Health check endpoint router."""

import logging

from fastapi import APIRouter, Request

from funcall_server.llm import ModelClient
from funcall_server.models.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    Returns the current health status and version of funcall-server.
    Also checks connectivity to the model service if the client is initialized.

    Args:
        request: The FastAPI request object.

    Returns:
        HealthResponse: Health status and version information.
    """
    model_connected = None
    model_host = None
    model_backend = request.app.state.settings.model_backend

    if hasattr(request.app.state, "model_client"):
        model_client: ModelClient = request.app.state.model_client
        model_host = model_client.host

        try:
            model_connected = await model_client.check_connection()
            logger.debug(f"Model service connectivity check: {model_connected}")
        except Exception as e:
            logger.warning(f"Model service connectivity check failed: {e}")
            model_connected = False

    return HealthResponse(
        status="ok",
        version="0.1.0",
        model_backend=model_backend,
        model_host=model_host,
        model_connected=model_connected,
    )
