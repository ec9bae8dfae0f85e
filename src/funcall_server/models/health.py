"""Health check response model."""

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Health status indicator ("ok" or "error").
        version: The version of funcall-server.
        model_backend: Name of the configured model backend.
        model_host: Base URL of the model service, if the client is initialized.
        model_connected: Whether the model service answered a connectivity check.
    """

    model_config = ConfigDict(protected_namespaces=())

    status: str = Field(..., description="Health status of the service")
    version: str = Field(..., description="Version of funcall-server")
    model_backend: str | None = Field(default=None, description="Configured model backend")
    model_host: str | None = Field(default=None, description="Model service URL")
    model_connected: bool | None = Field(
        default=None, description="Whether the model service is reachable"
    )
