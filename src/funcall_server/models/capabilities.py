"""Response models for the capabilities listing endpoint."""

from typing import Any

from pydantic import BaseModel, Field


class CapabilityListResponse(BaseModel):
    """Registered capabilities and the tool schemas offered to the model."""

    capabilities: list[str] = Field(description="Registered capability names")
    tools: list[dict[str, Any]] = Field(description="Tool definitions sent to the model")
    dead_schemas: list[str] = Field(
        default_factory=list, description="Schemas without a registered capability"
    )
