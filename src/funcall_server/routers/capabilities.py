"""Capability listing endpoint."""

from fastapi import APIRouter, Depends

from funcall_server.capabilities import CapabilityRegistry, ToolCatalog
from funcall_server.dependencies import get_catalog, get_registry
from funcall_server.models.capabilities import CapabilityListResponse

router = APIRouter(prefix="/api/v1", tags=["capabilities"])


@router.get("/capabilities", response_model=CapabilityListResponse)
async def list_capabilities(
    registry: CapabilityRegistry = Depends(get_registry),
    catalog: ToolCatalog = Depends(get_catalog),
) -> CapabilityListResponse:
    """List registered capabilities and the tool schemas offered to the model."""
    return CapabilityListResponse(
        capabilities=registry.names(),
        tools=catalog.tool_definitions(),
        dead_schemas=catalog.dead_schemas(),
    )
