"""Pydantic models for API request and response schemas."""

from funcall_server.models.capabilities import CapabilityListResponse
from funcall_server.models.chat import (
    ChatRequest,
    ChatResponse,
    DoneEvent,
    ErrorEvent,
    ErrorInfo,
    ReplyEvent,
    ToolCallExecuted,
    ToolResultEvent,
)
from funcall_server.models.health import HealthResponse

__all__ = [
    "CapabilityListResponse",
    "ChatRequest",
    "ChatResponse",
    "DoneEvent",
    "ErrorEvent",
    "ErrorInfo",
    "HealthResponse",
    "ReplyEvent",
    "ToolCallExecuted",
    "ToolResultEvent",
]
