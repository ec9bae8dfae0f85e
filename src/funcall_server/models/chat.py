"""Pydantic models for chat API requests and responses.

This module defines the request and response schemas for the chat endpoints,
including the server-sent events emitted by the streaming endpoint.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from funcall_server.dispatch.types import CallOutcome


class ChatRequest(BaseModel):
    """Request body for POST /api/v1/chat and POST /api/v1/chat/stream."""

    message: str = Field(..., min_length=1, description="The user message to answer")

    model_config = ConfigDict(
        json_schema_extra={"examples": [{"message": "What's the weather in Paris?"}]}
    )


class ToolCallExecuted(BaseModel):
    """One capability call made while answering the message."""

    id: str = Field(description="Call identifier assigned by the model service")
    name: str = Field(description="Requested capability name")
    arguments: Any = Field(
        default=None, description="Decoded arguments (raw text if they were not valid JSON)"
    )
    result: Any = Field(default=None, description="Handler result, if the call succeeded")
    error: str | None = Field(default=None, description="Error message, if the call failed")

    @classmethod
    def from_outcome(cls, outcome: CallOutcome) -> "ToolCallExecuted":
        try:
            arguments = json.loads(outcome.arguments) if outcome.arguments else {}
        except ValueError:
            arguments = outcome.arguments
        return cls(
            id=outcome.call_id,
            name=outcome.name,
            arguments=arguments,
            result=outcome.result,
            error=outcome.error,
        )


class ErrorInfo(BaseModel):
    """Turn-level error summary."""

    code: str
    message: str


class ChatResponse(BaseModel):
    """Response body for POST /api/v1/chat."""

    reply: str = Field(description="The assistant's reply")
    tool_calls_executed: list[ToolCallExecuted] = Field(
        default_factory=list, description="Calls executed for this reply, in request order"
    )
    round_trips: int = Field(
        default=0,
        description="Model service requests that returned a response; a failed request is not counted",
    )
    error: ErrorInfo | None = Field(default=None, description="Set when the turn failed")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "reply": "Apple is trading at $150.00.",
                "tool_calls_executed": [
                    {
                        "id": "call_abc123",
                        "name": "get_stock_price",
                        "arguments": {"ticker": "AAPL"},
                        "result": "Stock price for AAPL: $150.00",
                        "error": None,
                    }
                ],
                "round_trips": 2,
                "error": None,
            }
        }
    )


# SSE Event Models


class ToolResultEvent(ToolCallExecuted):
    """SSE event emitted after each capability call."""


class ReplyEvent(BaseModel):
    """SSE event carrying the final reply."""

    reply: str
    round_trips: int


class ErrorEvent(BaseModel):
    """SSE event for errors during a streamed turn."""

    code: str
    message: str
    details: dict = Field(default_factory=dict)


class DoneEvent(BaseModel):
    """SSE event marking the end of the stream."""

    calls: int = Field(description="Number of calls executed")
