"""Chat API endpoints.

This module provides the single-turn chat endpoint, which runs the dispatch
loop for one user message, and its SSE streaming variant.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from sse_starlette.sse import EventSourceResponse

from funcall_server.dependencies import get_dispatcher
from funcall_server.dispatch import FAILURE_REPLY, DispatchLoop, TurnResult
from funcall_server.errors import ModelServiceError
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

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])

MODEL_SERVICE_ERROR = "model_service_error"


def _build_chat_response(result: TurnResult) -> ChatResponse:
    """Convert a TurnResult into the API response body."""
    error = None
    if result.failed:
        error = ErrorInfo(
            code=MODEL_SERVICE_ERROR,
            message="The language model service could not be reached",
        )
    return ChatResponse(
        reply=result.reply,
        tool_calls_executed=[ToolCallExecuted.from_outcome(o) for o in result.calls],
        round_trips=result.round_trips,
        error=error,
    )


@router.post("", response_model=ChatResponse)
async def chat(
    request_body: ChatRequest,
    response: Response,
    dispatcher: DispatchLoop = Depends(get_dispatcher),
) -> ChatResponse:
    """Answer one user message, calling capabilities as the model requests.

    Args:
        request_body: Chat request containing the user message
        response: Outgoing response, used to set the status code on failure
        dispatcher: Injected dispatch loop

    Returns:
        ChatResponse with the reply and the executed calls. If the model
        service fails the status is 502 and the reply is a generic apology.
    """
    logger.info(f"Received chat message ({len(request_body.message)} characters)")

    result = await dispatcher.handle_user_message(request_body.message)
    if result.failed:
        response.status_code = 502

    return _build_chat_response(result)


@router.post("/stream")
async def chat_streaming(
    request_body: ChatRequest,
    request: Request,
    dispatcher: DispatchLoop = Depends(get_dispatcher),
) -> EventSourceResponse:
    """Answer one user message, streaming progress via Server-Sent Events.

    SSE Events:
        - tool_result: After each capability call, in request order
        - reply: The final reply
        - error: If the model service fails
        - done: Stream is complete
    """

    async def event_generator():
        """Generate SSE events from the dispatch loop."""
        calls = 0
        try:
            async for event in dispatcher.stream_turn(request_body.message):
                if await request.is_disconnected():
                    logger.warning("Client disconnected during streaming")
                    return

                if isinstance(event, TurnResult):
                    reply_event = ReplyEvent(reply=event.reply, round_trips=event.round_trips)
                    yield {"event": "reply", "data": reply_event.model_dump_json()}
                else:
                    calls += 1
                    tool_event = ToolResultEvent.from_outcome(event)
                    yield {"event": "tool_result", "data": tool_event.model_dump_json()}

        except ModelServiceError as e:
            logger.error(f"Model service failed during streaming: {e}")
            error_event = ErrorEvent(
                code=MODEL_SERVICE_ERROR,
                message=FAILURE_REPLY,
                details={},
            )
            yield {"event": "error", "data": error_event.model_dump_json()}

        done_event = DoneEvent(calls=calls)
        yield {"event": "done", "data": done_event.model_dump_json()}

    return EventSourceResponse(event_generator())
