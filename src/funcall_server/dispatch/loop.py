"""The dispatch loop: one user message in, one reply out.

A turn makes at most two model requests:

1. A decision request carrying the system preamble, the user message and the
   full tool catalog. If the model answers with plain text, that text is the
   reply.
2. Otherwise every requested call is executed in order, the decision and the
   tool results are appended to the history, and a final-answer request
   (without tools) produces the reply.

Tools are not re-offered in the second request, so the model cannot chain
further calls.
"""

import asyncio
import logging
from collections.abc import AsyncIterator

from funcall_server.capabilities.catalog import ToolCatalog
from funcall_server.capabilities.registry import CapabilityRegistry
from funcall_server.dispatch.executor import execute_call
from funcall_server.dispatch.types import CallOutcome, TurnResult
from funcall_server.errors import ModelServiceError
from funcall_server.llm.base import ModelClient
from funcall_server.llm.types import (
    Message,
    SystemMessage,
    ToolResultMessage,
    UserMessage,
)

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant. Use the provided functions when they help "
    "answer the user's question, and answer directly otherwise."
)

FAILURE_REPLY = (
    "Sorry, I couldn't reach the language model service to answer that. "
    "Please try again in a moment."
)


class DispatchLoop:
    """Turns user messages into capability calls and a final reply.

    The registry, catalog and model client are shared, read-only collaborators;
    all per-turn state lives in local variables, so one instance can serve
    concurrent requests.
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        catalog: ToolCatalog,
        model_client: ModelClient,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> None:
        self.registry = registry
        self.catalog = catalog
        self.model_client = model_client
        self.system_prompt = system_prompt

    async def stream_turn(self, text: str) -> AsyncIterator[CallOutcome | TurnResult]:
        """Run one turn, yielding each call outcome and finally the TurnResult.

        Args:
            text: The user's message.

        Yields:
            CallOutcome for every executed call (in request order), then the
            TurnResult as the last item.

        Raises:
            ModelServiceError: If either model request fails.
        """
        history: list[Message] = [
            SystemMessage(content=self.system_prompt),
            UserMessage(content=text),
        ]

        decision = await self.model_client.decide(history, self.catalog.tool_definitions())

        if not decision.needs_calls:
            logger.info("Model answered directly without calls")
            yield TurnResult(reply=decision.content, round_trips=1)
            return

        logger.info(
            f"Model requested {len(decision.tool_calls)} calls: "
            f"{[call.name for call in decision.tool_calls]}"
        )

        outcomes: list[CallOutcome] = []
        for call in decision.tool_calls:
            # Handlers are blocking; keep them off the event loop
            outcome = await asyncio.to_thread(execute_call, self.registry, call)
            outcomes.append(outcome)
            yield outcome

        history.append(decision.as_message())
        history.extend(
            ToolResultMessage(tool_call_id=o.call_id, name=o.name, content=o.content)
            for o in outcomes
        )

        reply = await self.model_client.complete(history)
        yield TurnResult(reply=reply, calls=outcomes, round_trips=2)

    async def run_turn(self, text: str) -> TurnResult:
        """Run one turn and return its result.

        Raises:
            ModelServiceError: If either model request fails.
        """
        result: TurnResult | None = None
        async for event in self.stream_turn(text):
            if isinstance(event, TurnResult):
                result = event
        assert result is not None
        return result

    async def handle_user_message(self, text: str) -> TurnResult:
        """Run one turn, degrading model-service failures to a fallback reply.

        Returns:
            TurnResult: The reply, or ``FAILURE_REPLY`` with ``failed=True``
            if the model service could not be reached. Calls that already ran
            are kept in ``calls``.
        """
        calls: list[CallOutcome] = []
        round_trips = 0
        try:
            async for event in self.stream_turn(text):
                if isinstance(event, TurnResult):
                    return event
                calls.append(event)
                # The decision request succeeded; a failing final request is not counted
                round_trips = 1
        except ModelServiceError as e:
            logger.error(f"Turn aborted, model service failed: {e}")
            return TurnResult(reply=FAILURE_REPLY, calls=calls, round_trips=round_trips, failed=True)

        raise RuntimeError("Dispatch loop ended without a result")
