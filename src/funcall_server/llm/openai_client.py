"""OpenAI chat-completions backend.

Works with api.openai.com and any OpenAI-compatible endpoint reachable
through ``base_url``.
"""

import logging
from collections.abc import Sequence
from typing import Any

import openai

from funcall_server.errors import ModelServiceError
from funcall_server.llm.base import ModelClient, register_backend
from funcall_server.llm.types import (
    AssistantMessage,
    Message,
    ModelReply,
    ToolCallRequest,
    ToolResultMessage,
)

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_HOST = "https://api.openai.com/v1"


def convert_messages_to_openai_format(messages: Sequence[Message]) -> list[dict[str, Any]]:
    """Convert conversation messages to chat-completions message dicts."""
    openai_messages: list[dict[str, Any]] = []

    for msg in messages:
        if isinstance(msg, AssistantMessage):
            openai_msg: dict[str, Any] = {"role": "assistant", "content": msg.content or None}
            if msg.tool_calls:
                openai_msg["tool_calls"] = [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {"name": call.name, "arguments": call.arguments},
                    }
                    for call in msg.tool_calls
                ]
        elif isinstance(msg, ToolResultMessage):
            openai_msg = {
                "role": "tool",
                "tool_call_id": msg.tool_call_id,
                "content": msg.content,
            }
        else:
            openai_msg = {"role": msg.role, "content": msg.content}

        openai_messages.append(openai_msg)

    return openai_messages


class OpenAIModelClient(ModelClient):
    """Client for OpenAI's chat-completions API.

    Attributes:
        host: API base URL
        model: Chat model name (e.g. "gpt-4o-mini")
        _client: The underlying openai.AsyncOpenAI instance
    """

    backend = "openai"

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = 60.0,
    ) -> None:
        """Initialize the OpenAI client.

        Args:
            model: Chat model name
            api_key: API key; falls back to the OPENAI_API_KEY environment variable
            base_url: Optional OpenAI-compatible endpoint
            timeout: Request timeout in seconds
        """
        super().__init__(host=base_url or DEFAULT_OPENAI_HOST, model=model)
        try:
            self._client = openai.AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        except openai.OpenAIError as e:
            raise ModelServiceError(f"Cannot configure OpenAI client: {e}") from e
        logger.info(f"OpenAIModelClient initialized with host: {self.host}")

    async def check_connection(self) -> bool:
        try:
            await self._client.models.list()
            logger.debug("OpenAI connection check: successful")
            return True
        except Exception as e:
            logger.warning(f"OpenAI connection check failed: {e}")
            return False

    async def decide(
        self, messages: Sequence[Message], tools: list[dict[str, Any]]
    ) -> ModelReply:
        request: dict[str, Any] = {
            "model": self.model,
            "messages": convert_messages_to_openai_format(messages),
        }
        if tools:
            request["tools"] = tools
            request["tool_choice"] = "auto"

        try:
            response = await self._client.chat.completions.create(**request)
        except Exception as e:
            logger.error(f"OpenAI decision request failed: {e}")
            raise ModelServiceError(f"OpenAI decision request failed: {e}") from e

        try:
            message = response.choices[0].message
            tool_calls = [
                ToolCallRequest(
                    id=call.id,
                    name=call.function.name,
                    arguments=call.function.arguments or "{}",
                )
                for call in message.tool_calls or []
            ]
            content = message.content or ""
        except (IndexError, AttributeError, TypeError) as e:
            logger.error(f"OpenAI decision response is malformed: {e}")
            raise ModelServiceError(f"Malformed OpenAI decision response: {e}") from e

        logger.debug(f"OpenAI decision: {len(tool_calls)} tool calls")
        return ModelReply(content=content, tool_calls=tool_calls)

    async def complete(self, messages: Sequence[Message]) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=convert_messages_to_openai_format(messages),
            )
        except Exception as e:
            logger.error(f"OpenAI final-answer request failed: {e}")
            raise ModelServiceError(f"OpenAI final-answer request failed: {e}") from e

        try:
            return response.choices[0].message.content or ""
        except (IndexError, AttributeError, TypeError) as e:
            logger.error(f"OpenAI final-answer response is malformed: {e}")
            raise ModelServiceError(f"Malformed OpenAI final-answer response: {e}") from e

    async def close(self) -> None:
        await self._client.close()
        logger.debug("OpenAIModelClient closed")


@register_backend("openai")
def _create_openai_client(settings) -> OpenAIModelClient:
    return OpenAIModelClient(
        model=settings.model,
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        timeout=settings.model_timeout,
    )
