"""Ollama chat backend.

Ollama returns tool-call arguments as mappings and without call identifiers,
so this client re-encodes arguments as JSON text and generates ids locally.
"""

import json
import logging
import uuid
from collections.abc import Sequence
from typing import Any

import ollama

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


def _get_value(obj: Any, key: str, default: Any = None) -> Any:
    """Read *key* from either an ollama response object or a plain dict."""
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _decode_arguments(arguments: str) -> dict[str, Any]:
    try:
        decoded = json.loads(arguments or "{}")
    except ValueError:
        return {}
    return decoded if isinstance(decoded, dict) else {}


def convert_messages_to_ollama_format(messages: Sequence[Message]) -> list[dict[str, Any]]:
    """Convert conversation messages to Ollama chat message dicts."""
    ollama_messages: list[dict[str, Any]] = []

    for msg in messages:
        ollama_msg: dict[str, Any] = {"role": msg.role, "content": msg.content}

        if isinstance(msg, AssistantMessage) and msg.tool_calls:
            ollama_msg["tool_calls"] = [
                {
                    "function": {
                        "name": call.name,
                        "arguments": _decode_arguments(call.arguments),
                    }
                }
                for call in msg.tool_calls
            ]
        elif isinstance(msg, ToolResultMessage):
            ollama_msg["tool_name"] = msg.name

        ollama_messages.append(ollama_msg)

    return ollama_messages


class OllamaModelClient(ModelClient):
    """Client for a local or remote Ollama server.

    Attributes:
        host: The Ollama server URL (e.g., "http://localhost:11434")
        model: Model name (e.g., "llama3.1:8b")
        _client: The underlying ollama.AsyncClient instance
    """

    backend = "ollama"

    def __init__(self, host: str, model: str, timeout: float = 60.0) -> None:
        super().__init__(host=host, model=model)
        self._client = ollama.AsyncClient(host=host, timeout=timeout)
        logger.info(f"OllamaModelClient initialized with host: {host}")

    async def check_connection(self) -> bool:
        try:
            await self._client.list()
            logger.debug("Ollama connection check: successful")
            return True
        except Exception as e:
            logger.warning(f"Ollama connection check failed: {e}")
            return False

    async def decide(
        self, messages: Sequence[Message], tools: list[dict[str, Any]]
    ) -> ModelReply:
        try:
            response = await self._client.chat(
                model=self.model,
                messages=convert_messages_to_ollama_format(messages),
                tools=tools or None,
                stream=False,
            )
        except Exception as e:
            logger.error(f"Ollama decision request failed: {e}")
            raise ModelServiceError(f"Ollama decision request failed: {e}") from e

        message = _get_value(response, "message", {})
        tool_calls = []
        try:
            for call in _get_value(message, "tool_calls", None) or []:
                function = _get_value(call, "function", {})
                arguments = _get_value(function, "arguments", None) or {}
                tool_calls.append(
                    ToolCallRequest(
                        id=f"call_{uuid.uuid4().hex[:10]}",
                        name=_get_value(function, "name", ""),
                        arguments=json.dumps(dict(arguments)),
                    )
                )
        except (TypeError, ValueError) as e:
            logger.error(f"Ollama decision response is malformed: {e}")
            raise ModelServiceError(f"Malformed Ollama decision response: {e}") from e

        logger.debug(f"Ollama decision: {len(tool_calls)} tool calls")
        return ModelReply(content=_get_value(message, "content", "") or "", tool_calls=tool_calls)

    async def complete(self, messages: Sequence[Message]) -> str:
        try:
            response = await self._client.chat(
                model=self.model,
                messages=convert_messages_to_ollama_format(messages),
                stream=False,
            )
        except Exception as e:
            logger.error(f"Ollama final-answer request failed: {e}")
            raise ModelServiceError(f"Ollama final-answer request failed: {e}") from e

        message = _get_value(response, "message", {})
        return _get_value(message, "content", "") or ""


@register_backend("ollama")
def _create_ollama_client(settings) -> OllamaModelClient:
    return OllamaModelClient(
        host=settings.ollama_host,
        model=settings.model,
        timeout=settings.model_timeout,
    )
