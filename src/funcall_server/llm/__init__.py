"""Language model service clients.

This package provides async clients for chat-completion services that support
tool calling, behind a single :class:`ModelClient` interface.
"""

from funcall_server.llm.base import ModelClient, available_backends, create_model_client
from funcall_server.llm.ollama_client import OllamaModelClient
from funcall_server.llm.openai_client import OpenAIModelClient
from funcall_server.llm.types import (
    AssistantMessage,
    Message,
    ModelReply,
    SystemMessage,
    ToolCallRequest,
    ToolResultMessage,
    UserMessage,
)

__all__ = [
    "AssistantMessage",
    "Message",
    "ModelClient",
    "ModelReply",
    "OllamaModelClient",
    "OpenAIModelClient",
    "SystemMessage",
    "ToolCallRequest",
    "ToolResultMessage",
    "UserMessage",
    "available_backends",
    "create_model_client",
]
