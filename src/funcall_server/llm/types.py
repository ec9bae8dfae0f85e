"""Conversation types shared by the dispatch loop and the model clients.

These are backend-neutral; each client converts them to its own wire format.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ToolCallRequest:
    """A capability invocation requested by the model.

    Attributes:
        id: Identifier linking the call to its tool-result message.
        name: Requested capability name.
        arguments: JSON-encoded argument object, exactly as the model sent it.
    """

    id: str
    name: str
    arguments: str = "{}"


@dataclass
class SystemMessage:
    """The system preamble."""

    content: str
    role: str = "system"


@dataclass
class UserMessage:
    """The user's message."""

    content: str
    role: str = "user"


@dataclass
class AssistantMessage:
    """A model response, possibly carrying call requests."""

    content: str = ""
    tool_calls: list[ToolCallRequest] = field(default_factory=list)
    role: str = "assistant"


@dataclass
class ToolResultMessage:
    """The serialized outcome of one requested call."""

    tool_call_id: str
    name: str
    content: str
    role: str = "tool"


Message = SystemMessage | UserMessage | AssistantMessage | ToolResultMessage


@dataclass
class ModelReply:
    """The model's answer to a decision request."""

    content: str = ""
    tool_calls: list[ToolCallRequest] = field(default_factory=list)

    @property
    def needs_calls(self) -> bool:
        return bool(self.tool_calls)

    def as_message(self) -> AssistantMessage:
        """Return the reply as a history entry."""
        return AssistantMessage(content=self.content, tool_calls=list(self.tool_calls))
