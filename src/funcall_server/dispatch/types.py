"""Result types produced by the dispatch loop."""

import json
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CallOutcome:
    """The structured result of one requested call.

    Exactly one of ``result`` / ``error`` is meaningful: ``error`` is None on
    success.

    Attributes:
        call_id: Identifier of the model's call request.
        name: Requested capability name.
        arguments: Raw JSON-text arguments from the model.
        result: Handler return value (None on failure).
        error: Human-readable failure message, or None.
        error_type: Name of the error class on failure.
        content: Text sent back to the model in the tool-result message.
    """

    call_id: str
    name: str
    arguments: str
    result: Any = None
    error: str | None = None
    error_type: str | None = None
    content: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, call_id: str, name: str, arguments: str, result: Any, content: str):
        return cls(call_id=call_id, name=name, arguments=arguments, result=result, content=content)

    @classmethod
    def failure(cls, call_id: str, name: str, arguments: str, error: Exception):
        message = str(error)
        return cls(
            call_id=call_id,
            name=name,
            arguments=arguments,
            error=message,
            error_type=type(error).__name__,
            content=json.dumps({"error": message}),
        )


@dataclass
class TurnResult:
    """Everything produced while answering one user message.

    Attributes:
        reply: Text returned to the user.
        calls: Per-call outcomes in the order the model requested them.
        round_trips: Model requests that returned a response (0, 1 or 2).
            A failed request is not counted.
        failed: True if the model service failed and ``reply`` is a fallback.
    """

    reply: str
    calls: list[CallOutcome] = field(default_factory=list)
    round_trips: int = 0
    failed: bool = False
