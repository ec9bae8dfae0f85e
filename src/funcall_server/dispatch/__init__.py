"""Dispatch loop and per-call execution."""

from funcall_server.dispatch.executor import execute_call
from funcall_server.dispatch.loop import DEFAULT_SYSTEM_PROMPT, FAILURE_REPLY, DispatchLoop
from funcall_server.dispatch.types import CallOutcome, TurnResult

__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "FAILURE_REPLY",
    "CallOutcome",
    "DispatchLoop",
    "TurnResult",
    "execute_call",
]
