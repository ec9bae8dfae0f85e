"""Executes a single model-requested call against the capability registry.

Every failure is converted into a structured :class:`CallOutcome`; nothing
raised by parsing, lookup or the handler escapes :func:`execute_call`.
"""

import inspect
import json
import logging
from collections.abc import Callable
from typing import Any

from funcall_server.capabilities.registry import CapabilityRegistry
from funcall_server.dispatch.types import CallOutcome
from funcall_server.errors import (
    ArgumentParseError,
    CapabilityExecutionError,
    DispatchError,
)
from funcall_server.llm.types import ToolCallRequest

logger = logging.getLogger(__name__)


def parse_arguments(call: ToolCallRequest) -> dict[str, Any]:
    """Decode the call's JSON-text arguments into a dict.

    An empty payload is treated as ``{}``.

    Raises:
        ArgumentParseError: If the payload is not a JSON object.
    """
    if not call.arguments or not call.arguments.strip():
        return {}

    try:
        decoded = json.loads(call.arguments)
    except ValueError as e:
        raise ArgumentParseError(f"Arguments for '{call.name}' are not valid JSON: {e}") from e

    if not isinstance(decoded, dict):
        raise ArgumentParseError(
            f"Arguments for '{call.name}' must be a JSON object, got {type(decoded).__name__}"
        )
    return decoded


def serialize_result(name: str, result: Any) -> str:
    """Render a handler result as tool-result text.

    Strings pass through unchanged; anything else is JSON-encoded.

    Raises:
        CapabilityExecutionError: If the result is not JSON-serializable.
    """
    if isinstance(result, str):
        return result
    try:
        return json.dumps(result)
    except (TypeError, ValueError) as e:
        raise CapabilityExecutionError(
            f"Function '{name}' returned a result that is not JSON-serializable: {e}"
        ) from e


def _check_signature(name: str, handler: Callable[..., Any], kwargs: dict[str, Any]) -> None:
    """Raise ArgumentParseError if *kwargs* do not fit the handler signature."""
    try:
        signature = inspect.signature(handler)
    except (TypeError, ValueError):
        return
    try:
        signature.bind(**kwargs)
    except TypeError as e:
        raise ArgumentParseError(f"Invalid arguments for '{name}': {e}") from e


def execute_call(registry: CapabilityRegistry, call: ToolCallRequest) -> CallOutcome:
    """Parse, resolve and invoke one call.

    Args:
        registry: Registry to resolve the capability from.
        call: The model's call request.

    Returns:
        CallOutcome: The handler's result or a structured error.
    """
    try:
        arguments = parse_arguments(call)
        capability = registry.resolve(call.name)
        kwargs = capability.bind_arguments(arguments)

        _check_signature(call.name, capability.handler, kwargs)

        try:
            logger.debug(f"Executing capability '{call.name}' with args={kwargs}")
            result = capability.handler(**kwargs)
        except Exception as e:  # noqa: BLE001
            logger.exception(f"Unhandled error in capability '{call.name}'")
            raise CapabilityExecutionError(f"Function '{call.name}' failed: {e}") from e

        outcome = CallOutcome.success(
            call_id=call.id,
            name=call.name,
            arguments=call.arguments,
            result=result,
            content=serialize_result(call.name, result),
        )
    except DispatchError as e:
        outcome = CallOutcome.failure(
            call_id=call.id, name=call.name, arguments=call.arguments, error=e
        )

    logger.info(
        f"Capability call '{call.name}' id={call.id} args={call.arguments} "
        f"-> {'ok' if outcome.ok else outcome.error_type}: {outcome.content}"
    )
    return outcome
