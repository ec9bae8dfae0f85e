"""Data types for capabilities.

A capability is a named, synchronous handler that the model can ask the server
to run. Capability units declare them explicitly through ``register()``.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from funcall_server.errors import ArgumentParseError


@dataclass(frozen=True)
class Capability:
    """A named invocable unit exposed to the model.

    Attributes:
        name: Unique identifier; must equal the name of its tool schema.
        handler: Callable taking keyword arguments and returning a
            JSON-serializable value.
        args_model: Optional pydantic model used to validate and coerce the
            arguments before the handler is called.
        description: Free-form description, used for listings only.
    """

    name: str
    handler: Callable[..., Any]
    args_model: type[BaseModel] | None = None
    description: str = ""

    def bind_arguments(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        """Validate *arguments* against ``args_model`` and return handler kwargs.

        Args:
            arguments: Decoded argument payload from the model.

        Returns:
            Keyword arguments for the handler.

        Raises:
            ArgumentParseError: If the arguments do not fit ``args_model``.
        """
        if self.args_model is None:
            return dict(arguments)

        try:
            parsed = self.args_model.model_validate(dict(arguments))
        except ValidationError as e:
            raise ArgumentParseError(
                f"Invalid arguments for '{self.name}': {e.error_count()} validation error(s): "
                + "; ".join(
                    f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
                    for err in e.errors()
                )
            ) from e

        return {field: getattr(parsed, field) for field in type(parsed).model_fields}
