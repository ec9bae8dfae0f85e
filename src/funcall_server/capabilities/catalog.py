"""Tool schema catalog handed to the model with every decision request.

Schema units expose a zero-argument ``schema()`` returning a mapping (or an
iterable of mappings) shaped like an OpenAI function definition:

    def schema():
        return {
            "name": "get_weather",
            "description": "Get the current weather in a given location",
            "parameters": {
                "type": "object",
                "properties": {
                    "location": {"type": "string", "description": "City name"},
                },
                "required": ["location"],
            },
        }
"""

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from pathlib import Path
from types import ModuleType
from typing import Any, Literal, overload

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from funcall_server.capabilities.discovery import load_units
from funcall_server.errors import DiscoveryError

logger = logging.getLogger(__name__)


class ParameterProperty(BaseModel):
    """One named argument of a tool."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: Literal["string", "number", "integer", "boolean"]
    description: str = ""


class ToolParameters(BaseModel):
    """Structural description of a tool's arguments."""

    model_config = ConfigDict(frozen=True)

    type: Literal["object"] = "object"
    properties: dict[str, ParameterProperty] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _required_names_exist(self) -> "ToolParameters":
        unknown = [name for name in self.required if name not in self.properties]
        if unknown:
            raise ValueError(f"required names not declared in properties: {unknown}")
        return self


class ToolSchema(BaseModel):
    """Calling contract of one capability as shown to the model."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    description: str = ""
    parameters: ToolParameters

    def to_tool_definition(self) -> dict[str, Any]:
        """Return the chat-completions ``tools`` entry for this schema."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters.model_dump(),
            },
        }


def _collect_schemas(module: ModuleType, path: Path) -> list[ToolSchema]:
    """Run a unit's ``schema()`` and validate every mapping it returned."""
    producer = getattr(module, "schema", None)
    if not callable(producer):
        raise DiscoveryError(f"{path.name} does not define a callable 'schema()'")

    try:
        produced = producer()
    except Exception as e:
        raise DiscoveryError(f"schema() in {path.name} raised: {e}") from e

    raw_schemas = [produced] if isinstance(produced, Mapping) else produced
    try:
        raw_schemas = list(raw_schemas)
    except TypeError as e:
        raise DiscoveryError(
            f"schema() in {path.name} must return a mapping or an iterable of mappings"
        ) from e

    schemas = []
    for raw in raw_schemas:
        if not isinstance(raw, Mapping):
            raise DiscoveryError(
                f"schema() in {path.name} returned {type(raw).__name__}, expected a mapping"
            )
        missing = [key for key in ("name", "parameters") if key not in raw]
        if missing:
            raise DiscoveryError(f"Schema in {path.name} is missing {', '.join(missing)}")
        try:
            schemas.append(ToolSchema.model_validate(dict(raw)))
        except ValidationError as e:
            raise DiscoveryError(f"Schema '{raw['name']}' in {path.name} is invalid: {e}") from e
    return schemas


class ToolCatalog(Sequence[ToolSchema]):
    """Immutable, name-ordered sequence of :class:`ToolSchema`."""

    def __init__(
        self,
        schemas: Iterable[ToolSchema] = (),
        capability_names: Iterable[str] | None = None,
    ) -> None:
        """Index *schemas* by name and sort them.

        Args:
            schemas: Schemas in discovery order; later duplicates replace
                earlier ones.
            capability_names: Names of registered capabilities. When given,
                schemas without a matching capability are logged as dead.
        """
        by_name: dict[str, ToolSchema] = {}
        for tool_schema in schemas:
            if tool_schema.name in by_name:
                logger.warning(
                    f"Tool schema '{tool_schema.name}' defined more than once; "
                    "the later definition replaces the earlier one"
                )
            by_name[tool_schema.name] = tool_schema

        self._schemas = tuple(by_name[name] for name in sorted(by_name))

        self._dead: tuple[str, ...] = ()
        if capability_names is not None:
            known = set(capability_names)
            self._dead = tuple(s.name for s in self._schemas if s.name not in known)
            for name in self._dead:
                logger.warning(
                    f"Tool schema '{name}' has no registered capability; "
                    "calls to it will be reported as not recognized"
                )

    @classmethod
    def discover(
        cls, source: Path, capability_names: Iterable[str] | None = None
    ) -> "ToolCatalog":
        """Build a catalog from every schema unit in *source*.

        Args:
            source: Directory containing schema units.
            capability_names: Registered capability names used for the
                dead-schema check (typically a ``CapabilityRegistry``).

        Returns:
            ToolCatalog: The populated catalog.

        Raises:
            SourceUnreadableError: If *source* cannot be read.
        """
        collected: list[ToolSchema] = []
        for path, module in load_units(source, "tools"):
            try:
                collected.extend(_collect_schemas(module, path))
            except DiscoveryError as e:
                logger.warning(f"Skipping schema unit {path.name}: {e}")

        catalog = cls(collected, capability_names=capability_names)
        logger.info(f"Loaded {len(catalog)} tool schemas from {source}: {catalog.names()}")
        return catalog

    def names(self) -> list[str]:
        """Schema names in catalog order."""
        return [s.name for s in self._schemas]

    def dead_schemas(self) -> list[str]:
        """Names of schemas without a registered capability."""
        return list(self._dead)

    def tool_definitions(self) -> list[dict[str, Any]]:
        """Return a freshly built ``tools`` payload for a decision request."""
        return [s.to_tool_definition() for s in self._schemas]

    @overload
    def __getitem__(self, index: int) -> ToolSchema: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[ToolSchema]: ...

    def __getitem__(self, index):
        return self._schemas[index]

    def __iter__(self) -> Iterator[ToolSchema]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)
