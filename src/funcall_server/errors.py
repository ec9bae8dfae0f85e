"""Error taxonomy for funcall-server.

Errors fall into three groups by how far they propagate:

- Startup errors (``DiscoveryError`` and its fatal subclass
  ``SourceUnreadableError``) raised while building the registry and catalog.
- Per-call errors (``DispatchError`` subclasses) that are folded into a
  structured result for one call and never abort the turn.
- Turn errors (``ModelServiceError``) that abort a single turn but not the
  process.
"""


class FuncallError(Exception):
    """Base class for all funcall-server errors."""


class DiscoveryError(FuncallError):
    """A capability or schema unit could not be loaded.

    Non-fatal on its own: the offending unit is skipped with a warning.
    """


class SourceUnreadableError(DiscoveryError):
    """A whole source directory is missing or unreadable (startup-fatal)."""


class DispatchError(FuncallError):
    """Base class for errors scoped to a single requested call."""


class UnknownCapabilityError(DispatchError):
    """The model requested a capability that is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Function '{name}' is not recognized")


class ArgumentParseError(DispatchError):
    """The call's argument payload is malformed or does not fit the capability."""


class CapabilityExecutionError(DispatchError):
    """The capability handler itself failed."""


class ModelServiceError(FuncallError):
    """The request to the language model service failed."""
