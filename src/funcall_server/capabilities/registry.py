"""Capability registry built from a directory of capability units.

Each unit exposes a zero-argument ``register()`` returning a
:class:`~funcall_server.capabilities.types.Capability` or an iterable of them:

    def register():
        return Capability(name="get_stock_price", handler=get_stock_price)

The registry is built once at startup and is read-only afterwards.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType, ModuleType

from funcall_server.capabilities.discovery import load_units
from funcall_server.capabilities.types import Capability
from funcall_server.errors import DiscoveryError, UnknownCapabilityError

logger = logging.getLogger(__name__)


def _collect_capabilities(module: ModuleType, path: Path) -> list[Capability]:
    """Run a unit's ``register()`` and check what it returned."""
    register = getattr(module, "register", None)
    if not callable(register):
        raise DiscoveryError(f"{path.name} does not define a callable 'register()'")

    try:
        registered = register()
    except Exception as e:
        raise DiscoveryError(f"register() in {path.name} raised: {e}") from e

    if isinstance(registered, Capability):
        return [registered]

    try:
        capabilities = list(registered)
    except TypeError as e:
        raise DiscoveryError(
            f"register() in {path.name} must return a Capability or an iterable of them"
        ) from e

    for item in capabilities:
        if not isinstance(item, Capability):
            raise DiscoveryError(
                f"register() in {path.name} returned {type(item).__name__}, expected Capability"
            )
    return capabilities


class CapabilityRegistry(Mapping[str, Capability]):
    """Immutable mapping of capability name to :class:`Capability`."""

    def __init__(self, capabilities: Iterable[Capability] = ()) -> None:
        """Index *capabilities* by name.

        Later entries replace earlier ones with the same name; every
        replacement is logged.

        Args:
            capabilities: Capabilities in registration order.
        """
        entries: dict[str, Capability] = {}
        for capability in capabilities:
            if capability.name in entries:
                logger.warning(
                    f"Capability '{capability.name}' registered more than once; "
                    "the later registration replaces the earlier one"
                )
            entries[capability.name] = capability
        self._capabilities = MappingProxyType(entries)

    @classmethod
    def discover(cls, source: Path) -> "CapabilityRegistry":
        """Build a registry from every capability unit in *source*.

        Malformed units are skipped with a warning.

        Args:
            source: Directory containing capability units.

        Returns:
            CapabilityRegistry: The populated registry.

        Raises:
            SourceUnreadableError: If *source* cannot be read.
        """
        collected: list[Capability] = []
        for path, module in load_units(source, "functions"):
            try:
                collected.extend(_collect_capabilities(module, path))
            except DiscoveryError as e:
                logger.warning(f"Skipping capability unit {path.name}: {e}")

        registry = cls(collected)
        logger.info(f"Registered {len(registry)} capabilities from {source}: {registry.names()}")
        return registry

    def resolve(self, name: str) -> Capability:
        """Look up a capability by name.

        Raises:
            UnknownCapabilityError: If no capability has that name.
        """
        try:
            return self._capabilities[name]
        except KeyError:
            raise UnknownCapabilityError(name) from None

    def names(self) -> list[str]:
        """Registered names in lexical order."""
        return sorted(self._capabilities)

    def __getitem__(self, name: str) -> Capability:
        return self._capabilities[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._capabilities)

    def __len__(self) -> int:
        return len(self._capabilities)
