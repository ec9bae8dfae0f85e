"""Capability registry and tool schema catalog.

This package discovers capability units (handlers) and schema units (the
descriptions shown to the model) from two source directories and exposes
them as immutable values.
"""

from funcall_server.capabilities.catalog import ToolCatalog, ToolSchema
from funcall_server.capabilities.registry import CapabilityRegistry
from funcall_server.capabilities.types import Capability

__all__ = ["Capability", "CapabilityRegistry", "ToolCatalog", "ToolSchema"]
