"""Loading of independently authored unit files from a source directory.

Both the capability registry and the tool schema catalog are fed by a
directory of ``*.py`` files. Each file is imported in isolation under a
private module namespace; files whose name starts with ``_`` are ignored.
"""

import importlib.util
import logging
import re
import sys
from pathlib import Path
from types import ModuleType

from funcall_server.errors import DiscoveryError, SourceUnreadableError

logger = logging.getLogger(__name__)

_UNIT_NAMESPACE = "funcall_server_units"


def list_unit_files(source: Path) -> list[Path]:
    """Return the unit files in *source* in lexical order.

    Args:
        source: Directory to scan.

    Returns:
        Sorted list of ``*.py`` paths, excluding names starting with ``_``.

    Raises:
        SourceUnreadableError: If *source* is missing, not a directory, or
            cannot be listed.
    """
    if not source.is_dir():
        raise SourceUnreadableError(f"Source directory not found: {source}")

    try:
        paths = sorted(source.glob("*.py"))
    except OSError as e:
        raise SourceUnreadableError(f"Cannot read source directory {source}: {e}") from e

    return [path for path in paths if not path.name.startswith("_")]


def load_unit(path: Path, kind: str) -> ModuleType:
    """Import a single unit file as a standalone module.

    Args:
        path: Path to the ``.py`` file.
        kind: Namespace segment (e.g. ``"functions"``) keeping capability
            and schema units with the same file name apart.

    Returns:
        The executed module.

    Raises:
        DiscoveryError: If the file cannot be imported.
    """
    safe_stem = re.sub(r"\W", "_", path.stem)
    module_name = f"{_UNIT_NAMESPACE}.{kind}.{safe_stem}"

    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise DiscoveryError(f"Cannot create import spec for {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise DiscoveryError(f"Failed to import {path.name}: {e}") from e

    logger.debug(f"Loaded {kind} unit: {path.name}")
    return module


def load_units(source: Path, kind: str) -> list[tuple[Path, ModuleType]]:
    """Import every unit in *source*, skipping the ones that fail.

    Args:
        source: Directory to scan.
        kind: Namespace segment for the imported modules.

    Returns:
        ``(path, module)`` pairs in lexical file order.

    Raises:
        SourceUnreadableError: If the directory itself cannot be read.
    """
    units = []
    for path in list_unit_files(source):
        try:
            units.append((path, load_unit(path, kind)))
        except DiscoveryError as e:
            logger.warning(f"Skipping {kind} unit {path.name}: {e}")
    return units
