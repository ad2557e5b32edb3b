"""
Package registry — name-indexed, insertion-ordered package definitions.

Several definitions may share a name (one per version, or even
duplicate versions). Lookups never raise: anything missing is None.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Versioned(Protocol):
    """What the registry needs from a package definition."""

    name: str
    version: Any


class PackageRegistry:
    """Multi-map from package name to its registered definitions.

    Not thread-safe; share across workers only behind a lock.
    """

    def __init__(self) -> None:
        self._packages: dict[str, list[Any]] = {}

    def add(self, name: str, definition: Any) -> None:
        """Append ``definition`` under ``name``."""
        self._packages.setdefault(name, []).append(definition)
        logger.debug("Registered package %s (version=%s)", name, getattr(definition, "version", None))

    def add_definition(self, definition: Versioned) -> None:
        """Register a definition under its own ``name``."""
        self.add(definition.name, definition)

    def find(self, name: str, version: Any = None) -> Any | list[Any] | None:
        """Look up definitions by name, optionally filtered by version.

        Without a version the full list is returned, even when it holds
        a single definition. With a version, one match comes back
        unwrapped, several come back as a list, none is ``None``.
        """
        found = self._packages.get(name)
        if not found:
            return None
        if version is None:
            return list(found)

        matches = [d for d in found if getattr(d, "version", None) == version]
        if not matches:
            return None
        return matches[0] if len(matches) == 1 else matches

    def each(self) -> Iterator[tuple[str, tuple[Any, ...]]]:
        """Iterate ``(name, definitions)`` pairs in registration order."""
        for name, definitions in self._packages.items():
            yield name, tuple(definitions)

    def names(self) -> list[str]:
        """Registered package names in registration order."""
        return list(self._packages)

    def clear(self) -> None:
        """Forget every registered package."""
        self._packages.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._packages

    def __len__(self) -> int:
        return len(self._packages)

    def __repr__(self) -> str:
        return f"<PackageRegistry packages={len(self)}>"
