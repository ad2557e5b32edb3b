"""
Mock delivery adapter — test double for the transfer runner.

Records every delivery and command it receives. Succeeds by default;
individual destinations or commands can be configured to fail.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from fleetdrop.adapters.base import DeliveryAdapter
from fleetdrop.core.models.action import Receipt


@dataclass
class DeliveryCall:
    """One recorded deliver() call."""

    source: str
    destination: str
    recursive: bool
    roles: list[str] = field(default_factory=list)
    content: str | None = None


class MockDeliveryAdapter(DeliveryAdapter):
    """Universal mock adapter for testing."""

    def __init__(self, adapter_name: str = "mock", available: bool = True):
        self._name = adapter_name
        self._available = available
        self._failures: dict[str, str] = {}
        self.deliveries: list[DeliveryCall] = []
        self.commands: list[str] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        """Deliveries plus commands received."""
        return len(self.deliveries) + len(self.commands)

    def is_available(self) -> bool:
        return self._available

    def set_failure(self, target: str, error: str = "Mock failure") -> None:
        """Make deliveries to ``target`` (or the command ``target``) fail."""
        self._failures[target] = error

    def deliver(
        self,
        source: str,
        destination: str,
        recursive: bool,
        roles: Sequence[str],
    ) -> Receipt:
        # Capture rendered files now; they are deleted once delivery returns
        path = Path(source)
        content = path.read_text(encoding="utf-8") if path.is_file() else None
        self.deliveries.append(DeliveryCall(source, destination, recursive, list(roles), content))

        if destination in self._failures:
            return Receipt.failure(self._name, destination, self._failures[destination])
        return Receipt.success(self._name, destination, output=f"[mock] {source} -> {destination}")

    def run(self, command: str, roles: Sequence[str]) -> Receipt:
        self.commands.append(command)
        if command in self._failures:
            return Receipt.failure(self._name, command, self._failures[command])
        return Receipt.success(self._name, command, output="[mock] executed")

    def reset(self) -> None:
        """Clear recorded calls and configured failures."""
        self.deliveries.clear()
        self.commands.clear()
        self._failures.clear()
