"""
Delivery adapter base — the contract between the runner and remote hosts.

The transfer runner never touches the network itself. It hands a
local path and a remote path to a DeliveryAdapter, then asks the
same adapter to run the post-install commands.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from fleetdrop.core.models.action import Receipt


class DeliveryAdapter(ABC):
    """Abstract base class for delivery adapters.

    Adapters perform side effects on remote hosts and return receipts.
    They NEVER raise — failures are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'scp', 'mock')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether the underlying tooling exists. Never raises."""

    @abstractmethod
    def deliver(
        self,
        source: str,
        destination: str,
        recursive: bool,
        roles: Sequence[str],
    ) -> Receipt:
        """Copy ``source`` to ``destination`` on every host in ``roles``."""

    @abstractmethod
    def run(self, command: str, roles: Sequence[str]) -> Receipt:
        """Run a shell command on every host in ``roles``."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
