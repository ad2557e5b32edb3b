"""Adapters — delivery bindings for remote hosts.

Public re-exports for convenient access.
"""

from fleetdrop.adapters.base import DeliveryAdapter
from fleetdrop.adapters.mock import MockDeliveryAdapter
from fleetdrop.adapters.shell.scp import ScpDeliveryAdapter, SshConfig

__all__ = [
    "DeliveryAdapter",
    "MockDeliveryAdapter",
    "ScpDeliveryAdapter",
    "SshConfig",
]
