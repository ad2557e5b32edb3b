"""
Error kinds raised by the transfer core.

Registry lookups never raise: a missing package is ``None``.
Adapters never raise either; the runner turns their failed
receipts into ``DeliveryFailure`` / ``PostActionFailure``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fleetdrop.core.models.action import Receipt


class FleetdropError(Exception):
    """Base class for every error raised by fleetdrop."""


class InvalidRequest(FleetdropError):
    """The transfer request is malformed (empty destination or source)."""


class RenderFailure(FleetdropError):
    """The template engine failed or a template variable was undefined."""


class _ReceiptError(FleetdropError):
    """An external collaborator reported failure through a receipt."""

    def __init__(self, message: str, receipt: Receipt | None = None):
        super().__init__(message)
        self.receipt = receipt


class DeliveryFailure(_ReceiptError):
    """The delivery adapter could not copy the artifact."""


class PostActionFailure(_ReceiptError):
    """A post-install action exited unsuccessfully."""
