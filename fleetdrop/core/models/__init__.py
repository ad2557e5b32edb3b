"""
Domain models — Pydantic types for fleetdrop.

All models are re-exported here for convenient access:

    from fleetdrop.core.models import TransferRequest, TransferPlan, Receipt
"""

from fleetdrop.core.models.action import Receipt
from fleetdrop.core.models.package import PackageDefinition, TransferSpec
from fleetdrop.core.models.transfer import (
    PostAction,
    TransferOptions,
    TransferPlan,
    TransferRequest,
)

__all__ = [
    # package.py
    "PackageDefinition",
    # transfer.py
    "PostAction",
    # action.py
    "Receipt",
    "TransferOptions",
    "TransferPlan",
    "TransferRequest",
    "TransferSpec",
]
