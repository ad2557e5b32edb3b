"""
Transfer runner — drives one transfer from plan to post-install actions.

Flow:
    request → plan → (testing? stop) → resolve source → deliver
            → post actions in order, stopping at the first failure

The runner owns the ordering guarantees; the adapter owns the network.
Delivery and post-action failures surface as DeliveryFailure and
PostActionFailure carrying the adapter's receipt. Nothing is retried.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from fleetdrop.adapters.base import DeliveryAdapter
from fleetdrop.core.config.settings import RunSettings
from fleetdrop.core.errors import DeliveryFailure, PostActionFailure
from fleetdrop.core.models.action import Receipt
from fleetdrop.core.models.package import PackageDefinition
from fleetdrop.core.models.transfer import TransferPlan, TransferRequest
from fleetdrop.core.services.transfer_planner import plan_transfer, resolve_source

logger = logging.getLogger(__name__)


@dataclass
class TransferReport:
    """Outcome of one transfer."""

    plan: TransferPlan
    roles: list[str] = field(default_factory=list)
    delivery: Receipt | None = None
    action_receipts: list[Receipt] = field(default_factory=list)
    skipped: bool = False

    @property
    def status(self) -> str:
        if self.skipped or (self.delivery is not None and self.delivery.status == "skipped"):
            return "skipped"
        return "ok"

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "roles": self.roles,
            "plan": self.plan.model_dump(mode="json"),
            "delivery": self.delivery.model_dump(mode="json") if self.delivery else None,
            "actions": [r.model_dump(mode="json") for r in self.action_receipts],
        }


def run_transfer(
    request: TransferRequest,
    adapter: DeliveryAdapter,
    roles: Sequence[str],
    settings: RunSettings | None = None,
    post_install: Sequence[str] = (),
    label: str = "fleetdrop",
) -> TransferReport:
    """Plan, deliver and finish one transfer.

    Args:
        request: The transfer to perform.
        adapter: Delivery adapter used for the copy and the commands.
        roles: Roles whose hosts receive the file.
        settings: Run settings (testing / dry-run / staging).
        post_install: Caller commands declared after the transfer;
            they run after every planner action.
        label: Prefix for rendered temporary files (the package name).

    Raises:
        InvalidRequest: The request is malformed.
        RenderFailure: The template could not be rendered.
        DeliveryFailure: The adapter failed to copy the file.
        PostActionFailure: A post-install command failed.
    """
    settings = settings or RunSettings()
    plan = plan_transfer(request, settings)
    if post_install:
        plan = plan.with_post_actions(*post_install)

    report = TransferReport(plan=plan, roles=list(roles))
    logger.debug(
        "transfer: %s -> %s for roles: %s",
        request.source, plan.effective_destination, list(roles),
    )

    if settings.testing:
        report.skipped = True
        return report

    with resolve_source(request, plan, prefix=label) as resolved:
        logger.debug(
            "    --> Transferring %s to %s for roles: %s",
            resolved.path, plan.final_destination, list(roles),
        )
        if settings.dry_run:
            report.delivery = Receipt.skip(
                adapter=adapter.name,
                target=plan.effective_destination,
                reason=f"[dry-run] Would copy {resolved.path} to {plan.effective_destination}",
            )
            return report
        receipt = adapter.deliver(
            resolved.path, plan.effective_destination, resolved.recursive, roles,
        )

    report.delivery = receipt
    if receipt.failed:
        raise DeliveryFailure(
            f"Delivery to {plan.effective_destination} failed: {receipt.error}",
            receipt=receipt,
        )

    for action in plan.post_actions:
        action_receipt = adapter.run(action.command, roles)
        report.action_receipts.append(action_receipt)
        status_marker = "✓" if action_receipt.ok else "✗"
        logger.info("%s %s", status_marker, action.command)
        if action_receipt.failed:
            raise PostActionFailure(
                f"Post-install action '{action.command}' failed: {action_receipt.error}",
                receipt=action_receipt,
            )

    return report


def deploy_package(
    package: PackageDefinition,
    adapter: DeliveryAdapter,
    roles: Sequence[str],
    settings: RunSettings | None = None,
) -> list[TransferReport]:
    """Run every transfer of ``package`` in declaration order."""
    reports = []
    for request in package.requests():
        reports.append(
            run_transfer(request, adapter, roles, settings=settings, label=package.name)
        )
    logger.info("Deployed %s (%d transfers)", package.label, len(reports))
    return reports
