"""
Receipt model — the result contract between the runner and adapters.

Delivery adapters return Receipts for every copy and every remote
command. They never raise: failures are captured here and the
transfer runner decides what a failure means.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Result of a delivery or a remote command.

    ``target`` is the remote path for copies and the command string
    for post-install actions. ``hosts`` lists every host touched.
    """

    adapter: str
    target: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    hosts: list[str] = Field(default_factory=list)
    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the operation succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the operation failed."""
        return self.status == "failed"

    @classmethod
    def success(
        cls,
        adapter: str,
        target: str,
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        return cls(adapter=adapter, target=target, status="ok", output=output, **kwargs)

    @classmethod
    def failure(
        cls,
        adapter: str,
        target: str,
        error: str,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(adapter=adapter, target=target, status="failed", error=error, **kwargs)

    @classmethod
    def skip(
        cls,
        adapter: str,
        target: str,
        reason: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a skip receipt."""
        return cls(adapter=adapter, target=target, status="skipped", output=reason, **kwargs)
