"""
Transfer models — the request a package declares and the plan derived from it.

A TransferRequest is what a package says ("put this file there, as
root, mode 0644"). A TransferPlan is what actually happens: where the
delivery adapter writes, and which shell commands run afterwards and
in what order. Both are immutable so a plan can be inspected and
tested without executing anything.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class TransferOptions(BaseModel):
    """Options recognised by the transfer planner.

    Attributes:
        sudo:      Stage the upload and move it into place with elevated rights.
        owner:     ``chown`` argument applied to the final destination.
        mode:      ``chmod`` argument applied to the final destination.
        render:    Treat the source as a jinja2 template (legacy path).
        recursive: Copy directories recursively (ignored when rendering).
        locals:    Template variables; callables are evaluated at render time.
    """

    model_config = ConfigDict(frozen=True)

    sudo: bool = False
    owner: str | None = None
    mode: str | None = None
    render: bool = False
    recursive: bool = True
    locals: dict[str, Any] | None = None


class TransferRequest(BaseModel):
    """A single ``transfer source -> destination`` declaration.

    ``post_install`` holds the caller's post-install commands that were
    already registered when the request was made. ``scope`` is the
    caller's variable scope, used when rendering without explicit locals
    taking precedence.
    """

    model_config = ConfigDict(frozen=True)

    source: str
    destination: str
    options: TransferOptions = Field(default_factory=TransferOptions)
    post_install: tuple[str, ...] = ()
    scope: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def create(
        cls,
        source: str,
        destination: str,
        *,
        post_install: tuple[str, ...] | list[str] = (),
        scope: dict[str, Any] | None = None,
        **options: Any,
    ) -> TransferRequest:
        """Build a request from keyword options (``sudo=True, owner="root"``)."""
        return cls(
            source=source,
            destination=destination,
            options=TransferOptions(**options),
            post_install=tuple(post_install),
            scope=scope or {},
        )


class PostAction(BaseModel):
    """A shell command run on the remote hosts after a successful delivery."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["move", "chown", "chmod", "custom"]
    command: str
    target: str = ""
    privileged: bool = False

    @classmethod
    def custom(cls, command: str) -> PostAction:
        """Wrap a caller-supplied post-install command."""
        return cls(kind="custom", command=command)


class TransferPlan(BaseModel):
    """The resolved description of one transfer.

    ``effective_destination`` is where the delivery adapter writes;
    it differs from ``final_destination`` only when staging for sudo.
    """

    model_config = ConfigDict(frozen=True)

    source: str
    effective_destination: str
    final_destination: str
    recursive: bool
    needs_render: bool
    sudo: bool = False
    post_actions: tuple[PostAction, ...] = ()

    @property
    def staged(self) -> bool:
        """Whether delivery goes to a staging path first."""
        return self.effective_destination != self.final_destination

    @property
    def commands(self) -> list[str]:
        """Post-install command strings in execution order."""
        return [action.command for action in self.post_actions]

    def with_post_actions(self, *commands: str) -> TransferPlan:
        """Return a copy with caller commands appended after the existing ones."""
        extra = tuple(PostAction.custom(c) for c in commands)
        return self.model_copy(update={"post_actions": self.post_actions + extra})
