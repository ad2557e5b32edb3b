"""
Transfer planner — decides what a single transfer actually does.

Given a TransferRequest, the planner computes:

    - where the delivery adapter writes (a staging path under sudo)
    - whether the copy is recursive
    - whether the source must be rendered first
    - the ordered post-install commands

Ordering rules:
    1. A multi-line source is inline template text: render is forced on.
    2. Rendering forces recursive off.
    3. Under sudo the upload goes to <staging_dir>/<prefix><basename>
       and ``mv staging final`` is the very first post action, ahead
       of any caller commands already registered.
    4. chown then chmod are appended, always against the final path.

Planning is pure. Only ``resolve_source`` touches the filesystem,
and it removes whatever it creates.
"""

from __future__ import annotations

import logging
import posixpath
import shlex
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from fleetdrop.core.config.settings import RunSettings
from fleetdrop.core.errors import InvalidRequest, RenderFailure
from fleetdrop.core.models.transfer import PostAction, TransferPlan, TransferRequest
from fleetdrop.core.services.template_render import build_context, render_template

logger = logging.getLogger(__name__)


def source_is_template(source: str) -> bool:
    """Whether ``source`` is inline template text rather than a path.

    Trailing newlines do not count as extra lines.
    """
    return len(source.rstrip("\n").split("\n")) > 1


def needs_render(request: TransferRequest) -> bool:
    """Whether the request goes through the (deprecated) render path."""
    return request.options.render or source_is_template(request.source)


def staging_path(destination: str, settings: RunSettings | None = None) -> str:
    """Unprivileged upload target for a sudo transfer to ``destination``."""
    settings = settings or RunSettings()
    base = posixpath.basename(destination.rstrip("/"))
    return posixpath.join(settings.staging_dir, f"{settings.staging_prefix}{base}")


def _validate(request: TransferRequest) -> None:
    if not request.destination or not request.destination.strip():
        raise InvalidRequest("Transfer destination must not be empty")
    if not request.source or not request.source.strip():
        raise InvalidRequest(f"Transfer source for {request.destination} must not be empty")


def plan_transfer(
    request: TransferRequest,
    settings: RunSettings | None = None,
) -> TransferPlan:
    """Build the TransferPlan for one request.

    Raises:
        InvalidRequest: If the destination or source is empty.
    """
    _validate(request)
    settings = settings or RunSettings()
    opts = request.options

    render = needs_render(request)
    recursive = False if render else opts.recursive

    final = request.destination
    effective = final
    prefix = f"{settings.sudo_command} " if opts.sudo else ""

    actions = [PostAction.custom(command) for command in request.post_install]

    if opts.sudo:
        effective = staging_path(final, settings)
        actions.insert(0, PostAction(
            kind="move",
            command=f"{prefix}mv {shlex.quote(effective)} {shlex.quote(final)}",
            target=final,
            privileged=True,
        ))

    if opts.owner:
        actions.append(PostAction(
            kind="chown",
            command=f"{prefix}chown {shlex.quote(opts.owner)} {shlex.quote(final)}",
            target=final,
            privileged=opts.sudo,
        ))
    if opts.mode:
        actions.append(PostAction(
            kind="chmod",
            command=f"{prefix}chmod {shlex.quote(opts.mode)} {shlex.quote(final)}",
            target=final,
            privileged=opts.sudo,
        ))

    return TransferPlan(
        source=request.source,
        effective_destination=effective,
        final_destination=final,
        recursive=recursive,
        needs_render=render,
        sudo=opts.sudo,
        post_actions=tuple(actions),
    )


# ── Source resolution ───────────────────────────────────────────


@dataclass(frozen=True)
class ResolvedSource:
    """The local path handed to the delivery adapter."""

    path: str
    recursive: bool
    rendered: bool = False


def _read_template(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise RenderFailure(f"Cannot read template {path}: {e}") from e


@contextmanager
def resolve_source(
    request: TransferRequest,
    plan: TransferPlan | None = None,
    prefix: str = "fleetdrop",
) -> Iterator[ResolvedSource]:
    """Yield the local artifact to deliver for ``request``.

    Without rendering this is the source path itself. With rendering
    the template (inline text or file contents) is rendered into a
    temporary file that is deleted when the block exits, however it
    exits.

    Raises:
        RenderFailure: If the template cannot be read or rendered.
    """
    plan = plan or plan_transfer(request)

    if not plan.needs_render:
        yield ResolvedSource(path=request.source, recursive=plan.recursive)
        return

    logger.warning(
        "transfer render is deprecated; declare templates as files instead (%s)",
        request.destination,
    )
    context = build_context(request.scope, request.options.locals)
    if source_is_template(request.source):
        template = request.source
    else:
        template = _read_template(request.source)
    output = render_template(template, context)

    fh = tempfile.NamedTemporaryFile(
        "w", prefix=f"{prefix}-", encoding="utf-8", delete=False,
    )
    tmp_path = fh.name
    try:
        with fh:
            fh.write(output)
        logger.debug("Rendered %s into %s", request.destination, tmp_path)
        yield ResolvedSource(path=tmp_path, recursive=False, rendered=True)
    finally:
        Path(tmp_path).unlink(missing_ok=True)
