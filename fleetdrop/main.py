"""
fleetdrop — CLI entrypoint.

Usage:
    python -m fleetdrop.main --help
    python -m fleetdrop.main plan files/nginx.conf /etc/nginx.conf --sudo
    python -m fleetdrop.main find nginx_conf --version 1.0
    python -m fleetdrop.main deploy nginx_conf --role web
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from fleetdrop import __version__
from fleetdrop.core.errors import FleetdropError
from fleetdrop.core.observability.logging_config import configure_cli_logging


@click.group()
@click.version_option(version=__version__, prog_name="fleetdrop")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to packages.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """fleetdrop — deploy files to fleets of remote hosts."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    configure_cli_logging(debug=debug, verbose=verbose, quiet=quiet)


def _fail(message: str) -> None:
    click.secho(f"❌ {message}", fg="red")
    sys.exit(1)


def _parse_locals(pairs: tuple[str, ...]) -> dict[str, str] | None:
    if not pairs:
        return None
    values = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--local")
        values[key] = value
    return values


def _print_plan(plan) -> None:
    click.secho(f"\n📦 {plan.source.splitlines()[0] if plan.source else ''}", fg="cyan", bold=True)
    click.echo(f"   → {plan.final_destination}")
    if plan.staged:
        click.echo(f"   staged at {plan.effective_destination}")
    click.echo(f"   recursive: {'yes' if plan.recursive else 'no'}")
    if plan.needs_render:
        click.secho("   render: yes (deprecated)", fg="yellow")
    if plan.post_actions:
        click.secho("   Post-install:", fg="white", bold=True)
        for i, action in enumerate(plan.post_actions, 1):
            click.echo(f"     {i}. {action.command}")
    click.echo()


# ── Plan ────────────────────────────────────────────────────────


@cli.command()
@click.argument("source")
@click.argument("destination")
@click.option("--sudo", is_flag=True, help="Stage the upload and move it with sudo.")
@click.option("--owner", default=None, help="chown the destination after transfer.")
@click.option("--mode", default=None, help="chmod the destination after transfer.")
@click.option("--render", is_flag=True, help="Render SOURCE as a template (deprecated).")
@click.option("--recursive/--no-recursive", default=True, help="Copy directories recursively.")
@click.option("--local", "locals_", multiple=True, help="Template variable KEY=VALUE.")
@click.option("--post", "post_install", multiple=True, help="Extra post-install command.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def plan(
    source: str,
    destination: str,
    sudo: bool,
    owner: str | None,
    mode: str | None,
    render: bool,
    recursive: bool,
    locals_: tuple[str, ...],
    post_install: tuple[str, ...],
    as_json: bool,
) -> None:
    """Show what transferring SOURCE to DESTINATION would do."""
    from fleetdrop.core.config.settings import RunSettings
    from fleetdrop.core.models.transfer import TransferRequest
    from fleetdrop.core.services.transfer_planner import plan_transfer

    request = TransferRequest.create(
        source,
        destination,
        post_install=post_install,
        sudo=sudo,
        owner=owner,
        mode=mode,
        render=render,
        recursive=recursive,
        locals=_parse_locals(locals_),
    )
    try:
        result = plan_transfer(request, RunSettings.from_env())
    except FleetdropError as e:
        _fail(str(e))
        return

    if as_json:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        return
    _print_plan(result)


# ── Find ────────────────────────────────────────────────────────


@cli.command()
@click.argument("name")
@click.option("--version", "version", default=None, help="Only this version.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def find(ctx: click.Context, name: str, version: str | None, as_json: bool) -> None:
    """Look up a package in packages.yml."""
    from fleetdrop.core.config.loader import load_registry

    try:
        registry = load_registry(ctx.obj.get("config_path"))
    except FleetdropError as e:
        _fail(str(e))
        return

    found = registry.find(name, version=version)
    if found is None:
        label = f"{name}@{version}" if version else name
        _fail(f"Package not found: {label}")
        return

    matches = found if isinstance(found, list) else [found]
    if as_json:
        click.echo(json.dumps([m.model_dump(mode="json") for m in matches], indent=2))
        return

    for pkg in matches:
        click.secho(f"📦 {pkg.label}", fg="cyan", bold=True)
        if pkg.description:
            click.echo(f"   {pkg.description}")
        for transfer in pkg.transfers:
            flags = " (sudo)" if transfer.sudo else ""
            click.echo(f"     • {transfer.source.splitlines()[0]} → {transfer.destination}{flags}")


# ── Deploy ──────────────────────────────────────────────────────


@cli.command()
@click.argument("name")
@click.option("--version", "version", default=None, help="Package version to deploy.")
@click.option("--role", "roles", multiple=True, help="Target role (default: every role).")
@click.option("--testing", is_flag=True, help="Plan only; never deliver.")
@click.option("--dry-run", is_flag=True, help="Render sources but skip delivery.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def deploy(
    ctx: click.Context,
    name: str,
    version: str | None,
    roles: tuple[str, ...],
    testing: bool,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Deploy every transfer of package NAME to its hosts."""
    from fleetdrop.adapters.shell.scp import ScpDeliveryAdapter
    from fleetdrop.core.config.loader import build_registry, load_package_file
    from fleetdrop.core.config.settings import RunSettings
    from fleetdrop.core.engine.transfer_runner import deploy_package

    try:
        config = load_package_file(ctx.obj.get("config_path"))
    except FleetdropError as e:
        _fail(str(e))
        return

    found = build_registry(config.packages).find(name, version=version)
    if found is None:
        _fail(f"Package not found: {name}@{version}" if version else f"Package not found: {name}")
        return
    if isinstance(found, list):
        if len(found) > 1:
            versions = ", ".join(str(p.version) for p in found)
            _fail(f"Package {name} has several definitions ({versions}); pass --version")
            return
        found = found[0]

    target_roles = list(roles) or list(config.hosts)
    settings = RunSettings.from_env(testing=testing or None, dry_run=dry_run or None)
    adapter = ScpDeliveryAdapter(config.hosts, ssh=config.ssh)
    if not (settings.testing or settings.dry_run) and not adapter.is_available():
        _fail("scp/ssh not found on PATH; install an OpenSSH client or use --testing")
        return

    try:
        reports = deploy_package(found, adapter, target_roles, settings=settings)
    except FleetdropError as e:
        _fail(str(e))
        return

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in reports], indent=2))
        return

    quiet = ctx.obj.get("quiet", False)
    for report in reports:
        marker = "⊘" if report.status == "skipped" else "✓"
        click.echo(f"   {marker} {report.plan.final_destination}")
        if not quiet:
            for action in report.plan.post_actions:
                click.echo(f"       $ {action.command}")
    click.secho(f"✅ {found.label} deployed to {', '.join(target_roles)}", fg="green")


if __name__ == "__main__":
    cli()
