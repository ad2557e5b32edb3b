"""
Configuration loader — reads packages.yml into package definitions.

packages.yml declares the packages fleetdrop can deploy, the hosts
behind each role, and the ssh options used to reach them:

    hosts:
      web: [web1.example.com, web2.example.com]
    ssh:
      user: deploy
    packages:
      - name: nginx_conf
        version: "1.0"
        transfers:
          - source: files/nginx.conf
            destination: /etc/nginx/nginx.conf
            sudo: true
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from fleetdrop.adapters.shell.scp import SshConfig
from fleetdrop.core.errors import FleetdropError
from fleetdrop.core.models.package import PackageDefinition
from fleetdrop.core.services.package_registry import PackageRegistry
from fleetdrop.core.services.transfer_planner import source_is_template

logger = logging.getLogger(__name__)

# Default config filename
PACKAGES_CONFIG_FILE = "packages.yml"


class ConfigError(FleetdropError):
    """Raised when packages.yml is invalid or missing."""


class PackageFile(BaseModel):
    """Parsed contents of packages.yml."""

    hosts: dict[str, list[str]] = Field(default_factory=dict)
    ssh: SshConfig = Field(default_factory=SshConfig)
    packages: list[PackageDefinition] = Field(default_factory=list)


def find_packages_file(start_dir: Path | None = None) -> Path | None:
    """Search for packages.yml starting from the given directory, walking up.

    Returns:
        Path to packages.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / PACKAGES_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_package_file(path: Path | None = None) -> PackageFile:
    """Load and validate packages.yml.

    Args:
        path: Explicit path. If None, searches upward from the cwd.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_packages_file()

    if path is None:
        raise ConfigError(f"No {PACKAGES_CONFIG_FILE} found. Specify one with --config.")

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading packages from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = PackageFile.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid package configuration: {e}") from e

    # Relative transfer sources are relative to packages.yml, not the cwd
    base = path.parent.resolve()
    for package in config.packages:
        for transfer in package.transfers:
            if source_is_template(transfer.source):
                continue
            source = Path(transfer.source)
            if not source.is_absolute():
                transfer.source = str(base / source)

    logger.info("Loaded %d packages from %s", len(config.packages), path)
    return config


def build_registry(packages: list[PackageDefinition]) -> PackageRegistry:
    """Register every definition under its name, in file order."""
    registry = PackageRegistry()
    for package in packages:
        registry.add_definition(package)
    return registry


def load_registry(path: Path | None = None) -> PackageRegistry:
    """Load packages.yml straight into a PackageRegistry."""
    return build_registry(load_package_file(path).packages)
