"""
Run settings — process-level knobs passed explicitly to the runner.

Nothing here is global state: the CLI builds one ``RunSettings`` at
startup (flags over environment over defaults) and hands it down.

Environment variables:
    FLEETDROP_TESTING       — "1"/"true" skips delivery entirely
    FLEETDROP_STAGING_DIR   — where sudo transfers are staged (default /tmp)
"""

from __future__ import annotations

import os

from pydantic import BaseModel

_TRUTHY = {"1", "true", "yes", "on"}


class RunSettings(BaseModel):
    """Settings shared by every transfer in one run.

    Attributes:
        testing:        Plan and log, but never deliver or run commands.
        dry_run:        Resolve and render sources, but skip delivery.
        staging_dir:    Directory for sudo staging paths.
        staging_prefix: Prefix for staged file names.
        sudo_command:   Prefix applied to privileged post-install commands.
    """

    testing: bool = False
    dry_run: bool = False
    staging_dir: str = "/tmp"
    staging_prefix: str = "fleetdrop_"
    sudo_command: str = "sudo"

    @classmethod
    def from_env(cls, **overrides: object) -> RunSettings:
        """Build settings from FLEETDROP_* variables, then apply overrides."""
        values: dict[str, object] = {}
        testing = os.environ.get("FLEETDROP_TESTING")
        if testing is not None:
            values["testing"] = testing.strip().lower() in _TRUTHY
        staging_dir = os.environ.get("FLEETDROP_STAGING_DIR")
        if staging_dir:
            values["staging_dir"] = staging_dir
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)
