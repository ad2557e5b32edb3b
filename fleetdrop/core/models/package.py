"""
Package model — a named, optionally versioned bundle of transfers.

Declared in packages.yml. The registry itself only relies on
``name`` and ``version``; everything else is consumed by the CLI
when deploying a package.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from fleetdrop.core.models.transfer import TransferOptions, TransferRequest


class TransferSpec(BaseModel):
    """A transfer as written in packages.yml.

    ``post_install`` commands are registered together with the transfer,
    so they run after the sudo move and before owner/mode fix-ups.
    """

    source: str
    destination: str
    sudo: bool = False
    owner: str | None = None
    mode: str | None = None
    render: bool = False
    recursive: bool = True
    locals: dict[str, Any] | None = None
    post_install: list[str] = Field(default_factory=list)

    def to_request(
        self,
        scope: dict[str, Any] | None = None,
    ) -> TransferRequest:
        """Turn this declaration into a TransferRequest."""
        return TransferRequest(
            source=self.source,
            destination=self.destination,
            options=TransferOptions(
                sudo=self.sudo,
                owner=self.owner,
                mode=self.mode,
                render=self.render,
                recursive=self.recursive,
                locals=self.locals,
            ),
            post_install=tuple(self.post_install),
            scope=scope or {},
        )


class PackageDefinition(BaseModel):
    """A package declared in packages.yml.

    ``vars`` is the package scope: the variables templates see when a
    transfer renders without explicit locals.
    """

    name: str
    version: str | None = None
    description: str = ""
    vars: dict[str, Any] = Field(default_factory=dict)
    transfers: list[TransferSpec] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_text(cls, value: Any) -> Any:
        # YAML reads `version: 1.10` as the float 1.1
        if isinstance(value, (bool, float)):
            raise ValueError(
                f"version {value!r} must be a quoted string (e.g. version: \"1.10\")"
            )
        if isinstance(value, int):
            return str(value)
        return value

    @property
    def label(self) -> str:
        """``name`` or ``name@version``."""
        return f"{self.name}@{self.version}" if self.version else self.name

    def requests(self) -> list[TransferRequest]:
        """TransferRequests for every declared transfer, in order."""
        return [t.to_request(scope=self.vars) for t in self.transfers]
