"""
SCP delivery adapter — copy files with the system scp, run commands with ssh.

Hosts are addressed through roles: ``{"web": ["web1", "web2"]}``.
Every operation runs host by host and stops at the first failure.
Symbolic links are followed and copied as files; that is how scp works.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from collections.abc import Sequence

from pydantic import BaseModel, Field

from fleetdrop.adapters.base import DeliveryAdapter
from fleetdrop.core.models.action import Receipt

logger = logging.getLogger(__name__)


class SshConfig(BaseModel):
    """Connection options shared by scp and ssh."""

    user: str | None = None
    port: int | None = None
    identity_file: str | None = None
    connect_timeout: int | None = 10
    strict_host_key_checking: bool = True
    options: list[str] = Field(default_factory=list)

    def ssh_options(self) -> list[str]:
        """``-o``/``-i`` flags common to scp and ssh."""
        opts: list[str] = []
        if self.identity_file:
            opts.extend(["-i", self.identity_file])
        strict = "yes" if self.strict_host_key_checking else "no"
        opts.extend(["-o", f"StrictHostKeyChecking={strict}"])
        opts.extend(["-o", "BatchMode=yes"])
        if self.connect_timeout is not None:
            opts.extend(["-o", f"ConnectTimeout={self.connect_timeout}"])
        opts.extend(self.options)
        return opts

    def host_label(self, host: str) -> str:
        return f"{self.user}@{host}" if self.user else host


class ScpDeliveryAdapter(DeliveryAdapter):
    """Deliver through scp/ssh subprocesses.

    Args:
        roles:   Mapping of role name to host list.
        ssh:     Connection options.
        timeout: Per-host timeout in seconds.
    """

    def __init__(
        self,
        roles: dict[str, list[str]],
        ssh: SshConfig | None = None,
        timeout: int = 300,
    ):
        self._roles = roles
        self._ssh = ssh or SshConfig()
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "scp"

    def is_available(self) -> bool:
        return shutil.which("scp") is not None and shutil.which("ssh") is not None

    def hosts_for(self, roles: Sequence[str]) -> list[str]:
        """Hosts of every role, in order, without duplicates."""
        hosts: list[str] = []
        for role in roles:
            for host in self._roles.get(role, []):
                if host not in hosts:
                    hosts.append(host)
        return hosts

    def scp_args(self, source: str, destination: str, recursive: bool, host: str) -> list[str]:
        args = ["scp"]
        if recursive:
            args.append("-r")
        if self._ssh.port:
            args.extend(["-P", str(self._ssh.port)])
        args.extend(self._ssh.ssh_options())
        args.append(source)
        args.append(f"{self._ssh.host_label(host)}:{destination}")
        return args

    def ssh_args(self, command: str, host: str) -> list[str]:
        args = ["ssh"]
        if self._ssh.port:
            args.extend(["-p", str(self._ssh.port)])
        args.extend(self._ssh.ssh_options())
        args.append(self._ssh.host_label(host))
        args.append(command)
        return args

    def deliver(
        self,
        source: str,
        destination: str,
        recursive: bool,
        roles: Sequence[str],
    ) -> Receipt:
        return self._each_host(
            destination,
            roles,
            lambda host: self.scp_args(source, destination, recursive, host),
        )

    def run(self, command: str, roles: Sequence[str]) -> Receipt:
        return self._each_host(command, roles, lambda host: self.ssh_args(command, host))

    def _each_host(self, target: str, roles: Sequence[str], build) -> Receipt:
        hosts = self.hosts_for(roles)
        if not hosts:
            return Receipt.failure(
                adapter=self.name,
                target=target,
                error=f"No hosts configured for roles: {', '.join(roles) or '(none)'}",
            )

        start = time.monotonic()
        done: list[str] = []
        outputs: list[str] = []

        for host in hosts:
            args = build(host)
            logger.debug("Executing: %s", " ".join(args))
            try:
                result = subprocess.run(
                    args,
                    capture_output=True,
                    text=True,
                    timeout=self._timeout,
                )
            except subprocess.TimeoutExpired:
                return Receipt.failure(
                    adapter=self.name,
                    target=target,
                    error=f"{host}: timed out after {self._timeout}s",
                    hosts=done,
                    metadata={"failed_host": host},
                )
            except OSError as e:
                return Receipt.failure(
                    adapter=self.name,
                    target=target,
                    error=f"{host}: {e}",
                    hosts=done,
                    metadata={"failed_host": host},
                )

            if result.returncode != 0:
                stderr = result.stderr.strip()
                return Receipt.failure(
                    adapter=self.name,
                    target=target,
                    error=f"{host}: {stderr or f'exited with code {result.returncode}'}",
                    hosts=done,
                    metadata={"failed_host": host, "return_code": result.returncode},
                )

            done.append(host)
            if result.stdout.strip():
                outputs.append(result.stdout.strip())

        return Receipt.success(
            adapter=self.name,
            target=target,
            output="\n".join(outputs),
            hosts=done,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
