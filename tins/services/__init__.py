"""Services used alongside the compute provider."""

from __future__ import annotations

from tins.services.ssh import SSHCommandError, build_ssh_command, run_ssh

__all__ = [
    "SSHCommandError",
    "build_ssh_command",
    "run_ssh",
]
