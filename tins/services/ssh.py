"""Hand-off of an interactive session to the system ssh client."""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

from tins.constants import SSH_USERNAME

logger = logging.getLogger(__name__)

SSH_EXECUTABLE = "ssh"

SSH_HOST_KEY_OPTIONS = (
    "-o",
    "StrictHostKeyChecking=no",
    "-o",
    "UserKnownHostsFile=/dev/null",
)
"""Instances are disposable, so their host keys are neither checked nor stored."""


class SSHCommandError(RuntimeError):
    """The ssh client exited with a non-zero status.

    Parameters
    ----------
    returncode : int
        Exit status reported by ssh
    """

    def __init__(self, returncode: int) -> None:
        super().__init__(f"ssh exited with status {returncode}")
        self.returncode = returncode


def build_ssh_command(
    host: str,
    key_file: Path,
    extra_args: Sequence[str] = (),
    username: str = SSH_USERNAME,
) -> list[str]:
    """Build the argument vector for an interactive ssh session.

    Parameters
    ----------
    host : str
        Instance address
    key_file : Path
        Private key to authenticate with
    extra_args : Sequence[str]
        Arguments appended verbatim after the destination
    username : str
        Remote user (default: root)

    Returns
    -------
    list[str]
        Command suitable for subprocess.run
    """
    return [
        SSH_EXECUTABLE,
        "-i",
        str(key_file),
        *SSH_HOST_KEY_OPTIONS,
        f"{username}@{host}",
        *extra_args,
    ]


def run_ssh(command: Sequence[str]) -> int:
    """Run ssh with the terminal's stdin, stdout and stderr attached.

    Parameters
    ----------
    command : Sequence[str]
        Command built by build_ssh_command()

    Returns
    -------
    int
        Zero on success

    Raises
    ------
    SSHCommandError
        If ssh exits with a non-zero status
    RuntimeError
        If the ssh executable cannot be found
    """
    if shutil.which(command[0]) is None:
        raise RuntimeError(f"'{command[0]}' executable not found in PATH")

    logger.debug("Running %s", shlex.join(command))
    result = subprocess.run(list(command), check=False)

    if result.returncode != 0:
        raise SSHCommandError(result.returncode)

    return result.returncode
