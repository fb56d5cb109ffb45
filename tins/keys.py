"""Local SSH key pair management."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import paramiko

from tins.constants import (
    PRIVATE_KEY_MODE,
    PUBLIC_KEY_MODE,
    RSA_KEY_BITS,
    SSH_DIR_MODE,
)
from tins.core.interfaces import InstanceIdentity

logger = logging.getLogger(__name__)


class KeyFileError(OSError):
    """A local key file could not be created, read or removed."""


@dataclass(frozen=True)
class KeyPair:
    """Locations and public half of a generated key pair."""

    private_key_path: Path
    public_key_path: Path
    public_key: str


class KeyManager:
    """Generate and delete per-instance SSH key pairs.

    Key files live at ``<ssh_dir>/<full_name>`` and ``<ssh_dir>/<full_name>.pub``.

    Parameters
    ----------
    ssh_dir : Path
        Directory holding the key files
    """

    def __init__(self, ssh_dir: Path) -> None:
        self.ssh_dir = Path(ssh_dir)

    def private_key_path(self, identity: InstanceIdentity) -> Path:
        """Return the private key location for an instance without touching disk."""
        return self.ssh_dir / identity.full_name

    def public_key_path(self, identity: InstanceIdentity) -> Path:
        """Return the public key location for an instance without touching disk."""
        return self.ssh_dir / f"{identity.full_name}.pub"

    def exists(self, identity: InstanceIdentity) -> bool:
        """Check whether the private key for an instance is present."""
        return self.private_key_path(identity).is_file()

    def generate(self, identity: InstanceIdentity) -> KeyPair:
        """Generate an RSA key pair for an instance and write it to disk.

        The private key is written as unencrypted PEM readable only by the
        owner; the public key is written in OpenSSH format and is world
        readable. Existing key files are never overwritten.

        Parameters
        ----------
        identity : InstanceIdentity
            Instance the key pair belongs to

        Returns
        -------
        KeyPair
            Paths of both files and the public key line

        Raises
        ------
        KeyFileError
            If either key file already exists, or the directory or either
            file cannot be written. A private key written before a failed
            public key write is removed first.
        """
        private_path = self.private_key_path(identity)
        public_path = self.public_key_path(identity)

        for path in (private_path, public_path):
            if path.exists():
                raise KeyFileError(f"Key file {path} already exists")

        try:
            self.ssh_dir.mkdir(mode=SSH_DIR_MODE, parents=True, exist_ok=True)
        except OSError as e:
            raise KeyFileError(f"Failed to create key directory {self.ssh_dir}: {e}") from e

        key = paramiko.RSAKey.generate(bits=RSA_KEY_BITS)
        public_key = f"{key.get_name()} {key.get_base64()} {identity.full_name}\n"

        try:
            key.write_private_key_file(str(private_path))
            private_path.chmod(PRIVATE_KEY_MODE)
        except OSError as e:
            raise KeyFileError(f"Failed to write private key {private_path}: {e}") from e

        try:
            public_path.write_text(public_key)
            public_path.chmod(PUBLIC_KEY_MODE)
        except OSError as e:
            try:
                private_path.unlink(missing_ok=True)
            except OSError as cleanup_error:
                logger.warning(
                    "Failed to remove private key %s after public key write failure: %s",
                    private_path,
                    cleanup_error,
                )
            raise KeyFileError(f"Failed to write public key {public_path}: {e}") from e

        logger.debug("Generated key pair at %s", private_path)

        return KeyPair(
            private_key_path=private_path,
            public_key_path=public_path,
            public_key=public_key,
        )

    def delete(self, identity: InstanceIdentity) -> None:
        """Remove both key files of an instance.

        Missing files are ignored, so deleting twice or deleting keys that
        were never generated succeeds.

        Parameters
        ----------
        identity : InstanceIdentity
            Instance the key pair belongs to

        Raises
        ------
        KeyFileError
            If a present file cannot be removed
        """
        for path in (self.private_key_path(identity), self.public_key_path(identity)):
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                raise KeyFileError(f"Failed to delete key file {path}: {e}") from e
            logger.debug("Deleted key file %s", path)
