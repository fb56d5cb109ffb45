"""Global constants for tins application.

This module contains application-wide constants that are used across multiple
components.
"""

from enum import Enum

INSTANCE_NAME_PREFIX = "tins-"
"""Prefix carried by every instance and keypair name created by tins.

The full name of an instance is this prefix followed by its short name. The
same full name is used for the remote keypair and the local key files.
"""

NAME_GENERATION_ATTEMPTS = 10
"""Random names tried before create gives up on finding an unused one."""

MANAGED_METADATA_KEY = "tins"
"""Metadata key marking an instance as created by tins."""

MANAGED_METADATA_VALUE = "true"
"""Metadata value paired with MANAGED_METADATA_KEY."""

POLL_INTERVAL_SECONDS = 5
"""Delay between instance status checks while waiting for ACTIVE."""

WAIT_TIMEOUT_SECONDS = 300
"""Overall time budget for the readiness poll after instance creation.

Reaching the deadline is reported as a warning; the instance may still
become ready later.
"""

RSA_KEY_BITS = 2048
"""Size in bits of generated RSA key pairs."""

SSH_DIR_MODE = 0o700
"""Permission bits for the key storage directory."""

PRIVATE_KEY_MODE = 0o600
"""Permission bits for private key files (owner read/write only)."""

PUBLIC_KEY_MODE = 0o644
"""Permission bits for public key files (world readable)."""

SSH_USERNAME = "root"
"""Remote user the startup script installs the public key for."""

DEFAULT_DOMAIN_NAME = "default"
DEFAULT_FLAVOR_NAME = "m1.small"
DEFAULT_NETWORK_ATTACHMENT_MODE = "existing_network"
DEFAULT_SSH_DIR = "~/.ssh"

SUPPORTED_NETWORK_ATTACHMENT_MODES = frozenset((DEFAULT_NETWORK_ATTACHMENT_MODE,))
"""Network attachment modes understood by the instance creation workflow."""

PREFERRED_ADDRESS_TYPES = ("fixed", "floating")
"""Address types preferred when picking an SSH destination."""

ADDRESS_TYPE_KEY = "OS-EXT-IPS:type"
"""Key holding the address type inside an OpenStack address record."""

CREATED_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
"""strftime format for the CREATED column of the list command."""

EXIT_ERROR = 1
"""Exit code indicating a general application error."""

EXIT_CONFIG_ERROR = 2
"""Exit code indicating a configuration or usage error.

Used when the application terminates due to invalid configuration,
missing required settings, or invalid command-line arguments.
"""

EXIT_CANCELLED = 130
"""Exit code used when the user cancels an interactive prompt."""


class InstanceStatus(str, Enum):
    """Instance status values reported by the compute service."""

    BUILD = "BUILD"
    ACTIVE = "ACTIVE"
    ERROR = "ERROR"
