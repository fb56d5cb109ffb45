"""CLI entry point for tins."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence

import fire

from tins.cli.parsing import split_passthrough_args
from tins.constants import (
    EXIT_CANCELLED,
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
)
from tins.core.config import ConfigurationError
from tins.lifecycle import SelectionCancelledError
from tins.logging import StreamFormatter, StreamRoutingFilter
from tins.providers import (
    AmbiguousInstanceError,
    ProviderAPIError,
    ProviderConnectionError,
    ProviderCredentialsError,
    ResourceNotFoundError,
)
from tins.providers.openstack.utils import get_openstack_credentials_error_message
from tins.services.ssh import SSHCommandError

DEBUG_ENV_VAR = "TINS_DEBUG"

NOISY_LOGGERS = ("openstack", "keystoneauth", "urllib3", "paramiko", "stevedore")

PERMISSION_ERROR_CODES = ("401", "403")
QUOTA_ERROR_CODES = ("413", "429")


def get_tins_base_class() -> type:
    """Get Tins facade class on-demand to avoid circular imports.

    Returns
    -------
    type
        Tins facade class
    """
    from tins.__main__ import Tins

    return Tins


def configure_logging(debug_mode: bool) -> None:
    """Route progress messages to stdout and warnings and errors to stderr.

    Parameters
    ----------
    debug_mode : bool
        Whether to log at DEBUG level
    """
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(StreamFormatter("%(message)s"))
    stdout_handler.addFilter(StreamRoutingFilter("stdout"))

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(StreamFormatter("%(message)s"))
    stderr_handler.addFilter(StreamRoutingFilter("stderr"))

    logging.basicConfig(
        level=logging.DEBUG if debug_mode else logging.INFO,
        handlers=[stdout_handler, stderr_handler],
        force=True,
    )

    for noisy_logger in NOISY_LOGGERS:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)


def handle_configuration_error(error: ConfigurationError, debug_mode: bool) -> None:
    """Handle invalid or incomplete configuration.

    Parameters
    ----------
    error : ConfigurationError
        The configuration error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    ConfigurationError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    print(f"Configuration error: {error}", file=sys.stderr)
    sys.exit(EXIT_CONFIG_ERROR)


def handle_value_error(error: ValueError, debug_mode: bool) -> None:
    """Handle invalid command-line usage.

    Parameters
    ----------
    error : ValueError
        The value error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    ValueError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    print(f"Error: {error}", file=sys.stderr)
    sys.exit(EXIT_CONFIG_ERROR)


def handle_credentials_error(error: ProviderCredentialsError, debug_mode: bool) -> None:
    """Handle provider credentials error.

    Parameters
    ----------
    error : ProviderCredentialsError
        The credentials error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    ProviderCredentialsError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    print(get_openstack_credentials_error_message(), file=sys.stderr)
    print(f"\nDetails: {error}", file=sys.stderr)
    sys.exit(EXIT_ERROR)


def handle_resolution_error(
    error: ResourceNotFoundError | AmbiguousInstanceError, debug_mode: bool
) -> None:
    """Handle a name, image, flavor, network or instance that cannot be resolved.

    Parameters
    ----------
    error : ResourceNotFoundError | AmbiguousInstanceError
        The resolution error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    ResourceNotFoundError, AmbiguousInstanceError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    print(f"Error: {error}", file=sys.stderr)
    sys.exit(EXIT_ERROR)


def handle_connection_error(error: ProviderConnectionError, debug_mode: bool) -> None:
    """Handle an unreachable cloud endpoint.

    Parameters
    ----------
    error : ProviderConnectionError
        The connection error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    ProviderConnectionError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    print("Cannot reach the cloud API\n", file=sys.stderr)
    print("This usually means:", file=sys.stderr)
    print("  - OS_AUTH_URL is wrong or unreachable", file=sys.stderr)
    print("  - A VPN or proxy connection is required\n", file=sys.stderr)
    print(f"Details: {error}", file=sys.stderr)
    sys.exit(EXIT_ERROR)


def handle_api_error(error: ProviderAPIError, debug_mode: bool) -> None:
    """Handle provider API error with context-specific messages.

    Parameters
    ----------
    error : ProviderAPIError
        The API error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    ProviderAPIError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    error_code = error.error_code
    error_msg = str(error)

    if error_code in PERMISSION_ERROR_CODES:
        print("Insufficient OpenStack permissions\n", file=sys.stderr)
        print(
            "Your account is not allowed to perform this operation in the project.",
            file=sys.stderr,
        )
        print("Ask your cloud administrator to grant:", file=sys.stderr)
        print("  - Compute permissions (create, list and delete servers)", file=sys.stderr)
        print("  - Keypair permissions (create, list and delete keypairs)", file=sys.stderr)
        print("  - Read access to images, flavors and networks", file=sys.stderr)
    elif error_code in QUOTA_ERROR_CODES:
        print("Cloud quota exceeded\n", file=sys.stderr)
        print("This usually means:", file=sys.stderr)
        print("  - Too many instances, cores or keypairs in the project", file=sys.stderr)
        print("  - Too many API requests in a short time\n", file=sys.stderr)
        print("Fix it:", file=sys.stderr)
        print("  tins list", file=sys.stderr)
        print("  tins terminate --all", file=sys.stderr)
    else:
        print(f"Cloud API error: {error_msg}", file=sys.stderr)

    sys.exit(EXIT_ERROR)


def handle_file_error(error: OSError, debug_mode: bool) -> None:
    """Handle a local file system error such as a missing or unwritable key.

    Parameters
    ----------
    error : OSError
        The error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    OSError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    print(f"Error: {error}", file=sys.stderr)
    sys.exit(EXIT_ERROR)


def handle_ssh_error(error: SSHCommandError, debug_mode: bool) -> None:
    """Exit with the status of a failed ssh session.

    ssh reports its own errors on the inherited stderr, so nothing is printed.

    Parameters
    ----------
    error : SSHCommandError
        The ssh error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    SSHCommandError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    sys.exit(error.returncode)


def handle_cancelled(debug_mode: bool) -> None:
    """Handle the user dismissing the instance picker.

    Parameters
    ----------
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    SelectionCancelledError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    print("Cancelled.", file=sys.stderr)
    sys.exit(EXIT_CANCELLED)


def handle_runtime_error(error: RuntimeError, debug_mode: bool) -> None:
    """Handle a failed workflow step.

    Parameters
    ----------
    error : RuntimeError
        The runtime error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    RuntimeError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    print(f"Error: {error}", file=sys.stderr)
    sys.exit(EXIT_ERROR)


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for Fire CLI with graceful error handling.

    Arguments after a literal ``--`` are split off before fire sees the
    command line and handed to ``connect`` as extra ssh arguments.

    Parameters
    ----------
    argv : Sequence[str] | None
        Arguments without the program name. If None, uses sys.argv[1:]
    """
    debug_mode = os.environ.get(DEBUG_ENV_VAR) == "1"
    configure_logging(debug_mode)

    command, ssh_args = split_passthrough_args(sys.argv[1:] if argv is None else argv)

    try:
        if ssh_args and (not command or command[0] != "connect"):
            raise ValueError("Arguments after '--' are only accepted by connect")

        Tins = get_tins_base_class()
        fire.Fire(Tins(ssh_args=ssh_args), command=command, name="tins")
    except ConfigurationError as e:
        handle_configuration_error(e, debug_mode)
    except ValueError as e:
        handle_value_error(e, debug_mode)
    except ProviderCredentialsError as e:
        handle_credentials_error(e, debug_mode)
    except (ResourceNotFoundError, AmbiguousInstanceError) as e:
        handle_resolution_error(e, debug_mode)
    except ProviderConnectionError as e:
        handle_connection_error(e, debug_mode)
    except ProviderAPIError as e:
        handle_api_error(e, debug_mode)
    except SelectionCancelledError:
        handle_cancelled(debug_mode)
    except SSHCommandError as e:
        handle_ssh_error(e, debug_mode)
    except OSError as e:
        handle_file_error(e, debug_mode)
    except RuntimeError as e:
        handle_runtime_error(e, debug_mode)
