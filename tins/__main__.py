#!/usr/bin/env python3
"""tins - temporary OpenStack instances."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

from tins import __version__
from tins.cli.main import main
from tins.cli.parsing import normalize_identifier
from tins.core.config import ConfigLoader, TinsConfig
from tins.core.interfaces import ComputeProvider
from tins.keys import KeyManager
from tins.lifecycle import LifecycleManager
from tins.providers.openstack import OpenStackManager


class Tins:
    """Create, list, connect to and terminate temporary OpenStack instances.

    Parameters
    ----------
    compute_provider_factory : Callable[[TinsConfig], ComputeProvider] | None
        Optional factory for the compute provider. If None, uses
        OpenStackManager
    key_manager_factory : Callable[[Path], KeyManager] | None
        Optional factory for the key manager, called with the key directory
    selector : Callable[[Sequence[str]], int | None] | None
        Optional interactive picker used by connect
    ssh_runner : Callable[[Sequence[str]], int] | None
        Optional ssh runner used by connect
    config_loader : ConfigLoader | None
        Optional configuration loader
    ssh_args : Sequence[str]
        Extra ssh arguments given after ``--`` on the command line
    """

    def __init__(
        self,
        compute_provider_factory: Callable[[TinsConfig], ComputeProvider] | None = None,
        key_manager_factory: Callable[[Path], KeyManager] | None = None,
        selector: Callable[[Sequence[str]], int | None] | None = None,
        ssh_runner: Callable[[Sequence[str]], int] | None = None,
        config_loader: ConfigLoader | None = None,
        ssh_args: Sequence[str] = (),
    ) -> None:
        self._config_loader = config_loader or ConfigLoader()
        self._compute_provider_factory = compute_provider_factory
        self._key_manager_factory = key_manager_factory or KeyManager
        self._selector = selector
        self._ssh_runner = ssh_runner
        self._ssh_args = tuple(ssh_args)
        self._lifecycle_manager: LifecycleManager | None = None

    def _create_compute_provider(self, config: TinsConfig) -> ComputeProvider:
        return OpenStackManager(config)

    def _get_lifecycle_manager(self) -> LifecycleManager:
        """Get the lifecycle manager, loading config and authenticating once."""
        if self._lifecycle_manager is None:
            config = self._config_loader.load()
            factory = self._compute_provider_factory or self._create_compute_provider
            compute_provider = factory(config)
            compute_provider.authenticate()

            self._lifecycle_manager = LifecycleManager(
                config=config,
                compute_provider=compute_provider,
                key_manager=self._key_manager_factory(config.ssh_dir),
                selector=self._selector,
                ssh_runner=self._ssh_runner,
            )
        return self._lifecycle_manager

    def create(self, name: str | None = None) -> None:
        """Create a temporary instance with its own SSH key pair.

        Parameters
        ----------
        name : str | None
            Short name without whitespace, slashes, quotes, '$' or
            backticks. A random adjective-noun name is generated when omitted
        """
        self._get_lifecycle_manager().create(name=normalize_identifier(name))

    def list(self) -> None:
        """List all temporary instances."""
        self._get_lifecycle_manager().list()

    def connect(self, name_or_id: str | None = None) -> None:
        """Connect to a temporary instance via SSH.

        Without an argument an interactive menu is shown. Arguments after
        ``--`` are passed to ssh.

        Parameters
        ----------
        name_or_id : str | None
            Short name, full name or instance ID
        """
        self._get_lifecycle_manager().connect(
            identifier=normalize_identifier(name_or_id), ssh_args=self._ssh_args
        )

    def terminate(self, name_or_id: str | None = None, all: bool = False) -> None:
        """Terminate a temporary instance and delete its keys.

        Parameters
        ----------
        name_or_id : str | None
            Short name, full name or instance ID
        all : bool
            Terminate every tins instance and remove orphaned tins keypairs

        Raises
        ------
        ValueError
            If both or neither of name_or_id and all are given
        """
        if name_or_id is not None and all:
            raise ValueError("Cannot specify an instance identifier with --all")

        if name_or_id is None and not all:
            raise ValueError(
                "Instance identifier required (or use --all to terminate all instances)"
            )

        if all:
            self._get_lifecycle_manager().terminate_all()
        else:
            self._get_lifecycle_manager().terminate(normalize_identifier(name_or_id))

    def version(self) -> None:
        """Print the tins version."""
        print(f"tins version {__version__}")


if __name__ == "__main__":
    main()
