"""Instance lifecycle workflows: create, list, connect and terminate."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from tins.constants import (
    INSTANCE_NAME_PREFIX,
    MANAGED_METADATA_KEY,
    MANAGED_METADATA_VALUE,
    NAME_GENERATION_ATTEMPTS,
    POLL_INTERVAL_SECONDS,
    WAIT_TIMEOUT_SECONDS,
    InstanceStatus,
)
from tins.core.config import TinsConfig
from tins.core.interfaces import ComputeProvider, Instance, InstanceIdentity
from tins.core.signals import cancel_on_signals
from tins.keys import KeyFileError, KeyManager
from tins.names import generate_instance_name
from tins.providers.exceptions import (
    AmbiguousInstanceError,
    ProviderError,
    ResourceNotFoundError,
)
from tins.services.ssh import build_ssh_command, run_ssh
from tins.tui.selector import select_instance
from tins.utils import (
    build_startup_script,
    extract_ip_address,
    format_created,
    validate_short_name,
)

logger = logging.getLogger(__name__)

LIST_HEADERS = ("ID", "NAME", "STATUS", "CREATED")
LIST_COLUMN_GAP = "   "


class SelectionCancelledError(Exception):
    """The user dismissed the interactive instance picker."""


@dataclass
class TerminationReport:
    """Outcome of terminating every managed instance."""

    terminated: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    orphaned_keypairs_deleted: list[str] = field(default_factory=list)


class LifecycleManager:
    """Orchestrates the instance workflows against a compute provider.

    Parameters
    ----------
    config : TinsConfig
        Validated configuration
    compute_provider : ComputeProvider
        Authenticated provider client
    key_manager : KeyManager
        Local key pair storage
    selector : Callable[[Sequence[str]], int | None] | None
        Interactive picker returning the chosen row index. If None, uses the
        textual selector
    ssh_runner : Callable[[Sequence[str]], int] | None
        Runs an ssh command. If None, uses run_ssh()
    name_generator : Callable[[], str]
        Source of short names when the user gives none
    poll_interval : float
        Seconds between status checks while waiting for ACTIVE
    timeout : float
        Overall readiness wait budget in seconds
    cancel_event : threading.Event | None
        Event that ends the readiness wait early when set. If None, a private
        event is created
    clock : Callable[[], float]
        Monotonic clock used for the wait deadline
    """

    def __init__(
        self,
        config: TinsConfig,
        compute_provider: ComputeProvider,
        key_manager: KeyManager,
        selector: Callable[[Sequence[str]], int | None] | None = None,
        ssh_runner: Callable[[Sequence[str]], int] | None = None,
        name_generator: Callable[[], str] = generate_instance_name,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        timeout: float = WAIT_TIMEOUT_SECONDS,
        cancel_event: threading.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.compute_provider = compute_provider
        self.key_manager = key_manager
        self.selector = selector or select_instance
        self.ssh_runner = ssh_runner or run_ssh
        self.name_generator = name_generator
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.cancel_event = cancel_event or threading.Event()
        self.clock = clock

    def managed_instances(self) -> list[Instance]:
        """Return the instances tins recognises, in provider order."""
        return [
            instance
            for instance in self.compute_provider.list_instances()
            if instance.is_managed
        ]

    def resolve_instance(self, identifier: str, require_managed: bool = False) -> Instance:
        """Find the instance a user-supplied identifier refers to.

        Short names and prefixed names are matched against managed instances
        first; anything left unmatched is looked up as a provider ID.

        Parameters
        ----------
        identifier : str
            Short name, full name or provider instance ID
        require_managed : bool
            Reject an instance found by ID that tins does not manage

        Returns
        -------
        Instance
            The matching instance

        Raises
        ------
        AmbiguousInstanceError
            If several managed instances carry the matched name
        ResourceNotFoundError
            If nothing matches, or require_managed is set and the instance
            found by ID is not managed
        """
        if identifier.startswith(INSTANCE_NAME_PREFIX):
            full_name = identifier
        else:
            full_name = f"{INSTANCE_NAME_PREFIX}{identifier}"

        matches = [
            instance
            for instance in self.managed_instances()
            if instance.name == full_name
        ]

        if len(matches) > 1:
            raise AmbiguousInstanceError(full_name, [match.id for match in matches])

        if matches:
            return matches[0]

        logger.debug("No managed instance named %s, looking up ID %s", full_name, identifier)

        try:
            instance = self.compute_provider.get_instance(identifier)
        except ResourceNotFoundError as e:
            raise ResourceNotFoundError(f"Instance '{identifier}' not found") from e

        if require_managed and not instance.is_managed:
            raise ResourceNotFoundError(
                f"Instance '{identifier}' not found among tins instances"
            )

        return instance

    def create(self, name: str | None = None) -> Instance:
        """Create an instance together with its key pair and keypair.

        Parameters
        ----------
        name : str | None
            Short name. If None, a random adjective-noun name is generated

        Returns
        -------
        Instance
            Latest known snapshot of the new instance

        Raises
        ------
        ValueError
            If the name is not a valid short name, or an instance or local
            key already uses it
        KeyFileError
            If the local key pair cannot be written
        ProviderError
            If keypair registration, name resolution or instance creation
            fails. Everything created up to that point is removed first
        RuntimeError
            If the instance enters the ERROR state while waiting
        """
        if name is None:
            identity = self._generate_unused_identity()
            print(f"Generated instance name: {identity.short_name}")
        else:
            identity = InstanceIdentity(short_name=validate_short_name(name))
            conflict = self._name_conflict(identity)
            if conflict is not None:
                raise ValueError(conflict)

        logger.info("Generating SSH key pair for %s...", identity.full_name)
        key_pair = self.key_manager.generate(identity)
        logger.info("SSH key pair created: %s", key_pair.private_key_path)

        try:
            self.compute_provider.create_keypair(identity.full_name, key_pair.public_key)
        except Exception:
            self._delete_local_keys(identity, rollback=True)
            raise

        logger.info("Creating instance %s...", identity.full_name)

        try:
            image_id = self.compute_provider.resolve_image_id(self.config.image_name)
            flavor_id = self.compute_provider.resolve_flavor_id(self.config.flavor_name)
            network_id = self.compute_provider.resolve_network_id(self.config.network_name)

            instance = self.compute_provider.create_instance(
                name=identity.full_name,
                image_id=image_id,
                flavor_id=flavor_id,
                network_id=network_id,
                availability_zone=self.config.availability_zone,
                metadata={MANAGED_METADATA_KEY: MANAGED_METADATA_VALUE},
                user_data=build_startup_script(key_pair.public_key),
                key_name=identity.full_name,
            )
        except Exception:
            self._delete_remote_keypair(identity.full_name, rollback=True)
            self._delete_local_keys(identity, rollback=True)
            raise

        print("Instance created successfully!")
        print(f"  ID: {instance.id}")
        print(f"  Name: {instance.name}")
        print(f"  Status: {instance.status}")

        logger.info("Waiting for instance to become active...")
        with cancel_on_signals(self.cancel_event):
            if self.wait_for_active(instance):
                logger.info("Instance is now ACTIVE")

        try:
            instance = self.compute_provider.get_instance(instance.id)
        except ProviderError as e:
            logger.warning("Failed to fetch details for instance %s: %s", instance.id, e)

        self._print_connection_details(instance, key_pair.private_key_path)

        return instance

    def _name_conflict(self, identity: InstanceIdentity) -> str | None:
        """Describe what already uses a full name, or return None if it is free."""
        for instance in self.compute_provider.list_instances():
            if instance.name == identity.full_name:
                return (
                    f"Instance name '{identity.short_name}' is already used by "
                    f"{instance.name} (ID: {instance.id})"
                )

        for path in (
            self.key_manager.private_key_path(identity),
            self.key_manager.public_key_path(identity),
        ):
            if path.exists():
                return (
                    f"Instance name '{identity.short_name}' is already used by the "
                    f"SSH key {path}; terminate its instance or remove the key first"
                )

        return None

    def _generate_unused_identity(self) -> InstanceIdentity:
        for _ in range(NAME_GENERATION_ATTEMPTS):
            identity = InstanceIdentity(short_name=self.name_generator())
            conflict = self._name_conflict(identity)
            if conflict is None:
                return identity
            logger.debug("Generated name skipped: %s", conflict)

        raise RuntimeError(
            f"Could not find an unused instance name after "
            f"{NAME_GENERATION_ATTEMPTS} attempts; pass a name explicitly"
        )

    def wait_for_active(self, instance: Instance) -> bool:
        """Poll an instance until it is ACTIVE, fails, or the wait ends.

        Parameters
        ----------
        instance : Instance
            Freshly created instance

        Returns
        -------
        bool
            True if the instance reached ACTIVE. False if the deadline passed,
            a status check failed or the wait was cancelled; each of these is
            reported as a warning

        Raises
        ------
        RuntimeError
            If the instance enters the ERROR state
        """
        deadline = self.clock() + self.timeout

        while True:
            try:
                current = self.compute_provider.get_instance(instance.id)
            except ProviderError as e:
                logger.warning(
                    "Instance may not be ready yet; status check failed: %s", e
                )
                return False

            if current.status == InstanceStatus.ACTIVE.value:
                return True

            if current.status == InstanceStatus.ERROR.value:
                short_name = instance.identity.short_name
                raise RuntimeError(
                    f"Instance {instance.name} entered ERROR state. "
                    f"Remove it with: tins terminate {short_name}"
                )

            remaining = deadline - self.clock()
            if remaining <= 0:
                logger.warning(
                    "Instance may not be ready yet; still %s after %s seconds",
                    current.status,
                    self.timeout,
                )
                return False

            if self.cancel_event.wait(min(self.poll_interval, remaining)):
                logger.warning(
                    "Stopped waiting for instance %s; it continues to build",
                    instance.name,
                )
                return False

    def _print_connection_details(self, instance: Instance, key_path: Path) -> None:
        if instance.addresses:
            print("\nInstance IP addresses:")
            for network, records in instance.addresses.items():
                for record in records:
                    if record.get("addr"):
                        print(f"  {network}: {record['addr']}")

        ip_address = extract_ip_address(instance.addresses) or "<instance-ip>"
        print("\nSSH connection:")
        print(f"  ssh -i {key_path} root@{ip_address}")

    def terminate(self, identifier: str) -> InstanceIdentity:
        """Delete an instance, then its keypair and local key files.

        Parameters
        ----------
        identifier : str
            Short name, full name or provider instance ID

        Returns
        -------
        InstanceIdentity
            Identity of the terminated instance

        Raises
        ------
        ResourceNotFoundError
            If the identifier matches nothing
        AmbiguousInstanceError
            If the name matches several instances
        ProviderError
            If the instance deletion fails; key cleanup is then skipped
        """
        instance = self.resolve_instance(identifier)

        logger.info("Terminating instance %s (ID: %s)...", instance.name, instance.id)
        self.compute_provider.delete_instance(instance.id)
        print(f"Instance {instance.name} terminated successfully.")

        self._cleanup_instance_keys(instance)

        return instance.identity

    def terminate_all(self) -> TerminationReport:
        """Terminate every managed instance and sweep orphaned keypairs.

        Instances are handled one at a time. A failure for one instance is
        reported and the loop moves on; the sweep runs regardless.

        Returns
        -------
        TerminationReport
            Names of terminated and failed instances and of deleted orphaned
            keypairs
        """
        report = TerminationReport()
        instances = self.managed_instances()

        if not instances:
            print("No tins instances found to terminate.")
        else:
            print(f"Found {len(instances)} tins instance(s) to terminate:")
            for instance in instances:
                print(f"  - {instance.name} (ID: {instance.id}, Status: {instance.status})")

        for instance in instances:
            logger.info("Terminating instance %s (ID: %s)...", instance.name, instance.id)

            try:
                self.compute_provider.delete_instance(instance.id)
            except ProviderError as e:
                logger.warning("Failed to delete instance %s: %s", instance.name, e)
                report.failed.append(instance.name)
                continue

            print(f"Instance {instance.name} terminated successfully.")
            report.terminated.append(instance.name)

            self._cleanup_instance_keys(instance)

        self._sweep_orphaned_keypairs(report)

        if report.failed:
            logger.warning(
                "%d instance(s) could not be terminated: %s",
                len(report.failed),
                ", ".join(report.failed),
            )
        else:
            print("All tins instances and keypairs have been cleaned up.")

        return report

    def _sweep_orphaned_keypairs(self, report: TerminationReport) -> None:
        """Delete prefixed keypairs that no existing instance is named after."""
        logger.info("Checking for orphaned tins keypairs...")

        try:
            keypair_names = self.compute_provider.list_keypairs()
            instance_names = {
                instance.name for instance in self.compute_provider.list_instances()
            }
        except ProviderError as e:
            logger.warning("Failed to clean up orphaned keypairs: %s", e)
            return

        for name in keypair_names:
            if not name.startswith(INSTANCE_NAME_PREFIX) or name in instance_names:
                continue

            try:
                self.compute_provider.delete_keypair(name)
            except ProviderError as e:
                logger.warning("Failed to delete orphaned keypair %s: %s", name, e)
                continue

            logger.info("Deleted orphaned keypair %s", name)
            report.orphaned_keypairs_deleted.append(name)

    def list(self) -> list[Instance]:
        """Print a table of managed instances.

        Returns
        -------
        list[Instance]
            The managed instances shown
        """
        instances = self.managed_instances()

        if not instances:
            print("No temporary instances found.")
            return instances

        rows = [
            (instance.id, instance.name, instance.status, format_created(instance.created))
            for instance in instances
        ]
        widths = [
            max(len(header), *(len(row[column]) for row in rows))
            for column, header in enumerate(LIST_HEADERS)
        ]

        print(_format_row(LIST_HEADERS, widths))
        print(_format_row(tuple("-" * len(header) for header in LIST_HEADERS), widths))
        for row in rows:
            print(_format_row(row, widths))

        return instances

    def connect(
        self, identifier: str | None = None, ssh_args: Sequence[str] = ()
    ) -> int:
        """Open an interactive ssh session to an instance.

        Parameters
        ----------
        identifier : str | None
            Short name, full name or provider ID. If None, the user picks an
            instance interactively
        ssh_args : Sequence[str]
            Extra arguments passed to ssh after the destination

        Returns
        -------
        int
            Exit status of the ssh session

        Raises
        ------
        ResourceNotFoundError
            If the identifier matches no managed instance, or there are no
            instances to pick from
        SelectionCancelledError
            If the user cancels the picker
        RuntimeError
            If the instance has no usable address yet
        KeyFileError
            If the private key for the instance is missing
        SSHCommandError
            If ssh exits with a non-zero status
        """
        if identifier is not None:
            instance = self.resolve_instance(identifier, require_managed=True)
        else:
            instance = self._choose_instance()

        ip_address = extract_ip_address(instance.addresses)
        if ip_address is None:
            raise RuntimeError(
                f"No IP address found for instance {instance.name}; "
                "it may still be booting"
            )

        identity = instance.identity
        key_path = self.key_manager.private_key_path(identity)

        if not self.key_manager.exists(identity):
            if instance.has_managed_marker:
                reason = (
                    "The key was deleted; terminate the instance and create a new one"
                )
            else:
                reason = "The instance was not created by tins"
            raise KeyFileError(f"SSH key not found at {key_path}. {reason}.")

        logger.info(
            "Connecting to %s (%s) using key %s...", instance.name, ip_address, key_path
        )
        command = build_ssh_command(ip_address, key_path, ssh_args)
        return self.ssh_runner(command)

    def _choose_instance(self) -> Instance:
        instances = self.managed_instances()
        if not instances:
            raise ResourceNotFoundError("No tins instances available")

        options = [
            f"{instance.name} | {instance.status} | "
            f"{extract_ip_address(instance.addresses) or 'N/A'}"
            for instance in instances
        ]

        index = self.selector(options)
        if index is None:
            raise SelectionCancelledError("Instance selection cancelled")

        return instances[index]

    def _cleanup_instance_keys(self, instance: Instance) -> None:
        """Delete the keypair and local keys belonging to a deleted instance.

        The keypair is named after the instance itself. Local keys are only
        removed for prefixed instances or instances carrying the metadata
        marker, so deleting a foreign instance never touches tins keys.
        """
        self._delete_remote_keypair(instance.name)

        if instance.name.startswith(INSTANCE_NAME_PREFIX) or instance.has_managed_marker:
            self._delete_local_keys(instance.identity)
        else:
            logger.info(
                "Skipping local SSH key cleanup for %s; it was not created by tins",
                instance.name,
            )

    def _delete_remote_keypair(self, keypair_name: str, rollback: bool = False) -> None:
        if rollback:
            logger.debug("Rolling back keypair %s", keypair_name)
        else:
            logger.info("Deleting keypair %s...", keypair_name)

        try:
            self.compute_provider.delete_keypair(keypair_name)
        except ProviderError as e:
            logger.warning(
                "Failed to delete keypair %s (it may not exist): %s", keypair_name, e
            )

    def _delete_local_keys(self, identity: InstanceIdentity, rollback: bool = False) -> None:
        if rollback:
            logger.debug("Rolling back local SSH keys for %s", identity.full_name)
        else:
            logger.info("Cleaning up local SSH keys for %s...", identity.short_name)

        try:
            self.key_manager.delete(identity)
        except OSError as e:
            logger.warning(
                "Failed to delete local SSH keys for %s: %s", identity.short_name, e
            )


def _format_row(values: Sequence[str], widths: Sequence[int]) -> str:
    return LIST_COLUMN_GAP.join(
        value.ljust(width) for value, width in zip(values, widths)
    ).rstrip()
