"""Provider capability interface and shared data types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from tins.constants import (
    INSTANCE_NAME_PREFIX,
    MANAGED_METADATA_KEY,
    MANAGED_METADATA_VALUE,
)


@dataclass(frozen=True)
class InstanceIdentity:
    """Names tying an instance to its keypair and local key files.

    Parameters
    ----------
    short_name : str
        User-facing name without the tins prefix
    provider_id : str | None
        Provider instance ID once the remote instance exists
    """

    short_name: str
    provider_id: str | None = None

    @property
    def full_name(self) -> str:
        """Prefix-qualified name used for all remote lookups."""
        return f"{INSTANCE_NAME_PREFIX}{self.short_name}"

    @classmethod
    def from_full_name(
        cls, full_name: str, provider_id: str | None = None
    ) -> InstanceIdentity:
        """Build an identity from a remote instance name.

        Names without the prefix are kept whole as the short name, so the
        derived full name only equals ``full_name`` for prefixed names.

        Parameters
        ----------
        full_name : str
            Instance name as reported by the provider
        provider_id : str | None
            Provider instance ID

        Returns
        -------
        InstanceIdentity
            Identity with the prefix stripped from the short name
        """
        short_name = full_name
        if full_name.startswith(INSTANCE_NAME_PREFIX):
            short_name = full_name[len(INSTANCE_NAME_PREFIX) :]
        return cls(short_name=short_name, provider_id=provider_id)


@dataclass
class Instance:
    """Snapshot of a remote compute instance."""

    id: str
    name: str
    status: str
    metadata: dict[str, str] = field(default_factory=dict)
    addresses: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    created: datetime | None = None

    @property
    def has_managed_marker(self) -> bool:
        """Whether the instance carries the tins metadata flag."""
        return self.metadata.get(MANAGED_METADATA_KEY) == MANAGED_METADATA_VALUE

    @property
    def is_managed(self) -> bool:
        """Whether tins recognises the instance by metadata flag or name prefix."""
        return self.has_managed_marker or self.name.startswith(INSTANCE_NAME_PREFIX)

    @property
    def identity(self) -> InstanceIdentity:
        """Identity derived from the instance's own name."""
        return InstanceIdentity.from_full_name(self.name, provider_id=self.id)


class ComputeProvider(Protocol):
    """Capability interface the lifecycle workflows depend on."""

    def authenticate(self) -> None:
        """Authenticate against the provider."""
        ...

    def resolve_image_id(self, name: str) -> str:
        """Resolve an image name to its ID."""
        ...

    def resolve_flavor_id(self, name: str) -> str:
        """Resolve a flavor name to its ID."""
        ...

    def resolve_network_id(self, name: str) -> str:
        """Resolve a network name to its ID."""
        ...

    def create_instance(
        self,
        name: str,
        image_id: str,
        flavor_id: str,
        network_id: str,
        availability_zone: str,
        metadata: dict[str, str],
        user_data: str,
        key_name: str | None = None,
    ) -> Instance:
        """Create an instance."""
        ...

    def list_instances(self) -> list[Instance]:
        """List all instances visible to the project."""
        ...

    def get_instance(self, instance_id: str) -> Instance:
        """Fetch one instance by ID."""
        ...

    def delete_instance(self, instance_id: str) -> None:
        """Delete an instance."""
        ...

    def create_keypair(self, name: str, public_key: str) -> None:
        """Import a public key as a named keypair."""
        ...

    def delete_keypair(self, name: str) -> None:
        """Delete a named keypair."""
        ...

    def list_keypairs(self) -> list[str]:
        """List keypair names."""
        ...
