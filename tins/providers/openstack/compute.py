"""OpenStack compute management for tins."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import openstack.connection

from tins.core.interfaces import Instance
from tins.providers.exceptions import (
    ProviderError,
    ProviderCredentialsError,
    ResourceNotFoundError,
)
from tins.providers.openstack.errors import handle_openstack_errors
from tins.providers.openstack.utils import encode_user_data, server_to_instance

if TYPE_CHECKING:
    from tins.core.config import TinsConfig

logger = logging.getLogger(__name__)

APP_NAME = "tins"


class OpenStackManager:
    """Manage OpenStack servers and keypairs for tins.

    Parameters
    ----------
    config : TinsConfig
        Resolved configuration carrying credentials and region
    connection_factory : Callable[..., Any] | None
        Optional factory for creating SDK connections. If None, uses
        openstack.connection.Connection
    """

    def __init__(
        self,
        config: TinsConfig,
        connection_factory: Callable[..., Any] | None = None,
    ) -> None:
        self.config = config
        self.connection_factory = connection_factory or openstack.connection.Connection
        self.connection = self.connection_factory(
            region_name=config.region_name,
            auth={
                "auth_url": config.auth_url,
                "username": config.username,
                "password": config.password,
                "user_domain_name": config.domain_name,
                "project_domain_name": config.domain_name,
                "project_id": config.project_id,
            },
            app_name=APP_NAME,
        )

    def authenticate(self) -> None:
        """Obtain a token from the identity service.

        Raises
        ------
        ProviderCredentialsError
            If the identity service cannot issue a token for the configured
            credentials
        """
        try:
            with handle_openstack_errors("authenticate"):
                self.connection.authorize()
        except ProviderCredentialsError:
            raise
        except ProviderError as e:
            raise ProviderCredentialsError(str(e)) from e

        logger.debug(
            "Authenticated as %s against %s (region %s)",
            self.config.username,
            self.config.auth_url,
            self.config.region_name,
        )

    def resolve_image_id(self, name: str) -> str:
        """Find an image by name.

        Parameters
        ----------
        name : str
            Image name

        Returns
        -------
        str
            ID of the first image with that name

        Raises
        ------
        ResourceNotFoundError
            If no image has that name
        """
        with handle_openstack_errors("list images"):
            for image in self.connection.image.images(name=name):
                if image.name == name:
                    return image.id

        raise ResourceNotFoundError(f"Image '{name}' not found")

    def resolve_flavor_id(self, name: str) -> str:
        """Find a public flavor by exact name.

        Parameters
        ----------
        name : str
            Flavor name

        Returns
        -------
        str
            Flavor ID

        Raises
        ------
        ResourceNotFoundError
            If no public flavor has that name
        """
        with handle_openstack_errors("list flavors"):
            for flavor in self.connection.compute.flavors(details=True, is_public=True):
                if flavor.name == name:
                    return flavor.id

        raise ResourceNotFoundError(f"Flavor '{name}' not found")

    def resolve_network_id(self, name: str) -> str:
        """Find a network by name.

        Parameters
        ----------
        name : str
            Network name

        Returns
        -------
        str
            ID of the first network with that name

        Raises
        ------
        ResourceNotFoundError
            If no network has that name
        """
        with handle_openstack_errors("list networks"):
            for network in self.connection.network.networks(name=name):
                if network.name == name:
                    return network.id

        raise ResourceNotFoundError(f"Network '{name}' not found")

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
        """Create a server attached to an existing network.

        Parameters
        ----------
        name : str
            Server name
        image_id : str
            Boot image ID
        flavor_id : str
            Flavor ID
        network_id : str
            Network to attach the server to
        availability_zone : str
            Availability zone to schedule the server in
        metadata : dict[str, str]
            Server metadata
        user_data : str
            Plain-text startup script, encoded before sending
        key_name : str | None
            Keypair to bind natively, if any

        Returns
        -------
        Instance
            Snapshot of the server as returned by the create call
        """
        attrs: dict[str, Any] = {
            "name": name,
            "image_id": image_id,
            "flavor_id": flavor_id,
            "networks": [{"uuid": network_id}],
            "availability_zone": availability_zone,
            "metadata": metadata,
            "user_data": encode_user_data(user_data),
        }
        if key_name:
            attrs["key_name"] = key_name

        with handle_openstack_errors("create server"):
            server = self.connection.compute.create_server(**attrs)

        logger.debug("Created server %s (%s)", server.name, server.id)
        return server_to_instance(server)

    def list_instances(self) -> list[Instance]:
        """List all servers in the project.

        Returns
        -------
        list[Instance]
            Every server visible to the project, unfiltered
        """
        with handle_openstack_errors("list servers"):
            return [
                server_to_instance(server)
                for server in self.connection.compute.servers(details=True)
            ]

    def get_instance(self, instance_id: str) -> Instance:
        """Fetch a server by ID.

        Parameters
        ----------
        instance_id : str
            Server ID

        Returns
        -------
        Instance
            Current server snapshot

        Raises
        ------
        ResourceNotFoundError
            If the server does not exist
        """
        with handle_openstack_errors(f"get server {instance_id}"):
            server = self.connection.compute.get_server(instance_id)
        return server_to_instance(server)

    def delete_instance(self, instance_id: str) -> None:
        """Delete a server.

        Parameters
        ----------
        instance_id : str
            Server ID

        Raises
        ------
        ResourceNotFoundError
            If the server does not exist
        """
        with handle_openstack_errors(f"delete server {instance_id}"):
            self.connection.compute.delete_server(instance_id, ignore_missing=False)

    def create_keypair(self, name: str, public_key: str) -> None:
        """Import a public key as a compute keypair.

        Parameters
        ----------
        name : str
            Keypair name
        public_key : str
            OpenSSH public key line
        """
        with handle_openstack_errors(f"create keypair {name}"):
            self.connection.compute.create_keypair(name=name, public_key=public_key)

    def delete_keypair(self, name: str) -> None:
        """Delete a compute keypair.

        Parameters
        ----------
        name : str
            Keypair name

        Raises
        ------
        ResourceNotFoundError
            If the keypair does not exist
        """
        with handle_openstack_errors(f"delete keypair {name}"):
            self.connection.compute.delete_keypair(name, ignore_missing=False)

    def list_keypairs(self) -> list[str]:
        """List keypair names owned by the user.

        Returns
        -------
        list[str]
            Keypair names
        """
        with handle_openstack_errors("list keypairs"):
            return [keypair.name for keypair in self.connection.compute.keypairs()]
