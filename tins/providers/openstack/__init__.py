"""OpenStack provider implementation."""

from tins.providers.openstack.compute import OpenStackManager

__all__ = ["OpenStackManager"]
