"""Provider-agnostic exception hierarchy.

Provider implementations translate their SDK errors into these types so the
lifecycle workflows and the CLI never handle SDK exceptions directly.
"""

from __future__ import annotations


class ProviderError(Exception):
    """Base class for all provider errors."""


class ProviderCredentialsError(ProviderError):
    """Authentication with the provider failed or credentials are missing."""


class ProviderConnectionError(ProviderError):
    """The provider endpoint could not be reached."""


class ProviderAPIError(ProviderError):
    """A provider API call failed.

    Parameters
    ----------
    message : str
        Human-readable error description
    error_code : str | None
        Provider-specific error code (HTTP status for OpenStack), if known
    """

    def __init__(self, message: str, error_code: str | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code


class ResourceNotFoundError(ProviderError):
    """A named image, flavor, network, keypair or instance does not exist."""


class AmbiguousInstanceError(ProviderError):
    """An instance name matched more than one managed instance.

    Parameters
    ----------
    name : str
        The name that matched several instances
    instance_ids : list[str]
        IDs of every matching instance
    """

    def __init__(self, name: str, instance_ids: list[str]) -> None:
        super().__init__(
            f"Multiple instances are named '{name}'; use an instance ID instead: "
            f"{', '.join(instance_ids)}"
        )
        self.name = name
        self.instance_ids = instance_ids
