"""Cloud provider implementations and the shared provider error types."""

from __future__ import annotations

from tins.providers.exceptions import (
    AmbiguousInstanceError,
    ProviderAPIError,
    ProviderConnectionError,
    ProviderCredentialsError,
    ProviderError,
    ResourceNotFoundError,
)

__all__ = [
    "AmbiguousInstanceError",
    "ProviderError",
    "ProviderCredentialsError",
    "ProviderAPIError",
    "ProviderConnectionError",
    "ResourceNotFoundError",
]
