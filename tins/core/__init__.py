"""Core tins functionality."""

from __future__ import annotations

from tins.core.config import ConfigLoader, ConfigurationError, TinsConfig
from tins.core.interfaces import ComputeProvider, Instance, InstanceIdentity
from tins.core.signals import cancel_on_signals

__all__ = [
    "ComputeProvider",
    "ConfigLoader",
    "ConfigurationError",
    "Instance",
    "InstanceIdentity",
    "TinsConfig",
    "cancel_on_signals",
]
