"""Configuration loading: YAML file, environment overlay and validation."""

from __future__ import annotations

import copy
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from tins.constants import (
    DEFAULT_DOMAIN_NAME,
    DEFAULT_FLAVOR_NAME,
    DEFAULT_NETWORK_ATTACHMENT_MODE,
    DEFAULT_SSH_DIR,
    SUPPORTED_NETWORK_ATTACHMENT_MODES,
)

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TINS_CONFIG"
PASSWORD_ENV_VAR = "OS_PASSWORD"

LOCAL_CONFIG_PATH = Path(".config") / "tint.yaml"
HOME_CONFIG_PATH = Path(".config") / "tint" / "tint.yaml"

ENV_OVERRIDES = {
    "auth_url": "OS_AUTH_URL",
    "username": "OS_USERNAME",
    "domain_name": "OS_DOMAIN_NAME",
    "project_id": "OS_PROJECT_ID",
    "project_name": "OS_PROJECT_NAME",
    "region_name": "OS_REGION_NAME",
    "availability_zone": "OS_AVAILABILITY_ZONE",
    "image_name": "OS_IMAGE_NAME",
    "flavor_name": "OS_FLAVOR_NAME",
    "network_name": "OS_NETWORK_NAME",
    "network_attachment_mode": "OS_NETWORK_ATTACHMENT_MODE",
    "ssh_dir": "TINS_SSH_DIR",
}
"""Config field to environment variable mapping. Non-empty env values win."""

REQUIRED_FIELDS = (
    "auth_url",
    "username",
    "project_id",
    "project_name",
    "region_name",
    "availability_zone",
    "image_name",
    "network_name",
)
"""Fields that must be non-empty after merging, in validation order."""


class ConfigurationError(ValueError):
    """Configuration is missing a required value or holds an invalid one."""


@dataclass(frozen=True)
class TinsConfig:
    """Resolved, validated connection and instance parameters."""

    auth_url: str
    username: str
    password: str = field(repr=False)
    domain_name: str
    project_id: str
    project_name: str
    region_name: str
    availability_zone: str
    image_name: str
    flavor_name: str
    network_name: str
    network_attachment_mode: str
    ssh_dir: Path


class ConfigLoader:
    """Load the YAML config file, overlay the environment and validate.

    Parameters
    ----------
    environ : Mapping[str, str] | None
        Environment to read overrides and the password from. If None, uses
        os.environ
    cwd : Path | None
        Directory searched for ``.config/tint.yaml``. If None, uses the
        current working directory
    home : Path | None
        Home directory searched for ``.config/tint/tint.yaml``. If None, uses
        Path.home()
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        cwd: Path | None = None,
        home: Path | None = None,
    ) -> None:
        self.environ = os.environ if environ is None else environ
        self.cwd = cwd
        self.home = home
        self.BUILT_IN_DEFAULTS = {
            "domain_name": DEFAULT_DOMAIN_NAME,
            "flavor_name": DEFAULT_FLAVOR_NAME,
            "network_attachment_mode": DEFAULT_NETWORK_ATTACHMENT_MODE,
            "ssh_dir": DEFAULT_SSH_DIR,
        }

    def find_config_file(self) -> Path | None:
        """Locate the configuration file.

        Checks, in order: the path in ``TINS_CONFIG``, ``.config/tint.yaml``
        under the working directory, then ``~/.config/tint/tint.yaml``.

        Returns
        -------
        Path | None
            First existing candidate, or None when no file exists
        """
        explicit = self.environ.get(CONFIG_ENV_VAR)
        if explicit:
            path = Path(explicit).expanduser()
            if path.exists():
                return path
            logger.warning("%s points to %s, which does not exist", CONFIG_ENV_VAR, path)
            return None

        cwd = self.cwd if self.cwd is not None else Path.cwd()
        home = self.home if self.home is not None else Path.home()

        for candidate in (cwd / LOCAL_CONFIG_PATH, home / HOME_CONFIG_PATH):
            if candidate.exists():
                return candidate

        return None

    def load_file(self, config_path: Path) -> dict[str, Any]:
        """Load and resolve a YAML configuration file.

        Parameters
        ----------
        config_path : Path
            Path to the YAML file

        Returns
        -------
        dict[str, Any]
            Parsed mapping with interpolations resolved; empty for an empty
            file

        Raises
        ------
        ConfigurationError
            If the file is not valid YAML, is not a mapping, or holds an
            unresolvable interpolation
        """
        try:
            cfg = OmegaConf.load(config_path)
        except yaml.YAMLError as e:
            logger.debug("Failed to parse YAML config file %s: %s", config_path, e)
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read config file {config_path}: {e}") from e

        if cfg is None:
            return {}

        if not OmegaConf.is_dict(cfg):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping")

        try:
            return OmegaConf.to_container(cfg, resolve=True, throw_on_missing=True)
        except OmegaConfBaseException as e:
            raise ConfigurationError(
                f"Failed to resolve variables in {config_path}: {e}"
            ) from e

    def load(self, config_path: Path | None = None) -> TinsConfig:
        """Build the effective configuration.

        Parameters
        ----------
        config_path : Path | None
            Explicit file to load. If None, uses find_config_file()

        Returns
        -------
        TinsConfig
            Immutable configuration with defaults applied

        Raises
        ------
        ConfigurationError
            If the file is invalid, the password is missing, a required field
            is empty or a value is out of range
        """
        merged: dict[str, Any] = copy.deepcopy(self.BUILT_IN_DEFAULTS)

        if config_path is None:
            config_path = self.find_config_file()

        if config_path is not None:
            logger.debug("Loading configuration from %s", config_path)
            for key, value in self.load_file(config_path).items():
                if key == "password":
                    logger.warning(
                        "Ignoring 'password' in %s; set %s instead",
                        config_path,
                        PASSWORD_ENV_VAR,
                    )
                    continue
                if key not in ENV_OVERRIDES:
                    logger.warning("Ignoring unknown config key '%s' in %s", key, config_path)
                    continue
                if value is None:
                    continue
                merged[key] = self._coerce(key, value)

        for key, env_var in ENV_OVERRIDES.items():
            value = self.environ.get(env_var)
            if value:
                merged[key] = value

        for key, default in self.BUILT_IN_DEFAULTS.items():
            if not merged.get(key):
                merged[key] = default

        password = self.environ.get(PASSWORD_ENV_VAR)
        if not password:
            raise ConfigurationError(
                f"Required environment variable {PASSWORD_ENV_VAR} is not set"
            )

        self._validate(merged)

        return TinsConfig(
            auth_url=merged["auth_url"],
            username=merged["username"],
            password=password,
            domain_name=merged["domain_name"],
            project_id=merged["project_id"],
            project_name=merged["project_name"],
            region_name=merged["region_name"],
            availability_zone=merged["availability_zone"],
            image_name=merged["image_name"],
            flavor_name=merged["flavor_name"],
            network_name=merged["network_name"],
            network_attachment_mode=merged["network_attachment_mode"],
            ssh_dir=Path(merged["ssh_dir"]).expanduser(),
        )

    def _coerce(self, key: str, value: Any) -> str:
        """Convert a scalar file value to a string.

        Raises
        ------
        ConfigurationError
            If the value is a list or mapping
        """
        if isinstance(value, (dict, list)):
            raise ConfigurationError(f"{key} must be a string")
        return str(value)

    def _validate(self, config: dict[str, Any]) -> None:
        """Validate required fields and the network attachment mode.

        Parameters
        ----------
        config : dict[str, Any]
            Merged configuration

        Raises
        ------
        ConfigurationError
            If a required field is empty or the attachment mode is unknown
        """
        for key in REQUIRED_FIELDS:
            if not config.get(key):
                raise ConfigurationError(
                    f"{ENV_OVERRIDES[key]} is required "
                    "(set in config file or environment variable)"
                )

        mode = config["network_attachment_mode"]
        if mode not in SUPPORTED_NETWORK_ATTACHMENT_MODES:
            raise ConfigurationError(
                f"Unsupported network_attachment_mode '{mode}'. "
                f"Supported: {', '.join(sorted(SUPPORTED_NETWORK_ATTACHMENT_MODES))}"
            )
