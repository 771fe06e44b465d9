"""CLI configuration management.

Loads the datasource configuration the CLI hands to the bridge from
~/.homelab-bridge/config.yaml. Supports environment variable overrides.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError
from .transport import TransportOptions

# Config file sections and the BridgeConfig attribute each one fills
SECTIONS = (
    ("jsonData", "json_data"),
    ("secureJsonData", "secure_json_data"),
    ("http", "http"),
)

# Environment variable mappings
ENV_VARS = {
    "path": "HOMELAB_BRIDGE_PATH",
    "api_key": "HOMELAB_BRIDGE_API_KEY",
    "timeout": "HOMELAB_BRIDGE_TIMEOUT",
}


@dataclass
class BridgeConfig:
    """Raw bridge configuration, in the shape the host would supply it."""

    json_data: dict[str, Any] = field(default_factory=dict)
    secure_json_data: dict[str, str] = field(default_factory=dict)
    http: dict[str, Any] = field(default_factory=dict)

    # Track where each value came from
    _sources: dict[str, str] = field(default_factory=dict)

    def get_source(self, key: str) -> str:
        """Get the source of a config value."""
        return self._sources.get(key, "default")

    @property
    def transport_options(self) -> TransportOptions:
        return TransportOptions.from_dict(self.http)

    def masked(self) -> dict[str, Any]:
        """Config as a dict with secret values masked."""
        return {
            "jsonData": dict(self.json_data),
            "secureJsonData": {key: "***" for key in self.secure_json_data},
            "http": dict(self.http),
        }


def get_config_path() -> Path:
    """Get the default config file path.

    Returns:
        Path to ~/.homelab-bridge/config.yaml
    """
    return Path.home() / ".homelab-bridge" / "config.yaml"


def load_config(config_path: str | Path | None = None) -> BridgeConfig:
    """Load bridge configuration.

    Precedence (highest to lowest):
    1. Environment variables
    2. Config file (--config or ~/.homelab-bridge/config.yaml)
    3. Defaults

    Raises:
        ConfigurationError: If the config file exists but cannot be parsed
    """
    config = BridgeConfig()
    sources: dict[str, str] = {}

    path = Path(config_path).expanduser() if config_path else get_config_path()
    if config_path and not path.exists():
        raise ConfigurationError(message=f"config file not found: {path}")

    if path.exists():
        try:
            with open(path) as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(message=f"could not read config file {path}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(message=f"config file {path} must contain a mapping")

        for key, attr in SECTIONS:
            section = file_config.get(key)
            if section is None:
                continue
            if not isinstance(section, dict):
                raise ConfigurationError(message=f"config section {key} must be a mapping")
            setattr(config, attr, dict(section))

        if "path" in config.json_data:
            sources["path"] = "config file"
        if "apiKey" in config.secure_json_data:
            sources["api_key"] = "config file"
        if "timeout" in config.http:
            sources["timeout"] = "config file"

    # Override with environment variables
    if os.environ.get(ENV_VARS["path"]):
        config.json_data["path"] = os.environ[ENV_VARS["path"]]
        sources["path"] = "environment"
    if os.environ.get(ENV_VARS["api_key"]):
        config.secure_json_data["apiKey"] = os.environ[ENV_VARS["api_key"]]
        sources["api_key"] = "environment"
    if os.environ.get(ENV_VARS["timeout"]):
        try:
            config.http["timeout"] = float(os.environ[ENV_VARS["timeout"]])
        except ValueError as e:
            raise ConfigurationError(
                message=f"invalid {ENV_VARS['timeout']}: {os.environ[ENV_VARS['timeout']]}"
            ) from e
        sources["timeout"] = "environment"

    config._sources = sources
    return config
