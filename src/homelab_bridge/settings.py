"""Datasource settings loading.

Turns the host's JSON settings blob and its decrypted secret map into an
immutable Settings object. Fails closed when the API key is missing or the
base URL is not an http(s) URL.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from .errors import ConfigurationError

DEFAULT_HEALTH_PATH = "/api/health"
DEFAULT_METRICS_PATH = "/metrics"

API_KEY_FIELD = "apiKey"


@dataclass(frozen=True)
class SecretBundle:
    """Decrypted secrets. The key is masked in repr."""

    api_key: str = field(repr=False)

    def __repr__(self) -> str:
        return "SecretBundle(api_key='***')"


@dataclass(frozen=True)
class Settings:
    """Validated datasource settings."""

    path: str
    secrets: SecretBundle | None = None
    health_path: str = DEFAULT_HEALTH_PATH
    metrics_path: str = DEFAULT_METRICS_PATH

    @property
    def api_key(self) -> str | None:
        """API key, or None if no secrets were loaded."""
        if self.secrets is None or not self.secrets.api_key:
            return None
        return self.secrets.api_key

    @property
    def health_url(self) -> str:
        """Liveness endpoint URL."""
        return _join_url(self.path, self.health_path)

    @property
    def metrics_url(self) -> str:
        """Scrape endpoint URL."""
        return _join_url(self.path, self.metrics_path)


def _join_url(base: str, path: str) -> str:
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


def _validate_base_url(path: str) -> str:
    try:
        url = httpx.URL(path)
    except httpx.InvalidURL as e:
        raise ConfigurationError(
            message=f"settings invalid: path is not a valid URL: {e}",
            data={"field": "path", "value": path},
        ) from e
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(
            message=f"settings invalid: path must be an http or https URL with a host, got {path!r}",
            data={"field": "path", "value": path},
        )
    return path


def _decode_json_data(json_data: bytes | str | Mapping[str, Any] | None) -> dict[str, Any]:
    if json_data is None:
        return {}
    if isinstance(json_data, Mapping):
        return dict(json_data)
    try:
        decoded = json.loads(json_data or "{}")
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigurationError(message=f"could not unmarshal settings json: {e}") from e
    if not isinstance(decoded, dict):
        raise ConfigurationError(message="could not unmarshal settings json: expected an object")
    return decoded


def load_secret_bundle(secure_json_data: Mapping[str, str] | None) -> SecretBundle:
    """Build a SecretBundle from the decrypted secret map.

    Raises:
        ConfigurationError: If apiKey is missing or empty
    """
    api_key = (secure_json_data or {}).get(API_KEY_FIELD)
    if not api_key:
        raise ConfigurationError(
            message="secret missing: apiKey is missing or empty",
            data={"field": API_KEY_FIELD},
        )
    return SecretBundle(api_key=api_key)


def load_settings(
    json_data: bytes | str | Mapping[str, Any] | None,
    secure_json_data: Mapping[str, str] | None,
) -> Settings:
    """Load settings from the raw settings blob and decrypted secrets.

    Args:
        json_data: JSON settings object (bytes, str or already-decoded mapping)
        secure_json_data: Decrypted secret map

    Returns:
        Settings with secrets populated

    Raises:
        ConfigurationError: On malformed JSON, a missing or invalid path, or a missing apiKey
    """
    raw = _decode_json_data(json_data)

    path = raw.get("path")
    if not isinstance(path, str) or not path.strip():
        raise ConfigurationError(
            message="settings missing: path is missing or empty",
            data={"field": "path"},
        )

    base_url = _validate_base_url(path.strip())

    secrets = load_secret_bundle(secure_json_data)

    return Settings(
        path=base_url,
        secrets=secrets,
        health_path=str(raw.get("healthPath") or DEFAULT_HEALTH_PATH),
        metrics_path=str(raw.get("metricsPath") or DEFAULT_METRICS_PATH),
    )
