"""Transport factory - builds the shared HTTP client.

The client is built once per bridge and shared by health probes and
scrapes. It carries no auth headers; callers attach them per request.
"""

import ssl
from dataclasses import dataclass
from typing import Any

import httpx

from .errors import ConfigurationError

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_CONNECTIONS = 100


@dataclass(frozen=True)
class TransportOptions:
    """Host-provided connection options."""

    timeout: float = DEFAULT_TIMEOUT
    connect_timeout: float | None = None
    insecure_skip_verify: bool = False
    ca_cert: str | None = None
    client_cert: str | None = None
    client_key: str | None = None
    proxy: str | None = None
    max_connections: int = DEFAULT_MAX_CONNECTIONS
    trust_env: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TransportOptions":
        """Build options from a camelCase mapping (config file layout)."""
        data = data or {}
        try:
            return cls(
                timeout=float(data.get("timeout", DEFAULT_TIMEOUT)),
                connect_timeout=(
                    float(data["connectTimeout"]) if data.get("connectTimeout") is not None else None
                ),
                insecure_skip_verify=bool(data.get("insecureSkipVerify", False)),
                ca_cert=data.get("caCert"),
                client_cert=data.get("clientCert"),
                client_key=data.get("clientKey"),
                proxy=data.get("proxy"),
                max_connections=int(data.get("maxConnections", DEFAULT_MAX_CONNECTIONS)),
                trust_env=bool(data.get("trustEnv", True)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(message=f"invalid http options: {e}") from e


def _build_ssl_context(options: TransportOptions) -> ssl.SSLContext | bool:
    if options.insecure_skip_verify and not options.client_cert:
        return False

    try:
        if options.insecure_skip_verify:
            context = ssl.create_default_context()
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        else:
            context = ssl.create_default_context(cafile=options.ca_cert)
        if options.client_cert:
            context.load_cert_chain(certfile=options.client_cert, keyfile=options.client_key)
    except (ssl.SSLError, OSError) as e:
        raise ConfigurationError(
            message=f"invalid TLS configuration: {e}",
            data={"ca_cert": options.ca_cert, "client_cert": options.client_cert},
        ) from e
    return context


def build_client(
    options: TransportOptions | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build the reusable HTTP client.

    Args:
        options: Connection options (defaults if omitted)
        transport: Optional httpx transport override (used by tests)

    Returns:
        Configured httpx.AsyncClient

    Raises:
        ConfigurationError: If the options cannot produce a working client
    """
    options = options or TransportOptions()

    if options.timeout <= 0:
        raise ConfigurationError(message=f"invalid timeout: {options.timeout}")
    if options.client_key and not options.client_cert:
        raise ConfigurationError(message="invalid TLS configuration: clientKey without clientCert")

    timeout = httpx.Timeout(options.timeout, connect=options.connect_timeout or options.timeout)
    limits = httpx.Limits(max_connections=options.max_connections)
    verify = _build_ssl_context(options)

    try:
        return httpx.AsyncClient(
            timeout=timeout,
            limits=limits,
            verify=verify,
            proxy=options.proxy,
            trust_env=options.trust_env,
            transport=transport,
        )
    except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError, TypeError) as e:
        raise ConfigurationError(
            message=f"invalid proxy configuration: {e}",
            data={"proxy": options.proxy},
        ) from e
