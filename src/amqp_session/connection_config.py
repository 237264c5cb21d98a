"""Connection and TLS parameters for establishing an AMQP session."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

import pika
from pika.connection import Parameters

from .errors import BadUriError

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5672
DEFAULT_SSL_PORT = 5671
DEFAULT_USERNAME = "guest"
DEFAULT_PASSWORD = "guest"
DEFAULT_VHOST = "/"
DEFAULT_FRAME_MAX = 131072
URL_ENV_VAR = "RABBITMQ_URL"


@dataclass(frozen=True)
class ConnectionParameters:
    """Broker reachability and login parameters.

    ``frame_max`` of ``0`` requests no limit and leaves the choice to the broker.
    ``socket_timeout`` is applied to the underlying socket; ``None`` blocks
    indefinitely.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    username: str = DEFAULT_USERNAME
    password: str = field(default=DEFAULT_PASSWORD, repr=False)
    vhost: str = DEFAULT_VHOST
    frame_max: int = DEFAULT_FRAME_MAX
    socket_timeout: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.host:
            raise ValueError("host must not be empty.")
        if not 1 <= self.port <= 65535:
            raise ValueError(f"port must be between 1 and 65535, got {self.port}.")
        if self.frame_max < 0:
            raise ValueError(f"frame_max must be non-negative, got {self.frame_max}.")
        if self.socket_timeout is not None and self.socket_timeout <= 0:
            raise ValueError("socket_timeout must be positive when provided.")


@dataclass(frozen=True)
class TlsParameters:
    """TLS material for a secure connection.

    Client certificate and key are optional but must be supplied together.
    Empty strings are treated as absent.
    """

    path_to_ca_cert: str
    path_to_client_cert: Optional[str] = None
    path_to_client_key: Optional[str] = None
    verify_hostname: bool = True

    def __post_init__(self) -> None:
        if not self.path_to_ca_cert:
            raise ValueError("path_to_ca_cert is required for a secure connection.")
        if bool(self.path_to_client_cert) != bool(self.path_to_client_key):
            raise ValueError(
                "path_to_client_cert and path_to_client_key must be supplied together."
            )

    @property
    def has_client_certificate(self) -> bool:
        return bool(self.path_to_client_cert and self.path_to_client_key)


def resolve_uri(uri: Optional[str] = None) -> str:
    """Return the URI argument or fall back to the ``RABBITMQ_URL`` variable."""
    resolved = (uri or os.getenv(URL_ENV_VAR) or "").strip()
    if not resolved:
        raise BadUriError(
            f"AMQP URI must be provided via argument or {URL_ENV_VAR} environment variable."
        )
    return resolved


def parameters_from_uri(
    uri: str, frame_max: int = DEFAULT_FRAME_MAX
) -> Tuple[ConnectionParameters, bool]:
    """Parse an ``amqp://`` or ``amqps://`` URI.

    Returns the connection parameters and whether the URI requests TLS.
    """
    try:
        url_parameters: Parameters = pika.URLParameters(uri)
    except ValueError as exc:
        raise BadUriError(f"Invalid AMQP URI provided: {uri}") from exc

    credentials = url_parameters.credentials
    try:
        parameters = ConnectionParameters(
            host=url_parameters.host,
            port=url_parameters.port,
            username=credentials.username,
            password=credentials.password,
            vhost=url_parameters.virtual_host,
            frame_max=frame_max,
        )
    except ValueError as exc:
        raise BadUriError(f"Invalid AMQP URI provided: {uri}") from exc

    return parameters, url_parameters.ssl_options is not None
