"""AMQP 0-9-1 connection establishment and authentication."""

from .connection import AmqpConnection, AmqpSession, ConnectionDependencies, ConnectionState
from .connection_config import ConnectionParameters, TlsParameters
from .contracts import IAmqpConnection
from .errors import (
    AllocationFailureError,
    AmqpSessionError,
    BadUriError,
    LibraryFaultError,
    ProtocolError,
    TransportError,
    TransportStatus,
    UnexpectedReplyError,
    UnsupportedSecureRequestError,
)
from .handshake import build_client_properties, extract_broker_version

__all__ = [
    "AllocationFailureError",
    "AmqpConnection",
    "AmqpSession",
    "AmqpSessionError",
    "BadUriError",
    "ConnectionDependencies",
    "ConnectionParameters",
    "ConnectionState",
    "IAmqpConnection",
    "LibraryFaultError",
    "ProtocolError",
    "TlsParameters",
    "TransportError",
    "TransportStatus",
    "UnexpectedReplyError",
    "UnsupportedSecureRequestError",
    "build_client_properties",
    "extract_broker_version",
]
