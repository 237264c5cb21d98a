"""Error taxonomy for AMQP connection establishment."""

from __future__ import annotations

from enum import IntEnum
from typing import Optional


class TransportStatus(IntEnum):
    """Status codes reported by the transport and negotiation layers."""

    SOCKET_ERROR = 1
    CONNECTION_CLOSED = 2
    TIMEOUT = 3
    BAD_FRAME = 4
    PROTOCOL_MISMATCH = 5
    UNSUPPORTED_SASL_METHOD = 6
    SSL_ERROR = 7
    SSL_CA_CERT_ERROR = 8
    SSL_CLIENT_CERT_ERROR = 9

    @property
    def description(self) -> str:
        return _STATUS_DESCRIPTIONS[self]


_STATUS_DESCRIPTIONS = {
    TransportStatus.SOCKET_ERROR: "socket error",
    TransportStatus.CONNECTION_CLOSED: "connection closed unexpectedly",
    TransportStatus.TIMEOUT: "operation timed out",
    TransportStatus.BAD_FRAME: "invalid AMQP frame received",
    TransportStatus.PROTOCOL_MISMATCH: "incompatible AMQP protocol version",
    TransportStatus.UNSUPPORTED_SASL_METHOD: "broker does not support SASL PLAIN",
    TransportStatus.SSL_ERROR: "a TLS error occurred",
    TransportStatus.SSL_CA_CERT_ERROR: "CA certificate could not be loaded",
    TransportStatus.SSL_CLIENT_CERT_ERROR: "client certificate or key could not be loaded",
}


class AmqpSessionError(Exception):
    """Base class for every error raised while establishing a connection."""


class BadUriError(AmqpSessionError, ValueError):
    """The AMQP URI could not be parsed into connection parameters."""


class UnsupportedSecureRequestError(AmqpSessionError):
    """A TLS connection was requested but cannot be honoured."""


class AllocationFailureError(AmqpSessionError):
    """The connection resources could not be allocated."""


class TransportError(AmqpSessionError):
    """Opening, configuring or using the transport failed.

    The transport must be considered unusable after this error; a new
    connection attempt needs a fresh transport.
    """

    def __init__(
        self, status: TransportStatus, context: str, detail: Optional[str] = None
    ) -> None:
        self.status = status
        self.context = context
        self.detail = detail
        message = f"{context}: {status.description}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class LibraryFaultError(TransportError):
    """The negotiation layer reported a local fault during login."""


class ProtocolError(AmqpSessionError):
    """The broker explicitly rejected the handshake."""

    def __init__(
        self, reply_code: int, reply_text: str, class_id: int = 0, method_id: int = 0
    ) -> None:
        self.reply_code = reply_code
        self.reply_text = reply_text
        self.class_id = class_id
        self.method_id = method_id
        super().__init__(f"{reply_code}: {reply_text}")


class UnexpectedReplyError(ProtocolError):
    """The broker answered the handshake with a reply we do not recognise."""
