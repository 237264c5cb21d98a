"""Transports and transport openers."""

from .socket_transport import SocketTransport
from .transport_opener import SslTransportOpener, TcpTransportOpener

__all__ = ["SocketTransport", "SslTransportOpener", "TcpTransportOpener"]
