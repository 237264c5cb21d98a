"""Contract interfaces for AMQP connection establishment."""

from .amqp_connection_interface import IAmqpConnection
from .login_negotiator_interface import ILoginNegotiator
from .transport_interface import ITransport, ITransportOpener, OutboundFrame

__all__ = [
    "IAmqpConnection",
    "ILoginNegotiator",
    "ITransport",
    "ITransportOpener",
    "OutboundFrame",
]
