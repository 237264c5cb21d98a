"""Connection handle and its wiring."""

from .amqp_connection import AmqpConnection, ConnectionState
from .session import AmqpSession
from .connection_dependencies import ConnectionDependencies

__all__ = ["AmqpConnection", "AmqpSession", "ConnectionDependencies", "ConnectionState"]
