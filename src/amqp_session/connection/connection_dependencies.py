"""Factories selecting the collaborators an `AmqpConnection` is built from."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from amqp_session.contracts import ILoginNegotiator, ITransportOpener
from amqp_session.handshake import LoginNegotiator
from amqp_session.transport import SslTransportOpener


@dataclass(frozen=True)
class ConnectionDependencies:
    """Bundles factory functions for connection wiring.

    Swap ``make_transport_opener`` for :class:`~amqp_session.transport.TcpTransportOpener`
    to run without TLS support; secure requests then fail with
    :class:`~amqp_session.errors.UnsupportedSecureRequestError`.
    """

    make_transport_opener: Callable[[], ITransportOpener] = field(default=SslTransportOpener)
    make_login_negotiator: Callable[[], ILoginNegotiator] = field(default=LoginNegotiator)
