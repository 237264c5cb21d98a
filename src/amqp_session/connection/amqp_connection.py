"""AMQP connection handle: open, log in and tear down a broker connection."""

from __future__ import annotations

import logging
from contextlib import ExitStack
from enum import Enum
from types import TracebackType
from typing import Optional, Type

from pika import frame as pika_frame
from pika import spec

from amqp_session.connection_config import (
    DEFAULT_FRAME_MAX,
    DEFAULT_HOST,
    DEFAULT_PASSWORD,
    DEFAULT_PORT,
    DEFAULT_SSL_PORT,
    DEFAULT_USERNAME,
    DEFAULT_VHOST,
    ConnectionParameters,
    TlsParameters,
    parameters_from_uri,
    resolve_uri,
)
from amqp_session.contracts import IAmqpConnection, ITransport
from amqp_session.errors import TransportError, TransportStatus, UnsupportedSecureRequestError
from amqp_session.handshake import (
    build_client_properties,
    classify_reply,
    extract_broker_version,
    format_broker_version,
)

from .session import AmqpSession
from .connection_dependencies import ConnectionDependencies


class ConnectionState(Enum):
    UNOPENED = "unopened"
    OPENING = "opening"
    LOGGING_IN = "logging_in"
    CONNECTED = "connected"
    CLOSED = "closed"
    FAILED = "failed"


class AmqpConnection(IAmqpConnection):
    """Owns a logged-in AMQP connection for its whole lifetime.

    Construction opens the transport and performs the login handshake. It
    either returns a connected handle or raises after releasing everything it
    acquired. :meth:`close` attempts a graceful ``Connection.Close`` and always
    releases the socket.

    The handle is not thread-safe; it must not be shared across threads
    without external locking.
    """

    CLOSE_REPLY_CODE = 200
    CLOSE_REPLY_TEXT = "Normal shutdown"
    CLOSE_TIMEOUT = 5.0

    def __init__(
        self,
        parameters: Optional[ConnectionParameters] = None,
        tls: Optional[TlsParameters] = None,
        *,
        dependencies: Optional[ConnectionDependencies] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        deps = dependencies or ConnectionDependencies()

        self.parameters = parameters or ConnectionParameters()
        self.tls = tls
        self.logger = logger or logging.getLogger(__name__)
        self._opener = deps.make_transport_opener()
        self._negotiator = deps.make_login_negotiator()
        self._state = ConnectionState.UNOPENED
        self._session: Optional[AmqpSession] = None
        self._broker_version = 0

        if tls is not None and not self._opener.supports_tls:
            raise UnsupportedSecureRequestError(
                "TLS support is not available in the configured transport opener."
            )

        self._establish()

    @classmethod
    def create(
        cls,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        username: str = DEFAULT_USERNAME,
        password: str = DEFAULT_PASSWORD,
        vhost: str = DEFAULT_VHOST,
        frame_max: int = DEFAULT_FRAME_MAX,
        *,
        dependencies: Optional[ConnectionDependencies] = None,
    ) -> "AmqpConnection":
        parameters = ConnectionParameters(
            host=host,
            port=port,
            username=username,
            password=password,
            vhost=vhost,
            frame_max=frame_max,
        )
        return cls(parameters, dependencies=dependencies)

    @classmethod
    def create_secure(
        cls,
        path_to_ca_cert: str,
        host: str = DEFAULT_HOST,
        path_to_client_key: str = "",
        path_to_client_cert: str = "",
        port: int = DEFAULT_SSL_PORT,
        username: str = DEFAULT_USERNAME,
        password: str = DEFAULT_PASSWORD,
        vhost: str = DEFAULT_VHOST,
        frame_max: int = DEFAULT_FRAME_MAX,
        verify_hostname: bool = True,
        *,
        dependencies: Optional[ConnectionDependencies] = None,
    ) -> "AmqpConnection":
        tls = TlsParameters(
            path_to_ca_cert=path_to_ca_cert,
            path_to_client_cert=path_to_client_cert or None,
            path_to_client_key=path_to_client_key or None,
            verify_hostname=verify_hostname,
        )
        parameters = ConnectionParameters(
            host=host,
            port=port,
            username=username,
            password=password,
            vhost=vhost,
            frame_max=frame_max,
        )
        return cls(parameters, tls, dependencies=dependencies)

    @classmethod
    def create_from_uri(
        cls,
        uri: Optional[str] = None,
        frame_max: int = DEFAULT_FRAME_MAX,
        *,
        dependencies: Optional[ConnectionDependencies] = None,
    ) -> "AmqpConnection":
        """Connect using ``amqp://[user:password@]host[:port][/vhost]``.

        Falls back to the ``RABBITMQ_URL`` environment variable when ``uri`` is
        omitted.
        """
        parameters, is_secure = parameters_from_uri(resolve_uri(uri), frame_max)
        if is_secure:
            raise UnsupportedSecureRequestError(
                "amqps URIs need TLS material; use create_secure_from_uri instead."
            )
        return cls(parameters, dependencies=dependencies)

    @classmethod
    def create_secure_from_uri(
        cls,
        uri: Optional[str],
        path_to_ca_cert: str,
        path_to_client_key: str = "",
        path_to_client_cert: str = "",
        verify_hostname: bool = True,
        frame_max: int = DEFAULT_FRAME_MAX,
        *,
        dependencies: Optional[ConnectionDependencies] = None,
    ) -> "AmqpConnection":
        """Connect using ``amqps://[user:password@]host[:port][/vhost]``."""
        parameters, is_secure = parameters_from_uri(resolve_uri(uri), frame_max)
        if not is_secure:
            raise UnsupportedSecureRequestError(
                "create_secure_from_uri only supports SSL-enabled URIs."
            )
        tls = TlsParameters(
            path_to_ca_cert=path_to_ca_cert,
            path_to_client_cert=path_to_client_cert or None,
            path_to_client_key=path_to_client_key or None,
            verify_hostname=verify_hostname,
        )
        return cls(parameters, tls, dependencies=dependencies)

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def broker_version(self) -> int:
        return self._broker_version

    @property
    def session(self) -> AmqpSession:
        if self._session is None or not self.is_connected:
            raise TransportError(TransportStatus.CONNECTION_CLOSED, "accessing session")
        return self._session

    def close(self) -> None:
        """Send Connection.Close and release the socket.

        The broker has at most ``CLOSE_TIMEOUT`` seconds (or ``socket_timeout``, if
        smaller) to answer before the socket is dropped.
        """
        if self._state is not ConnectionState.CONNECTED or self._session is None:
            return

        transport = self._session.transport
        self._state = ConnectionState.CLOSED
        try:
            self._close_gracefully(transport)
        finally:
            transport.close()
            self.logger.info(
                "Closed AMQP connection to %s:%s.", self.parameters.host, self.parameters.port
            )

    def __enter__(self) -> AmqpConnection:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"AmqpConnection(host={self.parameters.host!r}, port={self.parameters.port}, "
            f"vhost={self.parameters.vhost!r}, state={self._state.value})"
        )

    def _establish(self) -> None:
        self.logger.info(
            "Connecting to AMQP broker at %s:%s (vhost=%s, tls=%s)",
            self.parameters.host,
            self.parameters.port,
            self.parameters.vhost,
            self.tls is not None,
        )
        try:
            with ExitStack() as cleanup:
                self._state = ConnectionState.OPENING
                transport = self._open_transport()
                cleanup.callback(transport.close)

                self._state = ConnectionState.LOGGING_IN
                reply = self._negotiator.login(
                    transport, self.parameters, build_client_properties()
                )
                accepted = classify_reply(reply)

                self._broker_version = extract_broker_version(accepted.server_properties)
                self._session = AmqpSession(
                    transport=transport,
                    server_properties=accepted.server_properties,
                    channel_max=accepted.tune.channel_max,
                    frame_max=accepted.tune.frame_max,
                    heartbeat=accepted.tune.heartbeat,
                    known_hosts=accepted.known_hosts,
                )
                cleanup.pop_all()
        except Exception as exc:
            self._state = ConnectionState.FAILED
            self.logger.error(
                "Failed to establish AMQP connection to %s:%s: %s",
                self.parameters.host,
                self.parameters.port,
                exc,
            )
            raise

        self._state = ConnectionState.CONNECTED
        self.logger.info(
            "Connected to AMQP broker %s:%s (broker version %s).",
            self.parameters.host,
            self.parameters.port,
            format_broker_version(self._broker_version),
        )

    def _close_timeout(self) -> float:
        timeout = self.parameters.socket_timeout
        if timeout is None:
            return self.CLOSE_TIMEOUT
        return min(timeout, self.CLOSE_TIMEOUT)

    def _open_transport(self) -> ITransport:
        timeout = self.parameters.socket_timeout
        if self.tls is not None:
            return self._opener.open_secure(
                self.parameters.host, self.parameters.port, self.tls, timeout
            )
        return self._opener.open(self.parameters.host, self.parameters.port, timeout)

    def _close_gracefully(self, transport: ITransport) -> None:
        try:
            transport.set_timeout(self._close_timeout())
            transport.write_frame(
                pika_frame.Method(
                    0, spec.Connection.Close(self.CLOSE_REPLY_CODE, self.CLOSE_REPLY_TEXT, 0, 0)
                )
            )
            while True:
                frame_value = transport.read_frame()
                if not isinstance(frame_value, pika_frame.Method) or frame_value.channel_number != 0:
                    continue
                if isinstance(frame_value.method, spec.Connection.CloseOk):
                    return
                if isinstance(frame_value.method, spec.Connection.Close):
                    transport.write_frame(pika_frame.Method(0, spec.Connection.CloseOk()))
                    return
        except TransportError as exc:
            self.logger.debug("Graceful close did not complete: %s", exc)
