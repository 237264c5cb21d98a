"""AMQP 0-9-1 login handshake driven as an explicit state machine."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional

from pika import frame as pika_frame
from pika import spec
from pika.credentials import PlainCredentials

from amqp_session.connection_config import ConnectionParameters
from amqp_session.contracts import ILoginNegotiator, ITransport
from amqp_session.errors import TransportError, TransportStatus

from .handshake_reply import (
    HandshakeReply,
    LibraryFaultReply,
    NegotiatedTune,
    NormalReply,
    ServerFaultReply,
    UnexpectedReply,
)


class LoginState(Enum):
    AWAITING_START = "Connection.Start"
    AWAITING_TUNE = "Connection.Tune"
    AWAITING_OPEN_OK = "Connection.OpenOk"


class LoginNegotiator(ILoginNegotiator):
    """Performs the blocking login round-trips on channel 0.

    The sequence is protocol header, ``Start``/``StartOk`` (SASL PLAIN),
    ``Tune``/``TuneOk`` and ``Open``/``OpenOk``. A broker ``Connection.Close``
    at any step ends the handshake with a :class:`ServerFaultReply`; transport
    failures end it with a :class:`LibraryFaultReply`. Nothing is retried.
    """

    CHANNEL_MAX = 0
    HEARTBEAT = 0
    LOCALE = "en_US"

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(__name__)

    def login(
        self,
        transport: ITransport,
        parameters: ConnectionParameters,
        client_properties: Dict[str, Any],
    ) -> HandshakeReply:
        try:
            return self._negotiate(transport, parameters, client_properties)
        except TransportError as exc:
            self.logger.debug("Login aborted by transport fault: %s", exc)
            return LibraryFaultReply(exc.status, exc.context, exc.detail)

    @staticmethod
    def negotiate_limit(client_value: int, server_value: int) -> int:
        """Combine a client and broker limit where ``0`` means unlimited."""
        if client_value == 0 or server_value == 0:
            return max(client_value, server_value)
        return min(client_value, server_value)

    def _negotiate(
        self,
        transport: ITransport,
        parameters: ConnectionParameters,
        client_properties: Dict[str, Any],
    ) -> HandshakeReply:
        transport.write_frame(pika_frame.ProtocolHeader())

        state = LoginState.AWAITING_START
        server_properties: Dict[str, Any] = {}
        tune: Optional[NegotiatedTune] = None

        while True:
            frame_value = transport.read_frame()

            if isinstance(frame_value, pika_frame.ProtocolHeader):
                return LibraryFaultReply(
                    TransportStatus.PROTOCOL_MISMATCH,
                    "negotiating protocol",
                    f"broker requested AMQP {frame_value.major}-{frame_value.minor}-"
                    f"{frame_value.revision}",
                )
            if isinstance(frame_value, pika_frame.Heartbeat):
                continue
            if not isinstance(frame_value, pika_frame.Method) or frame_value.channel_number != 0:
                return UnexpectedReply(
                    received=type(frame_value).__name__,
                    expected=state.value,
                    server_properties=server_properties,
                )

            method = frame_value.method
            if isinstance(method, spec.Connection.Close):
                self._acknowledge_close(transport)
                return ServerFaultReply(
                    reply_code=method.reply_code,
                    reply_text=method.reply_text,
                    class_id=method.class_id or 0,
                    method_id=method.method_id or 0,
                )

            if state is LoginState.AWAITING_START and isinstance(method, spec.Connection.Start):
                fault = self._on_start(transport, method, parameters, client_properties)
                if fault is not None:
                    return fault
                server_properties = dict(method.server_properties or {})
                state = LoginState.AWAITING_TUNE
            elif state is LoginState.AWAITING_TUNE and isinstance(method, spec.Connection.Tune):
                tune = self._on_tune(transport, method, parameters)
                state = LoginState.AWAITING_OPEN_OK
            elif (
                state is LoginState.AWAITING_OPEN_OK
                and isinstance(method, spec.Connection.OpenOk)
                and tune is not None
            ):
                self.logger.debug("Virtual host %s opened", parameters.vhost)
                return NormalReply(
                    server_properties=server_properties,
                    tune=tune,
                    known_hosts=method.known_hosts or "",
                )
            else:
                return UnexpectedReply(
                    received=method.NAME,
                    expected=state.value,
                    server_properties=server_properties,
                )
            self.logger.debug("Login state is now %s", state.name)

    def _on_start(
        self,
        transport: ITransport,
        start: spec.Connection.Start,
        parameters: ConnectionParameters,
        client_properties: Dict[str, Any],
    ) -> Optional[LibraryFaultReply]:
        if (start.version_major, start.version_minor) != spec.PROTOCOL_VERSION[0:2]:
            return LibraryFaultReply(
                TransportStatus.PROTOCOL_MISMATCH,
                "negotiating protocol",
                f"broker speaks AMQP {start.version_major}-{start.version_minor}",
            )

        credentials = PlainCredentials(parameters.username, parameters.password)
        mechanism, response = credentials.response_for(start)
        if not mechanism:
            return LibraryFaultReply(
                TransportStatus.UNSUPPORTED_SASL_METHOD,
                "authenticating",
                f"broker offered {start.mechanisms!r}",
            )

        transport.write_frame(
            pika_frame.Method(
                0, spec.Connection.StartOk(client_properties, mechanism, response, self.LOCALE)
            )
        )
        return None

    def _on_tune(
        self,
        transport: ITransport,
        tune: spec.Connection.Tune,
        parameters: ConnectionParameters,
    ) -> NegotiatedTune:
        negotiated = NegotiatedTune(
            channel_max=self.negotiate_limit(self.CHANNEL_MAX, tune.channel_max or 0),
            frame_max=self.negotiate_limit(parameters.frame_max, tune.frame_max or 0),
            heartbeat=self.HEARTBEAT,
        )
        transport.write_frame(
            pika_frame.Method(
                0,
                spec.Connection.TuneOk(
                    negotiated.channel_max, negotiated.frame_max, negotiated.heartbeat
                ),
            )
        )
        transport.write_frame(pika_frame.Method(0, spec.Connection.Open(parameters.vhost)))
        return negotiated

    def _acknowledge_close(self, transport: ITransport) -> None:
        try:
            transport.write_frame(pika_frame.Method(0, spec.Connection.CloseOk()))
        except TransportError as exc:
            self.logger.debug("Could not acknowledge Connection.Close: %s", exc)
