"""Opens plaintext and TLS transports to an AMQP broker."""

from __future__ import annotations

import logging
import socket
import ssl
from typing import Optional

from amqp_session.connection_config import TlsParameters
from amqp_session.contracts import ITransport, ITransportOpener
from amqp_session.errors import (
    AllocationFailureError,
    TransportError,
    TransportStatus,
    UnsupportedSecureRequestError,
)

from .socket_transport import SocketTransport


class TcpTransportOpener(ITransportOpener):
    """Opens plaintext TCP transports only."""

    def __init__(self) -> None:
        self.logger = logging.getLogger(__name__)

    @property
    def supports_tls(self) -> bool:
        return False

    def open(self, host: str, port: int, timeout: Optional[float] = None) -> ITransport:
        self.logger.debug("Opening TCP socket to %s:%s", host, port)
        sock = self._connect(host, port, timeout)
        return SocketTransport(sock, peer=f"{host}:{port}")

    def open_secure(
        self, host: str, port: int, tls: TlsParameters, timeout: Optional[float] = None
    ) -> ITransport:
        raise UnsupportedSecureRequestError(
            f"{type(self).__name__} cannot open TLS connections; use SslTransportOpener."
        )

    def _connect(self, host: str, port: int, timeout: Optional[float]) -> socket.socket:
        try:
            return socket.create_connection((host, port), timeout=timeout)
        except socket.timeout as exc:
            raise TransportError(TransportStatus.TIMEOUT, "opening socket") from exc
        except OSError as exc:
            raise TransportError(TransportStatus.SOCKET_ERROR, "opening socket", str(exc)) from exc


class SslTransportOpener(TcpTransportOpener):
    """Opens plaintext or TLS transports.

    The TLS context is built in a fixed order: peer and hostname verification
    policy, CA certificate, optional client certificate, then the connect.
    Every failure is reported with the step that failed and no socket is left
    open.
    """

    @property
    def supports_tls(self) -> bool:
        return True

    def open_secure(
        self, host: str, port: int, tls: TlsParameters, timeout: Optional[float] = None
    ) -> ITransport:
        context = self.build_context(tls)

        self.logger.debug("Opening TLS socket to %s:%s", host, port)
        sock = self._connect(host, port, timeout)
        try:
            secure_sock = context.wrap_socket(sock, server_hostname=host)
        except ssl.SSLError as exc:
            sock.close()
            raise TransportError(TransportStatus.SSL_ERROR, "opening socket", str(exc)) from exc
        except socket.timeout as exc:
            sock.close()
            raise TransportError(TransportStatus.TIMEOUT, "opening socket") from exc
        except OSError as exc:
            sock.close()
            raise TransportError(TransportStatus.SOCKET_ERROR, "opening socket", str(exc)) from exc

        return SocketTransport(secure_sock, peer=f"{host}:{port}")

    def build_context(self, tls: TlsParameters) -> ssl.SSLContext:
        try:
            context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        except ssl.SSLError as exc:
            raise AllocationFailureError(f"Unable to allocate TLS context: {exc}") from exc

        # Peer and hostname verification toggle together.
        context.check_hostname = tls.verify_hostname
        context.verify_mode = ssl.CERT_REQUIRED if tls.verify_hostname else ssl.CERT_NONE

        try:
            context.load_verify_locations(cafile=tls.path_to_ca_cert)
        except (OSError, ssl.SSLError) as exc:
            raise TransportError(
                TransportStatus.SSL_CA_CERT_ERROR, "setting CA certificate", str(exc)
            ) from exc

        if tls.has_client_certificate:
            try:
                context.load_cert_chain(
                    certfile=str(tls.path_to_client_cert),
                    keyfile=str(tls.path_to_client_key),
                )
            except (OSError, ssl.SSLError) as exc:
                raise TransportError(
                    TransportStatus.SSL_CLIENT_CERT_ERROR, "setting client certificate", str(exc)
                ) from exc

        return context
