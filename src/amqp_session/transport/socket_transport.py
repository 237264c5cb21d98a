"""Framed AMQP transport over a connected (optionally TLS-wrapped) socket."""

from __future__ import annotations

import logging
import socket
import struct
from typing import Optional, Union

from pika import exceptions as pika_exceptions
from pika import frame as pika_frame

from amqp_session.contracts import ITransport, OutboundFrame
from amqp_session.errors import TransportError, TransportStatus


class SocketTransport(ITransport):
    """Exchanges whole AMQP frames over a blocking socket.

    Frame encoding and decoding are delegated to :mod:`pika.frame`; this class
    only buffers bytes until a complete frame is available.
    """

    READ_CHUNK_SIZE = 4096

    def __init__(self, sock: socket.socket, peer: str) -> None:
        self._sock: Optional[socket.socket] = sock
        self._buffer = bytearray()
        self.peer = peer
        self.logger = logging.getLogger(__name__)

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def write_frame(self, frame_value: OutboundFrame) -> None:
        sock = self._require_socket("writing frame")
        try:
            sock.sendall(frame_value.marshal())
        except socket.timeout as exc:
            raise TransportError(TransportStatus.TIMEOUT, "writing frame") from exc
        except OSError as exc:
            raise TransportError(TransportStatus.SOCKET_ERROR, "writing frame", str(exc)) from exc
        self.logger.debug("Sent %r to %s", frame_value, self.peer)

    def read_frame(self) -> Union[pika_frame.Frame, pika_frame.ProtocolHeader]:
        while True:
            try:
                consumed, frame_value = pika_frame.decode_frame(bytes(self._buffer))
            except pika_exceptions.InvalidFrameError as exc:
                raise TransportError(TransportStatus.BAD_FRAME, "reading frame", str(exc)) from exc
            except KeyError as exc:
                raise TransportError(
                    TransportStatus.BAD_FRAME, "reading frame", f"unknown method id {exc}"
                ) from exc
            except (struct.error, UnicodeDecodeError) as exc:
                raise TransportError(TransportStatus.BAD_FRAME, "reading frame", str(exc)) from exc

            if frame_value is not None:
                del self._buffer[:consumed]
                self.logger.debug("Received %r from %s", frame_value, self.peer)
                return frame_value

            chunk = self._recv()
            if not chunk:
                raise TransportError(TransportStatus.CONNECTION_CLOSED, "reading frame")
            self._buffer.extend(chunk)

    def set_timeout(self, timeout: Optional[float]) -> None:
        if self._sock is None:
            return
        try:
            self._sock.settimeout(timeout)
        except OSError as exc:
            raise TransportError(TransportStatus.SOCKET_ERROR, "setting timeout", str(exc)) from exc

    def close(self) -> None:
        if self._sock is None:
            return
        sock = self._sock
        self._sock = None
        self._buffer.clear()
        try:
            sock.close()
        except OSError as exc:
            self.logger.debug("Ignoring error while closing socket to %s: %s", self.peer, exc)

    def _recv(self) -> bytes:
        sock = self._require_socket("reading frame")
        try:
            return sock.recv(self.READ_CHUNK_SIZE)
        except socket.timeout as exc:
            raise TransportError(TransportStatus.TIMEOUT, "reading frame") from exc
        except OSError as exc:
            raise TransportError(TransportStatus.SOCKET_ERROR, "reading frame", str(exc)) from exc

    def _require_socket(self, context: str) -> socket.socket:
        if self._sock is None:
            raise TransportError(TransportStatus.CONNECTION_CLOSED, context)
        return self._sock
