"""Fixtures for end-to-end connection tests against an in-process fake broker."""

import socket
import threading
from typing import Any, Dict, List, Optional

import pytest
from pika import frame as pika_frame
from pika import spec


class FakeBroker:
    """Speaks the broker side of the AMQP login handshake on a loopback socket."""

    def __init__(
        self,
        server_properties: Optional[Dict[str, Any]] = None,
        tune: tuple = (2047, 131072, 60),
        refuse_open: Optional[tuple] = None,
        drop_after_start_ok: bool = False,
        raw_start: Optional[bytes] = None,
    ) -> None:
        self.server_properties = server_properties if server_properties is not None else {}
        self.tune = tune
        self.refuse_open = refuse_open
        self.drop_after_start_ok = drop_after_start_ok
        self.raw_start = raw_start
        self.received: List[Any] = []
        self.protocol_header: Optional[pika_frame.ProtocolHeader] = None
        self.client_disconnected = False
        self.error: Optional[BaseException] = None

        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._listener.bind(("127.0.0.1", 0))
        self._listener.listen(1)
        self._listener.settimeout(5)
        self.port = self._listener.getsockname()[1]
        self._buffer = b""
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def start(self) -> "FakeBroker":
        self._thread.start()
        return self

    def stop(self) -> None:
        self._thread.join(timeout=5)
        self._listener.close()

    def received_method(self, method_class):
        return next(method for method in self.received if isinstance(method, method_class))

    def _serve(self) -> None:
        try:
            conn, _ = self._listener.accept()
        except OSError as exc:
            self.error = exc
            return
        with conn:
            conn.settimeout(5)
            try:
                self._handshake(conn)
            except OSError as exc:
                self.error = exc

    def _handshake(self, conn: socket.socket) -> None:
        self.protocol_header = self._read_frame(conn)
        if self.raw_start is not None:
            conn.sendall(self.raw_start)
            self.client_disconnected = self._read_frame(conn) is None
            return

        self._send(
            conn,
            spec.Connection.Start(
                server_properties=self.server_properties, mechanisms="PLAIN AMQPLAIN"
            ),
        )
        self._read_method(conn)
        if self.drop_after_start_ok:
            return

        self._send(conn, spec.Connection.Tune(*self.tune))
        self._read_method(conn)
        self._read_method(conn)

        if self.refuse_open is not None:
            reply_code, reply_text = self.refuse_open
            self._send(conn, spec.Connection.Close(reply_code, reply_text, 10, 40))
            self._read_method(conn)
            self.client_disconnected = self._read_frame(conn) is None
            return

        self._send(conn, spec.Connection.OpenOk())
        if self._read_method(conn) is not None:
            self._send(conn, spec.Connection.CloseOk())
        self.client_disconnected = self._read_frame(conn) is None

    def _send(self, conn: socket.socket, method: Any) -> None:
        conn.sendall(pika_frame.Method(0, method).marshal())

    def _read_method(self, conn: socket.socket) -> Any:
        frame_value = self._read_frame(conn)
        if frame_value is None:
            return None
        self.received.append(frame_value.method)
        return frame_value.method

    def _read_frame(self, conn: socket.socket) -> Any:
        while True:
            consumed, frame_value = pika_frame.decode_frame(self._buffer)
            if frame_value is not None:
                self._buffer = self._buffer[consumed:]
                return frame_value
            chunk = conn.recv(4096)
            if not chunk:
                return None
            self._buffer += chunk


@pytest.fixture
def fake_broker():
    brokers: List[FakeBroker] = []

    def start(**kwargs: Any) -> FakeBroker:
        broker = FakeBroker(**kwargs).start()
        brokers.append(broker)
        return broker

    yield start

    for broker in brokers:
        broker.stop()


@pytest.fixture
def unused_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port
