"""Defines the contracts for framed transports and the openers producing them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Union

from pika.frame import Frame, ProtocolHeader

from ..connection_config import TlsParameters

OutboundFrame = Union[Frame, ProtocolHeader]


class ITransport(ABC):
    """An open byte stream to a broker that exchanges whole AMQP frames."""

    @abstractmethod
    def write_frame(self, frame_value: OutboundFrame) -> None:
        """Marshal and send a single frame."""

    @abstractmethod
    def read_frame(self) -> Union[Frame, ProtocolHeader]:
        """Block until one complete frame has been received and return it."""

    @abstractmethod
    def set_timeout(self, timeout: Optional[float]) -> None:
        """Bound blocking reads and writes; ``None`` blocks indefinitely."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying socket. Safe to call more than once."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether the underlying socket is still held."""


class ITransportOpener(ABC):
    """Produces open transports, optionally secured with TLS."""

    @property
    @abstractmethod
    def supports_tls(self) -> bool:
        """Whether ``open_secure`` can be used with this opener."""

    @abstractmethod
    def open(self, host: str, port: int, timeout: Optional[float] = None) -> ITransport:
        """Connect a plaintext transport."""

    @abstractmethod
    def open_secure(
        self, host: str, port: int, tls: TlsParameters, timeout: Optional[float] = None
    ) -> ITransport:
        """Connect a TLS transport configured from ``tls``."""
