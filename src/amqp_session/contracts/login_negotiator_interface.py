"""Defines the contract for the AMQP login handshake."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict

from ..connection_config import ConnectionParameters
from .transport_interface import ITransport

if TYPE_CHECKING:
    from ..handshake.handshake_reply import HandshakeReply


class ILoginNegotiator(ABC):
    """Drives the login handshake over an already opened transport."""

    @abstractmethod
    def login(
        self,
        transport: ITransport,
        parameters: ConnectionParameters,
        client_properties: Dict[str, Any],
    ) -> HandshakeReply:
        """Perform the handshake and return exactly one reply variant."""
