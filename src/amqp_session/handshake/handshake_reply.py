"""Outcome of a login handshake, modelled as a closed set of reply variants."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from amqp_session.errors import TransportStatus


@dataclass(frozen=True)
class NegotiatedTune:
    """Limits agreed with the broker during ``Connection.Tune``."""

    channel_max: int
    frame_max: int
    heartbeat: int = 0


@dataclass(frozen=True)
class NormalReply:
    """The broker accepted the login and opened the virtual host."""

    server_properties: Dict[str, Any]
    tune: NegotiatedTune
    known_hosts: str = ""


@dataclass(frozen=True)
class LibraryFaultReply:
    """A local or transport level failure; the socket should not be reused."""

    status: TransportStatus
    context: str
    detail: Optional[str] = None


@dataclass(frozen=True)
class ServerFaultReply:
    """The broker closed the connection with an AMQP exception."""

    reply_code: int
    reply_text: str
    class_id: int = 0
    method_id: int = 0


@dataclass(frozen=True)
class UnexpectedReply:
    """The broker sent something the handshake does not allow at this point."""

    received: str
    expected: str
    server_properties: Dict[str, Any] = field(default_factory=dict)


HandshakeReply = Union[NormalReply, LibraryFaultReply, ServerFaultReply, UnexpectedReply]
