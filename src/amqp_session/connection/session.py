"""Negotiated session state handed to the channel layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from amqp_session.contracts import ITransport


@dataclass(frozen=True)
class AmqpSession:
    """Everything a channel layer needs from an opened connection."""

    transport: ITransport
    server_properties: Dict[str, Any] = field(default_factory=dict)
    channel_max: int = 0
    frame_max: int = 0
    heartbeat: int = 0
    known_hosts: str = ""

    @property
    def server_capabilities(self) -> Dict[str, Any]:
        capabilities = self.server_properties.get("capabilities")
        return dict(capabilities) if isinstance(capabilities, dict) else {}
