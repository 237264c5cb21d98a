"""Client properties announced to the broker in ``Connection.StartOk``."""

from __future__ import annotations

from typing import Any, Dict, Tuple

# Capability flags understood by this client, in announcement order.
CLIENT_CAPABILITIES: Tuple[Tuple[str, bool], ...] = (
    ("consumer_cancel_notify", True),
)


def build_client_properties() -> Dict[str, Any]:
    """Return a fresh client-properties table.

    The table has a single ``capabilities`` entry holding the capability flags,
    e.g. ``consumer_cancel_notify`` tells the broker the client can handle
    broker-initiated ``Basic.Cancel``.
    """
    return {"capabilities": dict(CLIENT_CAPABILITIES)}
