"""Broker version extraction from the ``Connection.Start`` server properties."""

from __future__ import annotations

from typing import Any, Mapping, Optional

VERSION_KEY = "version"


def extract_broker_version(server_properties: Optional[Mapping[Any, Any]]) -> int:
    """Return the broker version packed as ``major << 16 | minor << 8 | patch``.

    Returns ``0`` when no ``version`` property is advertised or it is not a
    three component numeric dotted string. Components above 255 are truncated
    to their low byte.
    """
    if not server_properties:
        return 0

    raw_version = None
    for key, value in server_properties.items():
        if _as_text(key) == VERSION_KEY:
            raw_version = value
            break
    if raw_version is None:
        return 0

    version = _as_text(raw_version)
    if version is None:
        return 0

    components = version.split(".")
    if len(components) != 3:
        return 0
    if not all(component.isascii() and component.isdigit() for component in components):
        return 0

    major, minor, patch = (int(component) for component in components)
    return (major & 0xFF) << 16 | (minor & 0xFF) << 8 | (patch & 0xFF)


def format_broker_version(packed: int) -> str:
    """Render a packed broker version as ``major.minor.patch``."""
    return f"{(packed >> 16) & 0xFF}.{(packed >> 8) & 0xFF}.{packed & 0xFF}"


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            return None
    return None
