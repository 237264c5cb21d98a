"""Login handshake: client properties, negotiation, reply classification."""

from .broker_version import extract_broker_version, format_broker_version
from .client_properties import CLIENT_CAPABILITIES, build_client_properties
from .handshake_reply import (
    HandshakeReply,
    LibraryFaultReply,
    NegotiatedTune,
    NormalReply,
    ServerFaultReply,
    UnexpectedReply,
)
from .login_negotiator import LoginNegotiator, LoginState
from .reply_classifier import classify_reply

__all__ = [
    "CLIENT_CAPABILITIES",
    "HandshakeReply",
    "LibraryFaultReply",
    "LoginNegotiator",
    "LoginState",
    "NegotiatedTune",
    "NormalReply",
    "ServerFaultReply",
    "UnexpectedReply",
    "build_client_properties",
    "classify_reply",
    "extract_broker_version",
    "format_broker_version",
]
