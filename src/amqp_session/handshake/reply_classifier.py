"""Maps a handshake reply onto success or a typed error."""

from __future__ import annotations

from amqp_session.errors import LibraryFaultError, ProtocolError, UnexpectedReplyError

from .handshake_reply import (
    HandshakeReply,
    LibraryFaultReply,
    NormalReply,
    ServerFaultReply,
    UnexpectedReply,
)


def classify_reply(reply: HandshakeReply) -> NormalReply:
    """Return the reply if the handshake succeeded, otherwise raise.

    Anything that is not a recognised reply variant is treated as a broker
    rejection.
    """
    if isinstance(reply, NormalReply):
        return reply
    if isinstance(reply, LibraryFaultReply):
        raise LibraryFaultError(reply.status, reply.context, reply.detail)
    if isinstance(reply, ServerFaultReply):
        raise ProtocolError(reply.reply_code, reply.reply_text, reply.class_id, reply.method_id)
    if isinstance(reply, UnexpectedReply):
        raise UnexpectedReplyError(
            0, f"expected {reply.expected} during login, received {reply.received}"
        )
    raise ProtocolError(0, f"unrecognised handshake reply {reply!r}")
