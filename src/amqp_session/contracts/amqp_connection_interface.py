"""Defines the contract for an established AMQP connection."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import TYPE_CHECKING, Optional, Type

if TYPE_CHECKING:
    from ..connection.session import AmqpSession


class IAmqpConnection(ABC):
    """Represents a logged-in AMQP connection that a channel layer can build on."""

    @property
    @abstractmethod
    def broker_version(self) -> int:
        """Broker version packed as ``major << 16 | minor << 8 | patch``."""

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether the connection is logged in and not yet closed."""

    @property
    @abstractmethod
    def session(self) -> AmqpSession:
        """Negotiated session state needed to open channels."""

    @abstractmethod
    def close(self) -> None:
        """Close the connection and release the transport."""

    @abstractmethod
    def __enter__(self) -> IAmqpConnection:
        """Enter a managed connection context."""

    @abstractmethod
    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Exit a managed connection context."""
