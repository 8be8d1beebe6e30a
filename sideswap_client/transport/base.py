"""Transport contract consumed by the protocol client."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from .events import TransportEvent


class Transport(ABC):
    """A bidirectional message channel.

    `events()` yields `TransportConnected` once the channel is up, one
    `TransportFrame` per inbound message, and ends after a
    `TransportDisconnected` (optionally preceded by `TransportFailed`).
    """

    @abstractmethod
    async def connect(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def send(self, frame: bytes) -> None:
        """Send one frame; raises TransportClosedError when not connected."""
        raise NotImplementedError

    @abstractmethod
    def events(self) -> AsyncIterator[TransportEvent]:
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        raise NotImplementedError


__all__ = ["Transport"]
