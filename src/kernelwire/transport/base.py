"""Channel interface.

This is the (small) contract that a channel implementation must follow. It
lives outside :mod:`kernelwire.protocol` so the protocol remains
transport-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..protocol.errors import TransportError


class Channel(ABC):
    """One logical line of ordered, blocking, frame-oriented communication.

    Frames are bytes. A channel that can tell where one multipart message
    ends reports it through :attr:`more`; the handler uses that to detect
    truncated messages instead of blocking on the next one.
    """

    @abstractmethod
    def receive(self) -> bytes:
        """Block until the next frame arrives and return it."""

    @abstractmethod
    def send(self, frame: bytes, more: bool = False) -> None:
        """Send one frame. *more* is True for every frame of a multipart
        message except the last."""

    @property
    def more(self) -> Optional[bool]:
        """Whether the message currently being received has frames left,
        or None if the channel cannot tell."""
        return None

    def close(self) -> None:
        """Release any resources held by the channel."""


__all__ = ('Channel', 'TransportError')
