"""In-process channel backed by a queue of multipart messages."""

from __future__ import annotations

import queue
import threading
from typing import Iterable, List, Optional, Tuple, Union

from .base import Channel, TransportError


Frame = Union[bytes, str]

_closed = object()


def _as_bytes(frame: Frame) -> bytes:
    try:
        return frame.encode()
    except AttributeError:
        return bytes(frame)


class QueueChannel(Channel):
    """A :class:`Channel` that never leaves the process.

    Inbound multipart messages are queued whole with :meth:`feed`;
    :meth:`receive` hands their frames out one at a time and blocks when
    none are left. Outbound frames accumulate in :attr:`sent`, and every
    completed multipart message is appended to :attr:`messages`.

    :ivar timeout: Seconds :meth:`receive` waits for a new message before
        raising :class:`TransportError`; None waits forever.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout
        self.sent: List[bytes] = []
        self.messages: List[Tuple[bytes, ...]] = []

        self._inbound = queue.Queue()
        self._current: List[bytes] = []
        self._partial: List[bytes] = []
        self._lock = threading.Lock()
        self._closed = False

    def feed(self, frames: Iterable[Frame]) -> None:
        """Queue one inbound multipart message."""
        self._inbound.put([_as_bytes(frame) for frame in frames])

    def receive(self) -> bytes:
        if not self._current:
            try:
                message = self._inbound.get(timeout=self.timeout)
            except queue.Empty:
                raise TransportError('no message received in %s sec' % (self.timeout,)) from None

            if message is _closed:
                # Leave the marker in place for any other reader.
                self._inbound.put(_closed)
                raise TransportError('channel is closed')

            self._current = message

            if not self._current:
                raise TransportError('received an empty message')

        return self._current.pop(0)

    @property
    def more(self) -> bool:
        return bool(self._current)

    def send(self, frame: Frame, more: bool = False) -> None:
        if self._closed:
            raise TransportError('channel is closed')

        frame = _as_bytes(frame)

        with self._lock:
            self.sent.append(frame)
            self._partial.append(frame)
            if not more:
                self.messages.append(tuple(self._partial))
                self._partial = []

    def hang_up(self) -> None:
        """End the inbound side: once every queued message has been read,
        :meth:`receive` raises :class:`TransportError`. Sending still works."""
        self._inbound.put(_closed)

    def close(self) -> None:
        self._closed = True
        self.hang_up()

    def loopback(self, other: QueueChannel) -> None:
        """Feed every complete message sent on this channel so far into
        *other*, then forget them."""

        with self._lock:
            messages = self.messages
            self.messages = []

        for message in messages:
            other.feed(message)
