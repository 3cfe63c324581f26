"""Adapt a pyzmq socket to the :class:`Channel` interface.

A kernel binds one socket per channel:

    shell, control, stdin   ROUTER (identities prefix every request)
    iopub                   PUB    (the first frame is the topic)

Multipart boundaries come from ZeroMQ itself: a frame is followed by more
frames of the same message when RCVMORE is set, and outbound frames are
chained with SNDMORE.
"""

from __future__ import annotations

import atexit
import logging
from typing import Dict, Optional

import zmq

from ...protocol import fields
from ..base import Channel, TransportError


logger = logging.getLogger(__name__)

zmq_context = zmq.Context()

socket_types = {
    fields.SHELL: zmq.ROUTER,
    fields.IOPUB: zmq.PUB,
    fields.STDIN: zmq.ROUTER,
    fields.CONTROL: zmq.ROUTER,
}


class SocketChannel(Channel):
    """A :class:`Channel` over a single ZeroMQ socket."""

    def __init__(self, socket: zmq.Socket, name: Optional[str] = None):
        self.socket = socket
        self.name = name

    def receive(self) -> bytes:
        try:
            return self.socket.recv()
        except zmq.ZMQError as exc:
            raise TransportError(f"{self.name or 'socket'} receive failed: {exc}") from exc

    @property
    def more(self) -> bool:
        try:
            return bool(self.socket.getsockopt(zmq.RCVMORE))
        except zmq.ZMQError as exc:
            raise TransportError(f"{self.name or 'socket'} is unusable: {exc}") from exc

    def send(self, frame: bytes, more: bool = False) -> None:
        flags = zmq.SNDMORE if more else 0
        try:
            self.socket.send(frame, flags)
        except zmq.ZMQError as exc:
            raise TransportError(f"{self.name or 'socket'} send failed: {exc}") from exc

    def close(self) -> None:
        self.socket.close(linger=0)

    def __repr__(self):
        return f"SocketChannel({self.name!r})"


def open_channels(profile, context: Optional[zmq.Context] = None) -> Dict[str, SocketChannel]:
    """Bind one socket per channel at the addresses in *profile*."""

    if context is None:
        context = zmq_context

    channels: Dict[str, SocketChannel] = {}

    for name, socket_type in socket_types.items():
        url = profile.url(name)
        socket = context.socket(socket_type)
        socket.setsockopt(zmq.LINGER, 0)

        try:
            socket.bind(url)
        except zmq.ZMQError as exc:
            socket.close()
            for channel in channels.values():
                channel.close()
            raise TransportError(f"cannot bind {name} channel to {url}: {exc}") from exc

        logger.debug("bound %s channel to %s", name, url)
        channels[name] = SocketChannel(socket, name)

    return channels


def _cleanup() -> None:
    zmq_context.destroy(linger=0)


atexit.register(_cleanup)
