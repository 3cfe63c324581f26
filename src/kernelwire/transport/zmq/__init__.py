"""ZeroMQ channel adapter."""

from .channel import SocketChannel, open_channels, socket_types
