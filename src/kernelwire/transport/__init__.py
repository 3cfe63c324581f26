"""Channel implementations.

:class:`~kernelwire.transport.base.Channel` is the interface the handler
consumes; :mod:`.memory` provides an in-process queue, :mod:`.zmq` adapts
pyzmq sockets.
"""

from .base import Channel, TransportError
from .memory import QueueChannel
