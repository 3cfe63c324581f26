"""The kernel's channel loops.

A :class:`Kernel` owns nothing but a :class:`KernelCommunicationHandler`
and an :class:`Engine`. One thread serves the shell channel and another the
control channel; each blocks in :meth:`KernelCommunicationHandler.receive`,
dispatches the request it gets, and goes back to waiting. Output produced
while a request runs goes out on the publish channel, concurrently with the
shell traffic.
"""

from __future__ import annotations

import logging
import sys
import threading
import traceback
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from . import display
from .display import IOPubPublisher, render_text
from .handler import KernelCommunicationHandler
from .protocol import fields
from .protocol.content import (
    CompleteReply,
    Error,
    ExecuteInput,
    ExecuteReply,
    ExecuteResult,
    InspectReply,
    IsCompleteReply,
    KernelInfoReply,
    ShutdownReply,
    Status,
)
from .protocol.errors import DecodeError, FramingError, SignatureError, TransportError
from .protocol.message import Message, Request, content_class
from .transport.base import Channel


logger = logging.getLogger(__name__)


def _error_fields():
    """The name, message and formatted traceback of the exception being
    handled."""

    e_class, e_instance, e_tb = sys.exc_info()
    ename = getattr(e_class, '__name__', 'Exception')
    lines = traceback.format_exception(e_class, e_instance, e_tb)
    return ename, str(e_instance), lines


class Engine(ABC):
    """The language engine a kernel drives. Only :meth:`execute` is
    required; the other hooks have harmless defaults."""

    language_info: Dict[str, Any] = {}
    banner = ''

    @abstractmethod
    def execute(self, code: str) -> Any:
        """Run *code* and return its value, or raise."""

    def complete(self, code: str, cursor_pos: int) -> Dict[str, Any]:
        return dict(matches=[], cursor_start=cursor_pos, cursor_end=cursor_pos)

    def inspect(self, code: str, cursor_pos: int, detail_level: int = 0) -> Optional[Dict[str, Any]]:
        """Return a mimetype -> payload mapping, or None if nothing found."""
        return None

    def is_complete(self, code: str) -> str:
        return 'unknown'


class Kernel:
    """Serve requests arriving through *handler* using *engine*.

    :ivar execution_count: Number of executions stored in history so far.
    """

    def __init__(self, handler: KernelCommunicationHandler, engine: Engine):
        self.handler = handler
        self.engine = engine
        self.execution_count = 0

        self.shutdown = threading.Event()
        self.threads: List[threading.Thread] = []

        # Shell and control both dispatch execute_request.
        self._execute_lock = threading.Lock()

        self.handlers: Dict[str, Callable[[Channel, Message], None]] = {
            fields.KERNEL_INFO_REQUEST: self.kernel_info_request,
            fields.EXECUTE_REQUEST: self.execute_request,
            fields.COMPLETE_REQUEST: self.complete_request,
            fields.INSPECT_REQUEST: self.inspect_request,
            fields.IS_COMPLETE_REQUEST: self.is_complete_request,
            fields.SHUTDOWN_REQUEST: self.shutdown_request,
        }

    # --- lifecycle ---

    def start(self) -> None:
        """Announce the kernel and serve shell and control on daemon
        threads."""

        self.handler.publish(Status(fields.STARTING))

        channels = [(fields.SHELL, self.handler.shell_channel)]
        if self.handler.control_channel is not None:
            channels.append((fields.CONTROL, self.handler.control_channel))

        for name, channel in channels:
            thread = threading.Thread(target=self.serve, args=(channel,), name=f"kernel-{name}", daemon=True)
            thread.start()
            self.threads.append(thread)

    def stop(self) -> None:
        """Ask the loops to finish. A loop blocked in receive only notices
        once that call returns, so callers that need a prompt exit also
        close the channels."""
        self.shutdown.set()

    def join(self, timeout: Optional[float] = None) -> None:
        for thread in self.threads:
            thread.join(timeout)

    # --- loop ---

    def serve(self, channel: Channel) -> None:
        """Receive and handle requests on *channel* until shutdown is
        requested or the channel fails."""

        while not self.shutdown.is_set():
            try:
                message = self.handler.receive(channel)
            except (FramingError, SignatureError, DecodeError) as exc:
                logger.warning("rejected message (%s): %s", exc.reason, exc)
                continue
            except TransportError as exc:
                if not self.shutdown.is_set():
                    logger.info("channel closed, leaving loop: %s", exc)
                break

            try:
                self.handle(channel, message)
            except TransportError as exc:
                logger.error("cannot answer %s, leaving loop: %s", message.msg_type, exc)
                break

    def handle(self, channel: Channel, message: Message) -> None:
        """Dispatch one request, bracketed by busy and idle status."""

        if not isinstance(message.content, Request):
            logger.warning("ignoring %s: not a request", message.msg_type)
            return

        handler = self.handlers.get(message.msg_type)
        if handler is None:
            logger.warning("no handler for %s", message.msg_type)
            return

        parent = message.header
        self.handler.publish(Status(fields.BUSY), parent)
        try:
            handler(channel, message)
        except TransportError:
            raise
        except Exception:
            logger.exception("failed to handle %s", message.msg_type)
            self.error_reply(channel, message)
        finally:
            self.handler.publish(Status(fields.IDLE), parent)

    def error_reply(self, channel: Channel, message: Message) -> None:
        """Answer *message* with an error status for the exception being
        handled, so the front-end is not left waiting for its reply."""

        ename, evalue, lines = _error_fields()
        msg_type = message.msg_type[:-len('_request')] + '_reply'

        try:
            reply_class = content_class(msg_type)
            if reply_class is ExecuteReply:
                content = ExecuteReply(fields.ERROR, self.execution_count, ename=ename, evalue=evalue, traceback=lines)
            else:
                content = reply_class(status=fields.ERROR, extra=dict(ename=ename, evalue=evalue, traceback=lines))
            self.handler.send(channel, self.handler.reply(message, content))
        except TransportError:
            raise
        except Exception:
            logger.exception("cannot send error reply to %s", message.msg_type)

    # --- request handlers ---

    def kernel_info_request(self, channel: Channel, message: Message) -> None:
        content = KernelInfoReply(language_info=dict(self.engine.language_info), banner=self.engine.banner)
        self.handler.send(channel, self.handler.reply(message, content))

    def execute_request(self, channel: Channel, message: Message) -> None:
        with self._execute_lock:
            self._execute(channel, message)

    def _execute(self, channel: Channel, message: Message) -> None:
        request = message.content
        parent = message.header
        silent = request.silent

        if request.store_history and not silent:
            self.execution_count += 1
        count = self.execution_count

        if not silent:
            self.handler.publish(ExecuteInput(request.code, count), parent)

        publisher = IOPubPublisher(self.handler, parent)
        previous_handler = self.handler.set_display_data_publisher(publisher)
        previous_module = display.set_publisher(publisher)

        try:
            value = self.engine.execute(request.code)
        except Exception:
            ename, evalue, lines = _error_fields()
            logger.debug("execution %d failed", count, exc_info=True)

            self.handler.publish(Error(ename, evalue, lines), parent)
            reply = ExecuteReply(fields.ERROR, count, ename=ename, evalue=evalue, traceback=lines)
        else:
            if value is not None and not silent:
                data = {fields.TEXT_PLAIN: render_text(value)}
                self.handler.publish(ExecuteResult(count, data), parent)
            reply = ExecuteReply(fields.OK, count, user_expressions={}, payload=[])
        finally:
            self.handler.set_display_data_publisher(previous_handler)
            display.set_publisher(previous_module)

        self.handler.send(channel, self.handler.reply(message, reply))

    def complete_request(self, channel: Channel, message: Message) -> None:
        request = message.content
        result = self.engine.complete(request.code, request.cursor_pos)
        self.handler.send(channel, self.handler.reply(message, CompleteReply(**result)))

    def inspect_request(self, channel: Channel, message: Message) -> None:
        request = message.content
        data = self.engine.inspect(request.code, request.cursor_pos, request.detail_level)
        if data:
            content = InspectReply(found=True, data=dict(data))
        else:
            content = InspectReply()
        self.handler.send(channel, self.handler.reply(message, content))

    def is_complete_request(self, channel: Channel, message: Message) -> None:
        status = self.engine.is_complete(message.content.code)
        self.handler.send(channel, self.handler.reply(message, IsCompleteReply(status)))

    def shutdown_request(self, channel: Channel, message: Message) -> None:
        restart = message.content.restart
        self.handler.send(channel, self.handler.reply(message, ShutdownReply(restart=restart)))
        self.stop()
