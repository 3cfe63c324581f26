"""The kernel communication handler.

Turns the frames arriving on a channel into verified :class:`Message`
instances, and messages into signed frames. On the wire a message is::

    <identity>* <IDS|MSG> <signature> <header> <parent_header> <metadata> <content>

Any number of routing identities precede the delimiter; exactly five frames
follow it. The signature covers the four JSON frames and nothing else.
"""

from __future__ import annotations

import logging
import threading
import weakref
from typing import Any, List, Optional

from . import json
from .config import ConnectionProfile
from .display import DisplayDataPublisher, PublisherCell
from .protocol.errors import DecodeError, EncodeError, FramingError, TransportError
from .protocol.fields import DELIMITER
from .protocol.message import Content, Event, Header, Message, new_id
from .protocol.sign import Signer
from .transport.base import Channel


logger = logging.getLogger(__name__)

_FIXED_FRAMES = ('signature', 'header', 'parent_header', 'metadata', 'content')


def _decode_json(frame: bytes, part: str) -> Any:
    try:
        return json.loads(frame)
    except json.decode_errors as exc:
        raise DecodeError(f"{part} is not valid JSON: {exc}") from exc


def _encode_json(value: Any, part: str) -> bytes:
    try:
        return json.dumps(value)
    except json.encode_errors as exc:
        raise EncodeError(f"{part} cannot be encoded as JSON: {exc}") from exc


class KernelCommunicationHandler:
    """Send and receive kernel messages over any :class:`Channel`.

    The handler holds no per-connection state: each :meth:`receive` and
    :meth:`send` is a complete transaction. It does keep one lock per
    channel for each direction, so that frames from concurrent sends never
    interleave on the same channel.
    """

    def __init__(
        self,
        publish_channel: Channel,
        shell_channel: Channel,
        profile: ConnectionProfile,
        username: str,
        stdin_channel: Optional[Channel] = None,
        control_channel: Optional[Channel] = None,
    ):
        self.publish_channel = publish_channel
        self.shell_channel = shell_channel
        self.stdin_channel = stdin_channel
        self.control_channel = control_channel
        self.profile = profile
        self.username = username

        # Raises UnsupportedSchemeError for an unusable scheme.
        self.signer = Signer.from_profile(profile)

        # Identifies messages this kernel originates on its own.
        self.session = new_id()

        self._send_locks = weakref.WeakKeyDictionary()
        self._receive_locks = weakref.WeakKeyDictionary()
        self._locks_lock = threading.Lock()

        self._display = PublisherCell()

    # --- locking ---

    def _lock_for(self, locks: weakref.WeakKeyDictionary, channel: Channel) -> threading.Lock:
        # A lock lives exactly as long as its channel.
        with self._locks_lock:
            lock = locks.get(channel)
            if lock is None:
                lock = threading.Lock()
                locks[channel] = lock
            return lock

    # --- receive ---

    def receive(self, channel: Channel) -> Message:
        """Read, verify and decode the next message on *channel*.

        Raises :class:`FramingError`, :class:`SignatureError`,
        :class:`DecodeError` or :class:`TransportError`; the signature is
        always checked before any JSON is decoded.
        """

        with self._lock_for(self._receive_locks, channel):
            identities, signature, frames = self._read_frames(channel)

        self.signer.verify(signature, frames)

        header_frame, parent_frame, metadata_frame, content_frame = frames

        header = Header.from_dict(_decode_json(header_frame, 'header'))
        if not header.msg_type:
            raise DecodeError('header has no msg_type')

        parent_header = Header.from_dict(_decode_json(parent_frame, 'parent_header'))

        metadata = _decode_json(metadata_frame, 'metadata')
        if metadata is None:
            metadata = Message.empty_metadata()
        elif not isinstance(metadata, dict):
            raise DecodeError('metadata must be a JSON object, not ' + type(metadata).__name__)

        content = Content.decode(header.msg_type, _decode_json(content_frame, 'content'))

        return Message(identities, header, parent_header, metadata, content)

    def _read_frames(self, channel: Channel):
        identities: List[bytes] = []
        fixed: List[bytes] = []

        # A failure on the first frame belongs to the channel; once a
        # message has started, running out of frames is a framing error.
        frame = channel.receive()

        try:
            while frame != DELIMITER:
                identities.append(frame)
                if channel.more is False:
                    raise FramingError(f"delimiter not found after {len(identities)} frames")
                frame = channel.receive()

            for part in _FIXED_FRAMES:
                if channel.more is False:
                    raise FramingError(f"message ended before its {part} frame")
                fixed.append(channel.receive())

        except TransportError as exc:
            where = _FIXED_FRAMES[len(fixed)] if frame == DELIMITER else 'delimiter'
            raise FramingError(f"message ended before its {where} frame: {exc}") from exc

        # Binary buffers may trail the content; they are not used here, but
        # they must not be mistaken for the start of the next message.
        trailing = 0
        while channel.more:
            channel.receive()
            trailing += 1

        if trailing:
            logger.debug("discarded %d trailing frames", trailing)

        return identities, fixed[0], fixed[1:]

    # --- send ---

    def send(self, channel: Channel, message: Message) -> None:
        """Sign and write *message* to *channel*.

        Raises :class:`EncodeError` if a part cannot be serialized, or
        :class:`TransportError` if the channel fails.
        """

        content = message.content
        if content is None:
            raise EncodeError('message has no content')

        frames = [
            _encode_json(message.header.to_dict(), 'header'),
            _encode_json(message.parent_header.to_dict(), 'parent_header'),
            _encode_json(dict(message.metadata), 'metadata'),
            _encode_json(content.to_dict(), 'content'),
        ]

        signature = self.signer.sign(frames).encode()

        parts = list(message.identities)
        parts.append(DELIMITER)
        parts.append(signature)
        parts.extend(frames)

        last = len(parts) - 1

        with self._lock_for(self._send_locks, channel):
            for index, part in enumerate(parts):
                channel.send(part, more=index < last)

    # --- message construction ---

    def reply_header(self, parent: Header, msg_type: str, username: Optional[str] = None) -> Header:
        """A new header answering *parent*: same session, new message id."""

        if username is None:
            username = self.username

        session = parent.session or self.session
        return Header.new(msg_type, username, session)

    def reply(self, request: Message, content: Content, metadata: Optional[dict] = None) -> Message:
        """Build the reply to *request*, routed back to its sender."""

        header = self.reply_header(request.header, content.msg_type)
        return Message(request.identities, header, request.header, metadata, content)

    def publish(self, content: Event, parent: Optional[Header] = None) -> Message:
        """Send *content* on the publish channel and return the message."""

        if parent is None or parent.is_empty:
            header = Header.new(content.msg_type, self.username, self.session)
            parent = Header()
        else:
            header = self.reply_header(parent, content.msg_type)

        topic = f"kernel.{self.session}.{content.msg_type}".encode()
        message = Message((topic,), header, parent, None, content)
        self.send(self.publish_channel, message)
        return message

    # --- display ---

    @property
    def display_data_publisher(self) -> DisplayDataPublisher:
        return self._display.get()

    def set_display_data_publisher(self, publisher: Optional[DisplayDataPublisher]) -> DisplayDataPublisher:
        """Replace the display publisher; None installs a no-op publisher.
        The previous publisher is returned."""
        return self._display.set(publisher)

    def show(self, value: Any) -> None:
        """Publish the text/plain rendering of *value*."""
        self._display.show(value)

    def show_html(self, markup: str) -> None:
        """Publish *markup* as text/html, unmodified."""
        self._display.show_html(markup)
