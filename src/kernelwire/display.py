""" Display data publishing. Code running inside the kernel asks for a value
    to be shown; a :class:`DisplayDataPublisher` turns that into whatever the
    front-end understands. The handler and this module each hold a
    replaceable publisher, so the publisher can be swapped for every
    execution without rebuilding anything.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

from .protocol import fields
from .protocol.content import DisplayData


class DisplayDataPublisher(ABC):

    @abstractmethod
    def publish(self, mimetype: str, raw_data: Any) -> None:
        """Publish *raw_data* as *mimetype*. Raises
        :class:`~kernelwire.protocol.CommunicationError` if the underlying
        channel fails."""


class NullPublisher(DisplayDataPublisher):
    """Discard everything."""

    def publish(self, mimetype: str, raw_data: Any) -> None:
        pass


class RecordingPublisher(DisplayDataPublisher):
    """Remember everything that was published, most recent last."""

    def __init__(self):
        self.published: List[Tuple[str, Any]] = []
        self.mimetype: Optional[str] = None
        self.raw_data: Any = None

    def publish(self, mimetype: str, raw_data: Any) -> None:
        self.published.append((mimetype, raw_data))
        self.mimetype = mimetype
        self.raw_data = raw_data


class IOPubPublisher(DisplayDataPublisher):
    """Publish each display as a ``display_data`` message on the handler's
    publish channel, with *parent* as its parent header."""

    def __init__(self, handler, parent=None):
        self.handler = handler
        self.parent = parent

    def publish(self, mimetype: str, raw_data: Any) -> None:
        self.handler.publish(DisplayData.single(mimetype, raw_data), self.parent)


def render_text(value: Any) -> str:
    """The default textual form of any value; None renders as 'None'."""
    return repr(value)


class PublisherCell:
    """A lock-guarded holder for the current publisher."""

    def __init__(self, publisher: Optional[DisplayDataPublisher] = None):
        self._lock = threading.Lock()
        self._publisher: DisplayDataPublisher = publisher or NullPublisher()

    def get(self) -> DisplayDataPublisher:
        with self._lock:
            return self._publisher

    def set(self, publisher: Optional[DisplayDataPublisher]) -> DisplayDataPublisher:
        """Install *publisher* (None installs a :class:`NullPublisher`) and
        return the one it replaced."""

        if publisher is None:
            publisher = NullPublisher()

        with self._lock:
            previous = self._publisher
            self._publisher = publisher
        return previous

    def show(self, value: Any) -> None:
        self.get().publish(fields.TEXT_PLAIN, render_text(value))

    def show_html(self, markup: str) -> None:
        self.get().publish(fields.TEXT_HTML, markup)


# The process-wide publisher that executing code reaches through the
# module-level functions below.
_cell = PublisherCell()


def set_publisher(publisher: Optional[DisplayDataPublisher]) -> DisplayDataPublisher:
    return _cell.set(publisher)


def get_publisher() -> DisplayDataPublisher:
    return _cell.get()


def show(value: Any) -> None:
    """Publish the text/plain rendering of *value*."""
    _cell.show(value)


def show_html(markup: str) -> None:
    """Publish *markup* unmodified as text/html."""
    _cell.show_html(markup)
