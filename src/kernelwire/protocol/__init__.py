"""
Kernel Messaging Protocol Layer
===============================

This package defines the transport-agnostic half of the kernel messaging
protocol: what a message is, how its content is typed, and how it is
signed. It does not know how frames move; see :mod:`kernelwire.transport`.

Layer Architecture Overview
---------------------------

Channel Handler (kernelwire.handler)
    Frames <-> Message, signing and verification, per-channel locking

    │
    ▼
Message Model (message.py, content.py)
    Header, Message envelope, Content variants
    Content classes register under their msg_type tag

    │
    ▼
Signing (sign.py)
    HMAC over header, parent header, metadata, content

    │
    ▼
Field Vocabulary (fields.py)
    Delimiter, message type tags, enumerated values

Errors raised by every layer live in errors.py and derive from
:class:`CommunicationError`.
"""

from .errors import (
    CommunicationError,
    DecodeError,
    EncodeError,
    FramingError,
    SignatureError,
    TransportError,
    UnknownMessageTypeError,
    UnsupportedSchemeError,
)
from .fields import DELIMITER, PROTOCOL_VERSION
from .message import Content, Event, Field, Header, Message, Reply, Request, content_class, known_types, register
from .sign import Signer

from . import content
from . import fields


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
