"""Communication errors.

Every failure raised by the framing, signing and codec layers is a
:class:`CommunicationError`. The subclass says what went wrong; the
``reason`` attribute carries the same information as a plain string for
callers that prefer to switch on a tag rather than catch by class.
"""


class CommunicationError(Exception):
    """Base class for all kernel messaging errors."""

    reason = 'communication'


class FramingError(CommunicationError):
    """The delimiter or one of the fixed frames after it never arrived."""

    reason = 'framing'


class SignatureError(CommunicationError):
    """A signed message did not carry the signature we computed for it."""

    reason = 'signature'


class UnsupportedSchemeError(CommunicationError, ValueError):
    """The configured signature scheme is not available."""

    reason = 'scheme'


class DecodeError(CommunicationError):
    """A frame is not valid JSON, or does not fit the expected schema."""

    reason = 'decode'


class UnknownMessageTypeError(DecodeError):
    """The header names a message type with no registered content class."""

    def __init__(self, msg_type):
        DecodeError.__init__(self, 'unknown message type: ' + repr(msg_type))
        self.msg_type = msg_type


class EncodeError(DecodeError):
    """An outbound message could not be serialized as JSON."""


class TransportError(CommunicationError):
    """The underlying channel failed to deliver or accept a frame."""

    reason = 'transport'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
