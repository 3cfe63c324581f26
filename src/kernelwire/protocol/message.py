""" A class representation of a kernel message: the :class:`Header` that
    identifies it, the :class:`Message` envelope that carries it, and the
    :class:`Content` base class that every typed payload derives from.

    The concrete content classes live in :mod:`kernelwire.protocol.content`;
    they register themselves here, keyed on their message type, and
    :func:`Content.decode` uses that registry to turn a JSON object into the
    right class once the header has told us what we are looking at.
"""

import datetime
import threading
import uuid

from .errors import DecodeError, UnknownMessageTypeError
from .fields import PROTOCOL_VERSION


class Header:
    """ The :class:`Header` identifies a single message. A header with no
        fields set is the *empty* header; it stands in for the parent of a
        message that was not caused by any other message, and it is encoded
        on the wire as an empty JSON object.

        :ivar msg_id: Unique identifier for this message.
        :ivar username: The user that originated the message.
        :ivar session: Identifier shared by every message of one session.
        :ivar msg_type: The message type tag, for example 'execute_request'.
        :ivar date: ISO 8601 timestamp of message creation.
        :ivar version: The messaging protocol version.
    """

    keys = ('msg_id', 'username', 'session', 'msg_type', 'date', 'version')

    def __init__(self, msg_id=None, username=None, session=None, msg_type=None, date=None, version=None):

        self.msg_id = msg_id
        self.username = username
        self.session = session
        self.msg_type = msg_type
        self.date = date
        self.version = version


    @classmethod
    def new(cls, msg_type, username, session=None):
        """ Return a freshly stamped header. A new *session* identifier is
            generated if one is not provided; the message identifier is
            always new.
        """

        if session is None:
            session = new_id()

        date = datetime.datetime.now(datetime.timezone.utc).isoformat()
        return cls(new_id(), username, session, msg_type, date, PROTOCOL_VERSION)


    @classmethod
    def from_dict(cls, fields):
        """ Build a :class:`Header` from a decoded JSON object. Keys outside
            the known set are ignored; an empty object yields the empty
            header.
        """

        if not isinstance(fields, dict):
            raise DecodeError('header must be a JSON object, not ' + type(fields).__name__)

        arguments = dict()
        for key in cls.keys:
            value = fields.get(key)
            if value is not None and not isinstance(value, str):
                raise DecodeError('header field %s must be a string: %r' % (key, value))
            arguments[key] = value

        return cls(**arguments)


    def to_dict(self):
        """ Return the JSON-ready representation. Unset fields are omitted,
            which is what makes the empty header encode as ``{}``.
        """

        fields = dict()
        for key in self.keys:
            value = getattr(self, key)
            if value is not None:
                fields[key] = value
        return fields


    @property
    def is_empty(self):
        for key in self.keys:
            if getattr(self, key) is not None:
                return False
        return True


    def __eq__(self, other):
        if not isinstance(other, Header):
            return NotImplemented
        return self.to_dict() == other.to_dict()


    def __repr__(self):
        return 'Header(%r)' % (self.to_dict(),)


# end of class Header



class Message:
    """ The envelope for everything that crosses a channel. The parts are in
        the same order as on the wire: routing *identities*, the *header*,
        the *parent_header*, the *metadata* mapping, and the typed *content*.

        The identities are opaque routing tokens; they are never inspected,
        only carried along so that a reply can be routed back to whoever
        sent the request.
    """

    def __init__(self, identities, header, parent_header=None, metadata=None, content=None):

        if identities is None:
            identities = ()

        encoded = list()
        for identity in identities:
            try:
                identity = identity.encode()
            except AttributeError:
                # Assume it is already bytes.
                pass
            encoded.append(identity)

        if parent_header is None:
            parent_header = Header()

        if metadata is None:
            metadata = self.empty_metadata()

        self.identities = tuple(encoded)
        self.header = header
        self.parent_header = parent_header
        self.metadata = dict(metadata)
        self.content = content


    @staticmethod
    def empty_metadata():
        return dict()


    @property
    def msg_type(self):
        return self.header.msg_type


    def __eq__(self, other):
        if not isinstance(other, Message):
            return NotImplemented

        return (self.identities == other.identities and
                self.header == other.header and
                self.parent_header == other.parent_header and
                self.metadata == other.metadata and
                self.content == other.content)


    def __repr__(self):
        return 'Message(%r, %r, %r, %r, %r)' % (self.identities, self.header, self.parent_header, self.metadata, self.content)


# end of class Message



REQUIRED = object()


class Field:
    """ Describe one key of a content object: the *name* used on the wire,
        the acceptable Python *types* after JSON decoding, an optional
        *default*, and an optional set of *choices* for enumerated strings.
        A field without a default is required.
    """

    def __init__(self, name, types, default=REQUIRED, choices=None):
        self.name = name
        self.types = types
        self.default = default
        self.choices = choices


    @property
    def required(self):
        return self.default is REQUIRED


    def initial(self):
        """ Return a fresh copy of the default value; mutable defaults must
            not be shared between instances.
        """

        default = self.default
        if isinstance(default, (dict, list)):
            default = type(default)(default)
        return default


    def check(self, value):

        if value is None and self.default is None:
            return

        # JSON true/false decode to bool, which is also an int.
        if isinstance(value, bool) and bool not in self.types:
            raise DecodeError('field %s has unexpected type bool' % (self.name))

        if not isinstance(value, self.types):
            raise DecodeError('field %s has unexpected type %s' % (self.name, type(value).__name__))

        if self.choices is not None and value not in self.choices:
            raise DecodeError('field %s must be one of %s, not %r' % (self.name, ', '.join(self.choices), value))


# end of class Field



_registry = dict()
_registry_lock = threading.Lock()


def register(cls):
    """ Class decorator: make *cls* the content class for its message type.
        Registering a second class for the same type replaces the first.
    """

    msg_type = cls.msg_type
    if not msg_type:
        raise ValueError('content class %s has no msg_type' % (cls.__name__))

    with _registry_lock:
        _registry[msg_type] = cls

    return cls


def content_class(msg_type):
    """ Return the registered content class for *msg_type*, or raise
        :class:`UnknownMessageTypeError`.
    """

    try:
        return _registry[msg_type]
    except KeyError:
        raise UnknownMessageTypeError(msg_type) from None


def known_types():
    return frozenset(_registry)


class Content:
    """ Base class for all message payloads. Subclasses declare a
        ``msg_type`` and an ordered ``fields`` list of :class:`Field`
        descriptions; positional and keyword arguments to the constructor
        follow that order. Keys that arrive on the wire without a matching
        field are kept in :attr:`extra` and written back out on encode.
    """

    msg_type = None
    fields = ()

    def __init__(self, *args, **kwargs):

        if len(args) > len(self.fields):
            raise TypeError('%s takes at most %d arguments' % (type(self).__name__, len(self.fields)))

        extra = kwargs.pop('extra', None)
        values = dict(zip((field.name for field in self.fields), args))

        for key in kwargs:
            if key in values:
                raise TypeError('%s got multiple values for %s' % (type(self).__name__, key))
        values.update(kwargs)

        for field in self.fields:
            try:
                value = values.pop(field.name)
            except KeyError:
                if field.required:
                    raise TypeError('%s missing required field %s' % (type(self).__name__, field.name)) from None
                value = field.initial()

            setattr(self, field.name, value)

        if values:
            raise TypeError('%s got unexpected fields: %s' % (type(self).__name__, ', '.join(sorted(values))))

        self.extra = dict(extra) if extra else dict()


    @classmethod
    def from_dict(cls, data):
        """ Validate a decoded JSON object against this class's fields and
            return a new instance.
        """

        if not isinstance(data, dict):
            raise DecodeError('%s content must be a JSON object, not %s' % (cls.msg_type, type(data).__name__))

        data = dict(data)
        values = dict()

        for field in cls.fields:
            try:
                value = data.pop(field.name)
            except KeyError:
                if field.required:
                    raise DecodeError('%s content is missing %s' % (cls.msg_type, field.name)) from None
                continue

            field.check(value)
            values[field.name] = value

        return cls(extra=data, **values)


    @staticmethod
    def decode(msg_type, data):
        """ Decode *data* as the content class registered for *msg_type*.
        """

        cls = content_class(msg_type)
        return cls.from_dict(data)


    def to_dict(self):

        data = dict(self.extra)
        for field in self.fields:
            data[field.name] = getattr(self, field.name)
        return data


    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.to_dict() == other.to_dict()


    def __repr__(self):
        return '%s(%r)' % (type(self).__name__, self.to_dict())


# end of class Content



class Request(Content):
    """ Content sent by a front-end to the kernel. """


class Reply(Content):
    """ Content sent by the kernel in answer to a :class:`Request`. """


class Event(Content):
    """ Content the kernel emits on its own, typically on iopub. """


def new_id():
    """ Return a new globally unique identifier string.
    """

    return str(uuid.uuid4())


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
