""" Concrete content classes for the kernel messaging protocol. Each class
    registers itself for its message type; adding support for a new message
    type is a matter of adding another class here (or anywhere else) with
    the :func:`register` decorator.
"""

from . import fields as f
from .message import Event, Field, Reply, Request, register


_text = (str,)
_bool = (bool,)
_int = (int,)
_dict = (dict,)
_list = (list,)


# Requests

@register
class ExecuteRequest(Request):
    """ Ask the kernel to run *code*.
    """

    msg_type = f.EXECUTE_REQUEST
    fields = (
        Field('silent', _bool, False),
        Field('code', _text),
        Field('store_history', _bool, True),
        Field('allow_stdin', _bool, True),
        Field('user_expressions', _dict, {}),
        Field('user_variables', _list, []),
        Field('stop_on_error', _bool, True),
    )


@register
class KernelInfoRequest(Request):
    msg_type = f.KERNEL_INFO_REQUEST


@register
class CompleteRequest(Request):
    msg_type = f.COMPLETE_REQUEST
    fields = (
        Field('code', _text),
        Field('cursor_pos', _int),
    )


@register
class InspectRequest(Request):
    msg_type = f.INSPECT_REQUEST
    fields = (
        Field('code', _text),
        Field('cursor_pos', _int),
        Field('detail_level', _int, 0),
    )


@register
class IsCompleteRequest(Request):
    msg_type = f.IS_COMPLETE_REQUEST
    fields = (
        Field('code', _text),
    )


@register
class ShutdownRequest(Request):
    msg_type = f.SHUTDOWN_REQUEST
    fields = (
        Field('restart', _bool, False),
    )


@register
class InputReply(Request):
    """ The front-end's answer to an :class:`InputRequest`, arriving on the
        stdin channel.
    """

    msg_type = f.INPUT_REPLY
    fields = (
        Field('value', _text),
    )


# Replies

@register
class ExecuteReply(Reply):
    """ The outcome of an :class:`ExecuteRequest`. The error fields are only
        meaningful when *status* is 'error'.
    """

    msg_type = f.EXECUTE_REPLY
    fields = (
        Field('status', _text, choices=f.EXECUTION_STATUSES),
        Field('execution_count', _int),
        Field('user_expressions', _dict, None),
        Field('payload', _list, None),
        Field('ename', _text, None),
        Field('evalue', _text, None),
        Field('traceback', _list, None),
    )

    def to_dict(self):
        data = Reply.to_dict(self)
        for key in ('user_expressions', 'payload', 'ename', 'evalue', 'traceback'):
            if data[key] is None:
                del data[key]
        return data


@register
class KernelInfoReply(Reply):
    msg_type = f.KERNEL_INFO_REPLY
    fields = (
        Field('status', _text, f.OK, choices=f.EXECUTION_STATUSES),
        Field('protocol_version', _text, f.PROTOCOL_VERSION),
        Field('implementation', _text, 'kernelwire'),
        Field('implementation_version', _text, ''),
        Field('language_info', _dict, {}),
        Field('banner', _text, ''),
    )


@register
class CompleteReply(Reply):
    msg_type = f.COMPLETE_REPLY
    fields = (
        Field('status', _text, f.OK, choices=f.EXECUTION_STATUSES),
        Field('matches', _list, []),
        Field('cursor_start', _int, 0),
        Field('cursor_end', _int, 0),
        Field('metadata', _dict, {}),
    )


@register
class InspectReply(Reply):
    msg_type = f.INSPECT_REPLY
    fields = (
        Field('status', _text, f.OK, choices=f.EXECUTION_STATUSES),
        Field('found', _bool, False),
        Field('data', _dict, {}),
        Field('metadata', _dict, {}),
    )


@register
class IsCompleteReply(Reply):
    msg_type = f.IS_COMPLETE_REPLY
    fields = (
        Field('status', _text, choices=('complete', 'incomplete', 'invalid', 'unknown', f.ERROR)),
        Field('indent', _text, ''),
    )


@register
class ShutdownReply(Reply):
    msg_type = f.SHUTDOWN_REPLY
    fields = (
        Field('status', _text, f.OK, choices=f.EXECUTION_STATUSES),
        Field('restart', _bool, False),
    )


# Events

@register
class Status(Event):
    msg_type = f.STATUS
    fields = (
        Field('execution_state', _text, choices=f.EXECUTION_STATES),
    )


@register
class Stream(Event):
    msg_type = f.STREAM
    fields = (
        Field('name', _text, choices=f.STREAM_NAMES),
        Field('text', _text),
    )


@register
class DisplayData(Event):
    """ Rich output. *data* maps mimetypes to payloads; the payloads are
        opaque here and are handed through as-is.
    """

    msg_type = f.DISPLAY_DATA
    fields = (
        Field('data', _dict),
        Field('metadata', _dict, {}),
        Field('transient', _dict, {}),
    )

    @classmethod
    def single(cls, mimetype, raw_data):
        """ Return a :class:`DisplayData` carrying exactly one mimetype.
        """

        return cls({mimetype: raw_data})


    @property
    def mimetype(self):
        """ The mimetype of a single-representation display, or None if
            there is more than one representation.
        """

        if len(self.data) == 1:
            for mimetype in self.data:
                return mimetype
        return None


@register
class ExecuteInput(Event):
    msg_type = f.EXECUTE_INPUT
    fields = (
        Field('code', _text),
        Field('execution_count', _int),
    )


@register
class ExecuteResult(Event):
    msg_type = f.EXECUTE_RESULT
    fields = (
        Field('execution_count', _int),
        Field('data', _dict),
        Field('metadata', _dict, {}),
    )


@register
class Error(Event):
    msg_type = f.ERROR
    fields = (
        Field('ename', _text),
        Field('evalue', _text),
        Field('traceback', _list, []),
    )


@register
class InputRequest(Event):
    msg_type = f.INPUT_REQUEST
    fields = (
        Field('prompt', _text, ''),
        Field('password', _bool, False),
    )


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
