""" Connection configuration. A kernel is handed a connection file when it
    is launched; the file names the address, one port per channel, and the
    key and scheme used to sign messages. :class:`ConnectionProfile` is the
    parsed, read-only form of that file.
"""

from . import json
from .protocol import fields


class ConnectionProfile:
    """ An immutable description of where the kernel's channels live and how
        its messages are signed. An empty *key* disables signing; a
        *signature_scheme* of None selects the default scheme.
    """

    __slots__ = ('transport', 'ip', 'shell_port', 'iopub_port', 'stdin_port',
                 'control_port', 'hb_port', 'key', 'signature_scheme')

    def __init__(self, transport, ip, shell_port, iopub_port, stdin_port, control_port, hb_port, key='', signature_scheme=None):

        if not transport:
            transport = 'tcp'

        if key is None:
            key = ''

        values = dict(transport=transport, ip=ip,
                      shell_port=int(shell_port), iopub_port=int(iopub_port),
                      stdin_port=int(stdin_port), control_port=int(control_port),
                      hb_port=int(hb_port), key=key, signature_scheme=signature_scheme)

        for name, value in values.items():
            object.__setattr__(self, name, value)


    def __setattr__(self, name, value):
        raise AttributeError('ConnectionProfile is read-only')


    def __delattr__(self, name):
        raise AttributeError('ConnectionProfile is read-only')


    @classmethod
    def from_dict(cls, info):
        """ Build a profile from the keys of a standard connection file.
        """

        try:
            return cls(info.get('transport', 'tcp'), info['ip'],
                       info['shell_port'], info['iopub_port'], info['stdin_port'],
                       info['control_port'], info['hb_port'],
                       info.get('key', ''), info.get('signature_scheme'))
        except KeyError as exc:
            raise ValueError('connection info is missing ' + str(exc)) from None


    @classmethod
    def from_file(cls, path):

        with open(path, 'rb') as file:
            raw = file.read()

        return cls.from_dict(json.loads(raw))


    def to_dict(self):
        return {name: getattr(self, name) for name in self.__slots__}


    @property
    def ports(self):
        ports = dict()
        ports[fields.SHELL] = self.shell_port
        ports[fields.IOPUB] = self.iopub_port
        ports[fields.STDIN] = self.stdin_port
        ports[fields.CONTROL] = self.control_port
        ports[fields.HEARTBEAT] = self.hb_port
        return ports


    def url(self, channel):
        """ Return the ZeroMQ-style address for the named *channel*.
        """

        port = self.ports[channel]
        return '%s://%s:%d' % (self.transport, self.ip, port)


    def __eq__(self, other):
        if not isinstance(other, ConnectionProfile):
            return NotImplemented
        return self.to_dict() == other.to_dict()


    def __hash__(self):
        return hash(tuple(self.to_dict().items()))


    def __repr__(self):
        # Never echo the signing key.
        shown = self.to_dict()
        if shown['key']:
            shown['key'] = '...'
        return 'ConnectionProfile(%r)' % (shown,)


# end of class ConnectionProfile


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
