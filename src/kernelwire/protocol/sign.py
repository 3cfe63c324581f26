""" Message signing. A :class:`Signer` is either disabled, in which case
    every signature is the empty string and nothing is ever rejected, or
    enabled with a key and a hash algorithm, in which case it computes an
    HMAC over the four payload frames of a message: header, parent header,
    metadata and content, in that order. Routing identities and the
    delimiter are never signed.
"""

from __future__ import annotations

import hashlib
import hmac
import os
from typing import Iterable, Optional, Union

from .errors import SignatureError, UnsupportedSchemeError
from .fields import DEFAULT_SIGNATURE_SCHEME


Frame = Union[bytes, str]


def default_scheme() -> str:
    """Return the scheme used when a profile does not name one."""
    return os.environ.get('KERNELWIRE_SIGNATURE_SCHEME') or DEFAULT_SIGNATURE_SCHEME


def digest_name(scheme: str) -> str:
    """Map a signature scheme name to a :mod:`hashlib` algorithm name.

    Both the protocol's own spelling ('hmac-sha256') and the JCE-style
    spelling ('HmacSHA256') are accepted, as is a bare digest name.
    """

    name = scheme.strip().lower()
    if name.startswith('hmac-'):
        name = name[5:]
    elif name.startswith('hmac'):
        name = name[4:]

    name = name.replace('-', '').replace('_', '')
    if name.startswith('sha3'):
        name = 'sha3_' + name[4:]

    return name


def _as_bytes(frame: Frame) -> bytes:
    try:
        return frame.encode()
    except AttributeError:
        return frame


class Signer:

    def __init__(self, key: Optional[Frame] = None, scheme: Optional[str] = None):

        if key:
            if scheme is None:
                scheme = default_scheme()

            algorithm = digest_name(scheme)
            if algorithm not in hashlib.algorithms_available:
                raise UnsupportedSchemeError('unsupported signature scheme: ' + repr(scheme))

            try:
                hmac.new(b'probe', digestmod=algorithm).hexdigest()
            except (TypeError, ValueError) as exc:
                # Variable length digests (shake_*) cannot back an HMAC.
                raise UnsupportedSchemeError('unsupported signature scheme: ' + repr(scheme)) from exc

            self.key = _as_bytes(key)
            self.scheme = scheme
            self.algorithm = algorithm
        else:
            self.key = None
            self.scheme = None
            self.algorithm = None


    @classmethod
    def disabled(cls) -> Signer:
        return cls()


    @classmethod
    def from_profile(cls, profile) -> Signer:
        return cls(profile.key, profile.signature_scheme)


    @property
    def enabled(self) -> bool:
        return self.key is not None


    def sign(self, frames: Iterable[Frame]) -> str:
        """Return the lower-case hexadecimal signature of *frames*, or the
        empty string if signing is disabled.
        """

        if self.key is None:
            return ''

        mac = hmac.new(self.key, digestmod=self.algorithm)
        for frame in frames:
            mac.update(_as_bytes(frame))

        # The other end compares lower-case hex only.
        return mac.hexdigest().lower()


    def verify(self, signature: Frame, frames: Iterable[Frame]) -> None:
        """Raise :class:`SignatureError` unless *signature* matches *frames*.
        A disabled signer accepts any signature, including none at all.
        """

        if self.key is None:
            return

        expected = self.sign(frames).encode()
        signature = _as_bytes(signature)

        if not signature:
            raise SignatureError('message is not signed')

        if not hmac.compare_digest(expected, signature):
            raise SignatureError('invalid message signature')


    def __repr__(self):
        if self.key is None:
            return 'Signer(disabled)'
        return 'Signer(%s)' % (self.scheme,)


# end of class Signer


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
