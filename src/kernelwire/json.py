""" JSON codec for message frames. Every frame on the wire is bytes, so
    :func:`dumps` always returns bytes and :func:`loads` accepts bytes,
    bytearray, memoryview or str. The fastest codec that can be imported
    is used: msgspec, then orjson, then the standard library.

    :data:`decode_errors` and :data:`encode_errors` are tuples of the
    exception classes the selected codec raises, suitable for an
    ``except`` clause.
"""

backend = None

try:
    import msgspec
except ImportError:
    msgspec = None
else:
    backend = 'msgspec'

if backend is None:
    try:
        import orjson
    except ImportError:
        orjson = None
    else:
        backend = 'orjson'

if backend is None:
    import json as _stdlib
    backend = 'json'


if backend == 'msgspec':
    _encoder = msgspec.json.Encoder()
    _decoder = msgspec.json.Decoder()
    _dumps = _encoder.encode
    _loads = _decoder.decode
    decode_errors = (msgspec.DecodeError, ValueError)
    encode_errors = (msgspec.EncodeError, TypeError, ValueError)

elif backend == 'orjson':
    _dumps = orjson.dumps
    _loads = orjson.loads
    decode_errors = (orjson.JSONDecodeError, ValueError)
    encode_errors = (orjson.JSONEncodeError, TypeError)

else:
    def _dumps(value):
        # Match the compact output of the other two codecs.
        return _stdlib.dumps(value, separators=(',', ':')).encode()

    _loads = _stdlib.loads
    decode_errors = (ValueError,)
    encode_errors = (TypeError, ValueError)


def dumps(value) -> bytes:
    """Encode *value* as compact JSON bytes."""
    return _dumps(value)


def loads(frame):
    """Decode one JSON frame."""

    if isinstance(frame, memoryview):
        frame = frame.tobytes()
    elif isinstance(frame, bytearray):
        frame = bytes(frame)

    return _loads(frame)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
