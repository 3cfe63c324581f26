import pytest
import uuid

import kernelwire
from kernelwire.protocol.content import ExecuteRequest
from kernelwire.transport import QueueChannel


def _make_profile(key='', scheme=None):
    return kernelwire.ConnectionProfile('', '', 1, 2, 3, 4, 5, key, scheme)


def _request_frames(code='a = 10;', identities=(b'id1',), msg_type='execute_request', content=None):
    """ Hand-build the frames of an unsigned request, the way a front-end
        would put them on the wire.
    """

    dumps = kernelwire.json.dumps
    header = kernelwire.Header(str(uuid.uuid4()), 'testuser', str(uuid.uuid4()), msg_type)

    if content is None:
        content = ExecuteRequest(False, code, True, False, {}, []).to_dict()

    frames = list(identities)
    frames.append(kernelwire.DELIMITER)
    frames.append(b'')
    frames.append(dumps(header.to_dict()))
    frames.append(dumps(kernelwire.Header().to_dict()))
    frames.append(dumps(dict()))
    frames.append(dumps(content))
    return frames


@pytest.fixture
def shell_channel():
    channel = QueueChannel(timeout=5)
    yield channel
    channel.close()


@pytest.fixture
def publish_channel():
    channel = QueueChannel(timeout=5)
    yield channel
    channel.close()


@pytest.fixture
def handler(publish_channel, shell_channel):
    return kernelwire.KernelCommunicationHandler(publish_channel, shell_channel, _make_profile(), 'testuser')


@pytest.fixture
def signed_handler(publish_channel, shell_channel):
    profile = _make_profile(str(uuid.uuid4()))
    return kernelwire.KernelCommunicationHandler(publish_channel, shell_channel, profile, 'testuser')




@pytest.fixture
def make_profile():
    return _make_profile


@pytest.fixture
def request_frames():
    return _request_frames


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
