import threading
import time

import kernelwire
import pytest

from kernelwire.protocol import content, fields
from kernelwire.transport import QueueChannel


class Calculator(kernelwire.Engine):
    """ An engine that evaluates Python expressions, and lets the test
        reach back into the display machinery while it runs.
    """

    language_info = {'name': 'python', 'mimetype': 'text/x-python'}
    banner = 'calculator'

    def __init__(self):
        self.namespace = {'show': kernelwire.show, 'show_html': kernelwire.show_html}

    def execute(self, code):
        return eval(code, self.namespace)

    def complete(self, code, cursor_pos):
        matches = [name for name in self.namespace if name.startswith(code[:cursor_pos])]
        return dict(matches=matches, cursor_start=0, cursor_end=cursor_pos)


def submit(handler, channel, body, identities=(b'frontend',)):
    """ Put a request on *channel* the way a front-end would, and return
        the header it was sent with.
    """

    header = kernelwire.Header.new(body.msg_type, 'frontend')
    wire = QueueChannel()
    handler.send(wire, kernelwire.Message(identities, header, None, None, body))
    wire.loopback(channel)
    return header


def drain(handler, channel):
    """ Decode every complete message sent on *channel* so far.
    """

    count = len(channel.messages)
    reader = QueueChannel(timeout=1)
    channel.loopback(reader)
    return [handler.receive(reader) for number in range(count)]


@pytest.fixture
def kernel(signed_handler):
    return kernelwire.Kernel(signed_handler, Calculator())


def serve_until_closed(kernel, channel):
    channel.hang_up()
    kernel.serve(channel)


def test_execute(kernel, signed_handler, shell_channel, publish_channel):

    header = submit(signed_handler, shell_channel, content.ExecuteRequest(code='6 * 7'))
    serve_until_closed(kernel, shell_channel)

    replies = drain(signed_handler, shell_channel)
    assert len(replies) == 1

    reply = replies[0]
    assert reply.identities == (b'frontend',)
    assert reply.parent_header == header
    assert reply.content.status == fields.OK
    assert reply.content.execution_count == 1

    published = drain(signed_handler, publish_channel)
    types = [message.msg_type for message in published]
    assert types == [fields.STATUS, fields.EXECUTE_INPUT, fields.EXECUTE_RESULT, fields.STATUS]

    assert published[0].content.execution_state == fields.BUSY
    assert published[-1].content.execution_state == fields.IDLE
    assert published[2].content.data == {'text/plain': '42'}

    for message in published:
        assert message.parent_header == header


def test_execution_count(kernel, signed_handler, shell_channel):

    submit(signed_handler, shell_channel, content.ExecuteRequest(code='1'))
    submit(signed_handler, shell_channel, content.ExecuteRequest(code='2', store_history=False))
    submit(signed_handler, shell_channel, content.ExecuteRequest(code='3'))
    serve_until_closed(kernel, shell_channel)

    counts = [reply.content.execution_count for reply in drain(signed_handler, shell_channel)]
    assert counts == [1, 1, 2]


def test_silent(kernel, signed_handler, shell_channel, publish_channel):

    submit(signed_handler, shell_channel, content.ExecuteRequest(code='1 + 1', silent=True))
    serve_until_closed(kernel, shell_channel)

    reply = drain(signed_handler, shell_channel)[0]
    assert reply.content.status == fields.OK
    assert reply.content.execution_count == 0

    types = [message.msg_type for message in drain(signed_handler, publish_channel)]
    assert types == [fields.STATUS, fields.STATUS]


def test_execute_error(kernel, signed_handler, shell_channel, publish_channel):

    submit(signed_handler, shell_channel, content.ExecuteRequest(code='1 / 0'))
    serve_until_closed(kernel, shell_channel)

    reply = drain(signed_handler, shell_channel)[0]
    assert reply.content.status == fields.ERROR
    assert reply.content.ename == 'ZeroDivisionError'
    assert reply.content.traceback

    published = drain(signed_handler, publish_channel)
    errors = [message for message in published if message.msg_type == fields.ERROR]
    assert len(errors) == 1
    assert errors[0].content.ename == 'ZeroDivisionError'
    assert published[-1].content.execution_state == fields.IDLE


def test_display_during_execution(kernel, signed_handler, shell_channel, publish_channel):

    header = submit(signed_handler, shell_channel, content.ExecuteRequest(code="show_html('<i>hi</i>')"))
    serve_until_closed(kernel, shell_channel)

    published = drain(signed_handler, publish_channel)
    displays = [message for message in published if message.msg_type == fields.DISPLAY_DATA]

    assert len(displays) == 1
    assert displays[0].content.data == {'text/html': '<i>hi</i>'}
    assert displays[0].parent_header == header

    # The publisher installed for the execution is gone afterwards.
    assert isinstance(kernelwire.display.get_publisher(), kernelwire.display.NullPublisher)
    assert isinstance(signed_handler.display_data_publisher, kernelwire.display.NullPublisher)


def test_bad_message_does_not_stop_the_loop(kernel, signed_handler, shell_channel, request_frames):

    # Unsigned, so rejected by the signed handler.
    shell_channel.feed(request_frames('1'))
    # Not even framed.
    shell_channel.feed([b'just one frame'])
    submit(signed_handler, shell_channel, content.ExecuteRequest(code='2'))
    serve_until_closed(kernel, shell_channel)

    replies = drain(signed_handler, shell_channel)
    assert len(replies) == 1
    assert replies[0].content.status == fields.OK


def test_unknown_type_does_not_stop_the_loop(handler, shell_channel, request_frames):

    kernel = kernelwire.Kernel(handler, Calculator())

    shell_channel.feed(request_frames(msg_type='frobnicate_request', content={}))
    shell_channel.feed(request_frames('3'))
    serve_until_closed(kernel, shell_channel)

    replies = drain(handler, shell_channel)
    assert len(replies) == 1
    assert replies[0].msg_type == fields.EXECUTE_REPLY


def test_non_request_ignored(kernel, signed_handler, shell_channel, publish_channel):

    submit(signed_handler, shell_channel, content.Status(fields.BUSY))
    serve_until_closed(kernel, shell_channel)

    assert shell_channel.messages == []
    assert publish_channel.messages == []


def test_kernel_info(kernel, signed_handler, shell_channel):

    submit(signed_handler, shell_channel, content.KernelInfoRequest())
    serve_until_closed(kernel, shell_channel)

    reply = drain(signed_handler, shell_channel)[0]
    assert isinstance(reply.content, content.KernelInfoReply)
    assert reply.content.language_info['name'] == 'python'
    assert reply.content.banner == 'calculator'
    assert reply.content.protocol_version == fields.PROTOCOL_VERSION


def test_complete_inspect_is_complete(kernel, signed_handler, shell_channel):

    submit(signed_handler, shell_channel, content.CompleteRequest('sh', 2))
    submit(signed_handler, shell_channel, content.InspectRequest('show', 4))
    submit(signed_handler, shell_channel, content.IsCompleteRequest('show('))
    serve_until_closed(kernel, shell_channel)

    complete, inspect, is_complete = drain(signed_handler, shell_channel)

    assert set(complete.content.matches) == {'show', 'show_html'}
    assert complete.content.cursor_end == 2
    assert inspect.content.found is False
    assert is_complete.content.status == 'unknown'


class Broken(Calculator):

    def complete(self, code, cursor_pos):
        raise RuntimeError('no completions today')

    def inspect(self, code, cursor_pos, detail_level=0):
        return 42


def test_failed_request_still_replies(signed_handler, shell_channel, publish_channel):

    kernel = kernelwire.Kernel(signed_handler, Broken())

    submit(signed_handler, shell_channel, content.CompleteRequest('sh', 2))
    submit(signed_handler, shell_channel, content.InspectRequest('x', 1))
    submit(signed_handler, shell_channel, content.ExecuteRequest(code='5'))
    serve_until_closed(kernel, shell_channel)

    complete, inspect, execute = drain(signed_handler, shell_channel)

    assert complete.msg_type == fields.COMPLETE_REPLY
    assert complete.content.status == fields.ERROR
    assert complete.content.extra['ename'] == 'RuntimeError'
    assert complete.content.extra['evalue'] == 'no completions today'
    assert complete.content.extra['traceback']

    assert inspect.msg_type == fields.INSPECT_REPLY
    assert inspect.content.status == fields.ERROR
    assert inspect.content.extra['ename'] == 'TypeError'

    assert execute.content.status == fields.OK

    states = [message.content.execution_state for message in drain(signed_handler, publish_channel)
              if message.msg_type == fields.STATUS]
    assert states.count(fields.BUSY) == states.count(fields.IDLE) == 3


class Sleeper(kernelwire.Engine):
    """ Keep track of how many executions are running at once.
    """

    def __init__(self):
        self.lock = threading.Lock()
        self.running = 0
        self.most = 0

    def execute(self, code):
        with self.lock:
            self.running += 1
            self.most = max(self.most, self.running)

        time.sleep(0.01)

        with self.lock:
            self.running -= 1


def test_shell_and_control_executions_do_not_overlap(signed_handler, shell_channel):

    engine = Sleeper()
    kernel = kernelwire.Kernel(signed_handler, engine)
    control_channel = QueueChannel(timeout=5)

    for number in range(5):
        submit(signed_handler, shell_channel, content.ExecuteRequest(code=str(number)))
        submit(signed_handler, control_channel, content.ExecuteRequest(code=str(number)))

    threads = list()
    for channel in (shell_channel, control_channel):
        thread = threading.Thread(target=serve_until_closed, args=(kernel, channel))
        threads.append(thread)
        thread.start()

    for thread in threads:
        thread.join(10)

    assert engine.most == 1

    replies = drain(signed_handler, shell_channel) + drain(signed_handler, control_channel)
    counts = sorted(reply.content.execution_count for reply in replies)
    assert counts == list(range(1, 11))


def test_shutdown(kernel, signed_handler, shell_channel):

    submit(signed_handler, shell_channel, content.ShutdownRequest(restart=False))
    submit(signed_handler, shell_channel, content.ExecuteRequest(code='1'))
    kernel.serve(shell_channel)

    assert kernel.shutdown.is_set()

    replies = drain(signed_handler, shell_channel)
    assert [reply.msg_type for reply in replies] == [fields.SHUTDOWN_REPLY]


def test_threaded(signed_handler, shell_channel, publish_channel):

    kernel = kernelwire.Kernel(signed_handler, Calculator())
    kernel.start()

    try:
        submit(signed_handler, shell_channel, content.ExecuteRequest(code='2 ** 10'))

        deadline = time.time() + 5
        while len(shell_channel.messages) < 1 and time.time() < deadline:
            time.sleep(0.01)
    finally:
        kernel.stop()
        shell_channel.close()
        kernel.join(5)

    reply = drain(signed_handler, shell_channel)[0]
    assert reply.content.status == fields.OK

    published = drain(signed_handler, publish_channel)
    assert published[0].content.execution_state == fields.STARTING
    assert published[0].parent_header.is_empty

    results = [message for message in published if message.msg_type == fields.EXECUTE_RESULT]
    assert results[0].content.data == {'text/plain': '1024'}


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
