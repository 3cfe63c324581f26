"""Protocol constants.

Keep these in one place to avoid stringly-typed message handling.
"""

# Separates routing identities from the signed part of a message. Both ends
# of a connection must agree on this exact value.
DELIMITER = b'<IDS|MSG>'

# Version of the kernel messaging protocol stamped into outgoing headers.
PROTOCOL_VERSION = '5.3'

DEFAULT_SIGNATURE_SCHEME = 'hmac-sha256'

# Channels
SHELL = 'shell'
IOPUB = 'iopub'
STDIN = 'stdin'
CONTROL = 'control'
HEARTBEAT = 'hb'

CHANNELS = (SHELL, IOPUB, STDIN, CONTROL, HEARTBEAT)

# Requests
EXECUTE_REQUEST = 'execute_request'
KERNEL_INFO_REQUEST = 'kernel_info_request'
COMPLETE_REQUEST = 'complete_request'
INSPECT_REQUEST = 'inspect_request'
IS_COMPLETE_REQUEST = 'is_complete_request'
SHUTDOWN_REQUEST = 'shutdown_request'
INPUT_REPLY = 'input_reply'

# Replies
EXECUTE_REPLY = 'execute_reply'
KERNEL_INFO_REPLY = 'kernel_info_reply'
COMPLETE_REPLY = 'complete_reply'
INSPECT_REPLY = 'inspect_reply'
IS_COMPLETE_REPLY = 'is_complete_reply'
SHUTDOWN_REPLY = 'shutdown_reply'

# Events
STATUS = 'status'
STREAM = 'stream'
DISPLAY_DATA = 'display_data'
EXECUTE_INPUT = 'execute_input'
EXECUTE_RESULT = 'execute_result'
ERROR = 'error'
INPUT_REQUEST = 'input_request'

# Execution status carried by replies.
OK = 'ok'
ABORT = 'abort'
EXECUTION_STATUSES = (OK, ERROR, ABORT)

# Kernel states carried by status events.
BUSY = 'busy'
IDLE = 'idle'
STARTING = 'starting'
EXECUTION_STATES = (BUSY, IDLE, STARTING)

STDOUT = 'stdout'
STDERR = 'stderr'
STREAM_NAMES = (STDOUT, STDERR)

TEXT_PLAIN = 'text/plain'
TEXT_HTML = 'text/html'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
