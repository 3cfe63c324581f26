""" Python implementation of the communication layer of an interactive
    computation kernel: message framing, signing, and the channel handler
    that turns frames into typed messages and back.
"""

# Utility components.

from . import json

# Submodules used by multiple other components.

from . import protocol
from . import config
from . import transport

# Primary public-facing interfaces.

from .config import ConnectionProfile
from .handler import KernelCommunicationHandler
from .kernel import Engine, Kernel
from . import display
from .display import show, show_html

from .protocol import (
    CommunicationError,
    DecodeError,
    EncodeError,
    FramingError,
    SignatureError,
    TransportError,
    UnknownMessageTypeError,
    UnsupportedSchemeError,
    Header,
    Message,
    Signer,
    DELIMITER,
)

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
