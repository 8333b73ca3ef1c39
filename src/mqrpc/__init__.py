""" Python implementation of mqrpc, a small request/reply framework on top
    of a RabbitMQ message broker. This includes the server side, a
    :class:`Service` dispatching named commands to handlers, and the client
    side, an :class:`RPCClient` waiting for correlated replies.
"""

# Utility components.

from . import json
from . import log
from . import config

# Submodules used by multiple other components.

from . import protocol
from . import transport

# Primary public-facing interfaces.

from .service import CommandRunner, Service, run_mode_name
from .client import RPCClient
from .polling import FetchError, PollingService
from .protocol import Request, Version

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
