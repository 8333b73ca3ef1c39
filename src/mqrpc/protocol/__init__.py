from . import fields
from . import message

from .message import ProtocolError, Request, Version, error_body, parse_request


"""
mqrpc Protocol Layer
====================

Structures carried in broker message bodies, independent of any broker
session implementation.

Request (client -> service)
    JSON object, content type application/json:

        {"Cmd": "<command>", "Params": {"<name>": "<string value>", ...}}

    "Params" may be omitted. A body that does not decode to this shape is
    answered with an error reply in the "Message dispatcher" context.

Reply (service -> client)
    Routed to the request's reply-to queue and tagged with the request's
    correlation id. The body is chosen by the command handler:

        ping    empty body
        info    {"Subsystem": ..., "Name": ..., "Description": ...,
                 "Version": ..., "Date": ...}
        error   {"error": "<message>", "context": "<context>"}

The protocol layer MUST NOT depend on a broker session implementation.
"""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
