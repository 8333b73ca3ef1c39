""" Class representations of the structures carried in message bodies:
    the command :class:`Request`, the service :class:`Version` record, and
    the error reply.
"""

import time as timemodule
from typing import Any, Dict

import msgspec
import msgspec.structs

from .. import json


class ProtocolError(ValueError):
    """ A message body or one of its parameters could not be interpreted.
    """
    pass



class Request(msgspec.Struct, frozen=True):
    """ A command invocation: the *command* name and its string-keyed
        *params*. On the wire this is a JSON object with the fields ``Cmd``
        and ``Params``; the latter may be omitted.
    """

    command: str = msgspec.field(name='Cmd')
    params: Dict[str, str] = msgspec.field(default_factory=dict, name='Params')


    def param_json(self, name, type=Any):
        """ Decode the parameter *name*, which is itself expected to hold a
            JSON document, into *type*. For example, a release description
            shipped as ``{"Params": {"release": "{...}"}}``.
        """

        try:
            raw = self.params[name]
        except KeyError:
            raise ProtocolError("parameter '%s' is absent" % (name))

        try:
            return json.decode(raw, type)
        except json.DecodeError as e:
            raise ProtocolError("parameter '%s': %s" % (name, e)) from e



class Version(msgspec.Struct, rename='pascal'):
    """ Static identity of a running service. The *date* is filled in when
        the version is queried, see :func:`stamp`.
    """

    subsystem: str = ''
    name: str = ''
    description: str = ''
    version: str = ''
    date: str = ''


    def stamp(self, timestamp):
        """ Return a copy of this :class:`Version` with the *date* set from
            the UNIX epoch *timestamp*, using the classic ``date(1)`` layout.
        """

        local = timemodule.localtime(timestamp)
        date = timemodule.strftime('%a %b %e %H:%M:%S %Z %Y', local)
        return msgspec.structs.replace(self, date=date)



def parse_request(body):
    """ Interpret the raw message *body* as a :class:`Request`. Raises
        :class:`ProtocolError` if the body is not a JSON object of the
        expected shape.
    """

    try:
        return json.decode(body, Request)
    except json.DecodeError as e:
        raise ProtocolError(str(e)) from e



def error_body(error, context):
    """ Return the encoded error reply for the exception (or string) *error*
        raised while doing *context*.
    """

    return json.dumps({'error': str(error), 'context': context})


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
