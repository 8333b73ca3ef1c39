''' Thin wrapper around :mod:`msgspec` providing the equivalent of
    :func:`json.loads` and :func:`json.dumps`, plus typed decoding.
'''

import msgspec


# The msgspec 'encode' operation returns bytes; message bodies are bytes on
# the wire, so nothing here ever produces str.

encoder = msgspec.json.Encoder()
decoder = msgspec.json.Decoder()
dumps = encoder.encode
loads = decoder.decode

DecodeError = msgspec.DecodeError
ValidationError = msgspec.ValidationError


def decode(data, type):
    ''' Decode the JSON *data* directly into *type*, which may be anything
        msgspec understands: a :class:`msgspec.Struct` subclass, a typing
        construct such as ``Dict[str, str]``, or :class:`typing.Any`.
    '''

    return msgspec.json.decode(data, type=type)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
