import json
from typing import Dict, List

import pytest

import mqrpc


def test_json_encode_and_decode():
    encode_and_decode(json.dumps, json.loads, dump_is_bytes=False)


def test_mqrpc_encode_and_decode():
    encode_and_decode(mqrpc.json.dumps, mqrpc.json.loads)


def encode_and_decode(dumps, loads, dump_is_bytes=True):

    input_dictionary = dict()
    input_dictionary['list'] = [1, 2, 3, 'a', 'b', None, 'c', 'z']
    input_dictionary['dict'] = {'one': 1, 'two': 2}
    input_dictionary['none'] = None
    input_dictionary['true'] = True
    input_dictionary['false'] = False

    encoded = dumps(input_dictionary)

    if dump_is_bytes:
        assert isinstance(encoded, bytes)
    else:
        assert isinstance(encoded, str)

    decoded = loads(encoded)
    assert decoded == input_dictionary


def test_typed_decode():

    assert mqrpc.json.decode(b'{"a": "b"}', Dict[str, str]) == {'a': 'b'}
    assert mqrpc.json.decode('[1.5, 2]', List[float]) == [1.5, 2.0]

    with pytest.raises(mqrpc.json.DecodeError):
        mqrpc.json.decode(b'{"a": 1}', Dict[str, str])

    with pytest.raises(mqrpc.json.DecodeError):
        mqrpc.json.decode(b'{', Dict[str, str])


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
