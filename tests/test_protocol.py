import json
from typing import Any, Dict, List

import msgspec
import pytest

import mqrpc
from mqrpc.protocol import ProtocolError, Request, Version, error_body, parse_request


def test_parse_request():

    request = parse_request(b'{"Cmd":"tag","Params":{"path":"/music","force":"yes"}}')
    assert request.command == 'tag'
    assert request.params == {'path': '/music', 'force': 'yes'}

    request = parse_request(b'{"Cmd":"ping"}')
    assert request.command == 'ping'
    assert request.params == {}

    with pytest.raises(AttributeError):
        request.command = 'other'


def test_parse_malformed():

    for body in (b'', b'nonsense', b'[]', b'{}', b'{"Cmd": null}', b'{"Cmd": "x", "Params": {"n": 1}}'):
        with pytest.raises(ProtocolError):
            parse_request(body)


def test_field_names_are_exact():

    # Only the exact key spellings are recognized. A lower-case "cmd" is an
    # unknown field, ignored, which leaves the request without a command.

    for body in (b'{"cmd": "ping"}', b'{"CMD": "ping", "Params": {}}', b'{"Params": {}}'):
        with pytest.raises(ProtocolError):
            parse_request(body)

    request = parse_request(b'{"Cmd": "ping", "params": {"n": "1"}}')
    assert request.command == 'ping'
    assert request.params == {}


def test_encode_request():

    request = Request(command='tag', params={'path': '/music'})
    encoded = mqrpc.json.dumps(request)

    assert json.loads(encoded) == {'Cmd': 'tag', 'Params': {'path': '/music'}}


def test_param_json():

    release = {'title': 'Blue Train', 'year': 1957}
    request = Request(command='release', params={'release': json.dumps(release), 'broken': '{'})

    assert request.param_json('release') == release
    assert request.param_json('release', Dict[str, Any]) == release

    with pytest.raises(ProtocolError):
        request.param_json('absent')

    with pytest.raises(ProtocolError):
        request.param_json('broken')

    with pytest.raises(ProtocolError):
        request.param_json('release', List[int])


def test_error_body():

    body = error_body(ValueError('a "quoted" failure'), 'Message dispatcher')
    assert isinstance(body, bytes)

    decoded = json.loads(body)
    assert decoded == {'error': 'a "quoted" failure', 'context': 'Message dispatcher'}

    body = error_body('Unknown command: bogus', 'Message dispatcher')
    assert json.loads(body) == {'error': 'Unknown command: bogus', 'context': 'Message dispatcher'}


def test_version():

    version = Version(subsystem='audio', name='tagger', description='Tags releases.', version='1.2.3')
    decoded = json.loads(mqrpc.json.dumps(version))

    assert decoded == {
        'Subsystem': 'audio',
        'Name': 'tagger',
        'Description': 'Tags releases.',
        'Version': '1.2.3',
        'Date': '',
    }

    stamped = version.stamp(0)
    assert stamped.date != ''
    assert stamped.date.endswith('1970') or stamped.date.endswith('1969')
    assert stamped.name == 'tagger'
    assert version.date == ''

    assert msgspec.json.decode(mqrpc.json.dumps(stamped), type=Version) == stamped


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
