""" Send one command to an mqrpc service and print the reply.

    python ping.py examples.echo echo greeting=hello
"""

import argparse
import sys
import uuid

import mqrpc


def main():

    parser = argparse.ArgumentParser(description='Send a command to an mqrpc service.')
    parser.add_argument('service', help='queue name of the service')
    parser.add_argument('command', nargs='?', default='ping')
    parser.add_argument('params', nargs='*', help='NAME=VALUE parameters')
    parser.add_argument('--url', default=mqrpc.config.broker_url(), help='AMQP URL of the message broker')
    parser.add_argument('--timeout', type=float, default=None, help='seconds to wait for the reply')
    arguments = parser.parse_args()

    params = dict()
    for param in arguments.params:
        name, value = param.split('=', 1)
        params[name] = value

    request = mqrpc.Request(command=arguments.command, params=params)
    body = mqrpc.json.dumps(request)

    with mqrpc.RPCClient().connect(arguments.url) as client:
        reply = client.call(arguments.service, uuid.uuid4().hex, body, arguments.timeout)

    if reply is None:
        sys.exit('no reply')

    print(reply.decode())


if __name__ == '__main__':
    main()

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
