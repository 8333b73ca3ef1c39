""" A minimal mqrpc service. In addition to the generic ``ping`` and
    ``info`` commands it answers ``echo``, returning its parameters, and
    ``sum``, adding up the numbers in the ``values`` parameter (a JSON list).
"""

import argparse
from typing import List

import mqrpc


version = mqrpc.Version(
    subsystem='examples',
    name='echo',
    description='Echo requests back to the caller.',
    version='0.1.0',
)


class Service(mqrpc.Service):

    def run_by_name(self, command, delivery):

        if command == 'echo':
            self.echo(delivery)
        elif command == 'sum':
            self.sum(delivery)
        else:
            self.run_common_command(command, delivery)


    def echo(self, delivery):
        self.answer(delivery, mqrpc.json.dumps(delivery.request.params))


    def sum(self, delivery):

        try:
            values = delivery.request.param_json('values', List[float])
        except mqrpc.protocol.ProtocolError as e:
            self.error_result(delivery, e, 'Sum parameters')
            return

        self.answer(delivery, mqrpc.json.dumps({'sum': sum(values)}))



def main():

    parser = argparse.ArgumentParser(description='Run the echo service.')
    parser.add_argument('--url', default=mqrpc.config.broker_url(), help='AMQP URL of the message broker')
    parser.add_argument('--queue', default='examples.echo', help='queue name of this service')
    parser.add_argument('--product', action='store_true', help='log at INFO instead of DEBUG')
    arguments = parser.parse_args()

    mqrpc.log.configure(arguments.product)

    service = Service(version=version)
    service.connect(arguments.url, arguments.queue)
    service.dispatch()


if __name__ == '__main__':
    main()

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
