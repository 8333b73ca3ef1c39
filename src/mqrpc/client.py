""" The client side of mqrpc: publish a command to a service queue and block
    until the reply with the matching correlation id arrives.
"""

import logging

from . import transport
from .protocol import fields
from .transport.base import deadline, remaining


logger = logging.getLogger(__name__)


class RPCClient:
    """ Issue requests through the message broker and receive the replies on
        an exclusive, broker-named reply queue owned by this instance.

        Replies are matched by discarding every delivery whose correlation id
        does not match the one being awaited. A reply queue can therefore
        only serve one outstanding request at a time: :func:`request` refuses
        to publish while an earlier request has not been awaited. Use one
        :class:`RPCClient` per concurrent conversation.
    """

    def __init__(self, connector=None):

        if connector is None:
            connector = transport.connect

        self.connector = connector
        self.session = None
        self.queue = None

        self._replies = None
        self._outstanding = None


    def connect(self, url):
        """ Connect to the broker at *url*, declare the reply queue, and start
            consuming from it right away.
        """

        try:
            session = self.connector(url)
        except transport.TransportError as e:
            logger.error('Failed to connect to the message broker: %s', e)
            raise

        try:
            self.queue = session.declare_queue('', exclusive=True, auto_delete=True, durable=False)
            self._replies = session.consume(self.queue, auto_ack=True)
        except transport.TransportError as e:
            logger.error('Failed to set up the reply queue: %s', e)
            session.close()
            raise

        self.session = session
        return self


    def close(self):
        """ Release the session; the broker deletes the reply queue.
        """

        if self.session is not None:
            self.session.close()
            self.session = None


    def __enter__(self):
        return self


    def __exit__(self, *exc):
        self.close()


    def request(self, service, correlation_id, body):
        """ Publish *body* to the queue named *service*. Replies to this
            request will carry *correlation_id*, which the caller chooses.
        """

        if self.session is None:
            raise RuntimeError('client is not connected')

        if self._outstanding is not None:
            raise RuntimeError("request '%s' is still awaiting its reply" % (self._outstanding))

        self.session.publish(
            service,
            body,
            correlation_id=correlation_id,
            reply_to=self.queue,
            content_type=fields.CONTENT_TYPE,
        )

        self._outstanding = correlation_id


    def await_reply(self, correlation_id, timeout=None):
        """ Return the body of the reply carrying *correlation_id*. Replies
            for any other correlation id are discarded. Without a *timeout*
            this blocks for as long as it takes; with one, a
            :class:`mqrpc.transport.TransportTimeout` is raised when it
            expires. Returns None if the session closes first.
        """

        if self._replies is None:
            raise RuntimeError('client is not connected')

        expires = deadline(timeout)

        try:
            while True:
                delivery = self._replies.get(timeout=remaining(expires))

                if delivery is None:
                    return None

                if delivery.correlation_id == correlation_id:
                    logger.debug('%s', delivery.body.decode(errors='replace'))
                    return delivery.body

                logger.debug('Discarding reply for %s', delivery.correlation_id)
        finally:
            if self._outstanding == correlation_id:
                self._outstanding = None


    def call(self, service, correlation_id, body, timeout=None):
        """ Send a request and wait for its reply.
        """

        self.request(service, correlation_id, body)
        return self.await_reply(correlation_id, timeout)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
