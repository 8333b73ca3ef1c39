""" Services that periodically query an external HTTP resource. The
    :class:`PollingService` spaces its requests so that a remote server
    with a rate limit is never queried more often than allowed.
"""

import logging
import threading
import time
from typing import Any

import httpx

from . import json
from .service import Service


logger = logging.getLogger(__name__)


class FetchError(Exception):
    """ An external resource could not be retrieved or decoded.
    """
    pass



class PollingService(Service):
    """ A :class:`mqrpc.Service` with a throttled HTTP client. The *headers*
        dictionary is added to every request; *transport* is passed through
        to :class:`httpx.Client`, which is mostly of interest for testing.
        The remaining keyword arguments are handed to :class:`Service`.
    """

    def __init__(self, headers=None, transport=None, **kwargs):

        Service.__init__(self, **kwargs)

        if headers is None:
            headers = dict()

        self.headers = dict(headers)
        self.interval = 0.0
        self.next_query = None
        self._lock = threading.Lock()

        self.http = httpx.Client(headers=self.headers, transport=transport)


    def set_polling_frequency(self, interval):
        """ Require at least *interval* seconds between the completion of
            one fetch and the start of the next.
        """

        self.interval = float(interval)


    def fetch(self, url):
        """ Retrieve *url* and return the response body as bytes, waiting
            first if the previous fetch completed less than the polling
            interval ago. Concurrent callers take turns, so the interval
            holds across every handler of this service.
        """

        with self._lock:
            self._delay()

            try:
                response = self.http.get(url)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                logger.error('%s status=fail', url)
                raise FetchError('%s: %s' % (url, e)) from e

            self._reschedule()

        logger.debug('%s status=ok', url)
        return response.content

    load_resource = fetch


    def fetch_and_decode(self, url, type=Any):
        """ Retrieve *url* and decode the JSON body into *type*, which can be
            anything :func:`mqrpc.json.decode` accepts.
        """

        data = self.fetch(url)

        try:
            return json.decode(data, type)
        except json.DecodeError as e:
            raise FetchError('%s: %s' % (url, e)) from e

    load_and_decode = fetch_and_decode


    def test_resource(self, url):
        """ Query *url* outside of the polling cadence and return the
            :class:`httpx.Response`, for example to read its headers. This
            does not honor the polling interval and should not be used for
            routine queries.
        """

        return self.http.get(url)


    def cleanup(self):
        self.http.close()
        Service.cleanup(self)


    def _delay(self):

        if self.next_query is None:
            return

        delay = self.next_query - time.monotonic()
        if delay > 0:
            time.sleep(delay)


    def _reschedule(self):
        self.next_query = time.monotonic() + self.interval


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
