""" Logging conventions shared by every service.
"""

import logging


logger = logging.getLogger('mqrpc.command')

format = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def level(product):
    """ Production services log at INFO; anything else at DEBUG, which
        includes a record of every dispatched command.
    """

    if product:
        return logging.INFO
    return logging.DEBUG



def configure(product=False):
    logging.basicConfig(level=level(product), format=format)



def command(request):
    """ Record the command carried by *request*, with its arguments if it
        has any.
    """

    if len(request.params) == 0:
        logger.debug('%s()', request.command)
    else:
        logger.debug('%s() args=%s', request.command, request.params)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
