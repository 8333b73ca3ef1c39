""" The server side of mqrpc: a :class:`Service` consumes command requests
    from a named broker queue, hands each one to a :class:`CommandRunner`,
    and publishes the reply to the queue the requester asked for.
"""

import concurrent.futures
import enum
import logging
import os
import signal
import sys
import threading

from . import json
from . import log
from . import protocol
from . import transport
from .protocol import fields


logger = logging.getLogger(__name__)


class State(enum.Enum):
    DISCONNECTED = 'disconnected'
    CONNECTED = 'connected'
    DISPATCHING = 'dispatching'
    SHUTTING_DOWN = 'shutting down'
    CLOSED = 'closed'



class CommandRunner:
    """ The per-service set of command handlers invoked by the dispatcher.
        A runner answers every delivery it is given exactly once, typically
        via :func:`Service.answer` or :func:`Service.error_result`, and owns
        a broker session that :func:`cleanup` must close.
    """

    def run_by_name(self, command, delivery):
        raise NotImplementedError('subclasses must implement run_by_name()')


    def cleanup(self):
        raise NotImplementedError('subclasses must implement cleanup()')



class Service(CommandRunner):
    """ The mqrpc :class:`Service` is the common machinery for a microservice
        reachable through the message broker: it owns the broker session,
        runs the dispatch loop, and implements the generic commands
        (``ping`` and ``info``) and the error reply protocol.

        The developer is expected to subclass :class:`Service` and override
        :func:`run_by_name` to handle the service-specific commands, falling
        back to :func:`run_common_command` for anything else. A bare
        :class:`Service` is itself a working :class:`CommandRunner` that
        answers only the generic commands.

        If *workers* is specified, commands are executed by a bounded pool of
        that many threads; otherwise every command gets a thread of its own.
        The *version*, if any, is the :class:`mqrpc.protocol.Version` record
        returned for ``info``.
    """

    # The process exits with this status when interrupted.
    exit_status = 1

    def __init__(self, workers=None, version=None, connector=None):

        if connector is None:
            connector = transport.connect

        self.connector = connector
        self.name = None
        self.session = None
        self.state = State.DISCONNECTED
        self.version = version
        self.executable = None
        self.idle = False

        self._deliveries = None
        self._interrupted = threading.Event()
        self._thread = None

        if workers is None:
            self.workers = None
        else:
            self.workers = concurrent.futures.ThreadPoolExecutor(max_workers=workers)


    def connect(self, url, name):
        """ Connect to the broker at *url* and begin consuming from the queue
            *name*, the address of this service. Any transport failure is
            logged and raised; it is fatal to the service.
        """

        self._transition(State.DISCONNECTED, State.CONNECTED)

        try:
            session = self.connector(url)
        except transport.TransportError as e:
            logger.error('Failed to connect to the message broker: %s', e)
            self.state = State.DISCONNECTED
            raise

        try:
            queue = session.declare_queue(name, exclusive=False, auto_delete=False, durable=False)
            session.set_prefetch(1)
            self._deliveries = session.consume(queue, auto_ack=False)
        except transport.TransportError as e:
            logger.error("Failed to set up queue '%s': %s", name, e)
            session.close()
            self.state = State.DISCONNECTED
            raise

        self.session = session
        self.name = name


    def close(self):
        """ Release the broker session.
        """

        if self.state != State.SHUTTING_DOWN:
            self.state = State.CLOSED

        if self.session is not None:
            self.session.close()


    def cleanup(self):
        self.close()
        print('\nstopped')


    @property
    def deliveries(self):
        """ The sequence of inbound deliveries for this service's queue.
        """

        return self._deliveries


    def dispatch(self, runner=None):
        """ Run the dispatch loop for *runner* (by default, this service)
            until the process is interrupted, then clean up and exit. This
            call does not return.

            The exit is immediate: commands still executing are abandoned,
            including any held by a worker pool, whose threads would
            otherwise be joined by the interpreter on the way out.
        """

        for signum in (signal.SIGINT, signal.SIGTERM):
            signal.signal(signum, self._on_signal)

        self.start(runner)
        logger.info('Awaiting RPC requests')

        self._interrupted.wait()
        self._stop(runner)

        sys.stdout.flush()
        sys.stderr.flush()
        logging.shutdown()
        os._exit(self.exit_status)


    def start(self, runner=None):
        """ Start the dispatch loop for *runner* on a background thread and
            return immediately.
        """

        if runner is None:
            runner = self

        self._transition(State.CONNECTED, State.DISPATCHING)

        self._thread = threading.Thread(target=self._run, args=(runner,), daemon=True)
        self._thread.start()


    def interrupt(self):
        """ Release the wait in :func:`dispatch`, as a signal would.
        """

        self._interrupted.set()


    def shutdown(self, runner=None):
        """ Invoke the *runner* cleanup and raise :class:`SystemExit` with
            the :attr:`exit_status`. This is the shutdown path for a service
            embedded via :func:`start`; :func:`dispatch` ends the process
            outright instead.
        """

        self._stop(runner)
        sys.exit(self.exit_status)


    def _stop(self, runner):

        if runner is None:
            runner = self

        self._transition(State.DISPATCHING, State.SHUTTING_DOWN)
        runner.cleanup()
        self.state = State.CLOSED

        if self.workers is not None:
            self.workers.shutdown(wait=False, cancel_futures=True)


    def _on_signal(self, signum, frame):
        self.interrupt()


    def _transition(self, expected, new):

        if self.state != expected:
            raise RuntimeError('cannot go from %s to %s' % (self.state.value, new.value))

        self.state = new


    def _run(self, runner):

        for delivery in self._deliveries:
            try:
                request = protocol.parse_request(delivery.body)
            except protocol.ProtocolError as e:
                self.error_result(delivery, e, fields.DISPATCHER)
                continue

            delivery.request = request
            log.command(request)
            self._spawn(runner, request.command, delivery)

        # The consumer only ends when the session goes away. Unless that was
        # requested, the service is no longer reachable and has to stop.

        if self.state == State.DISPATCHING:
            logger.error('Message broker connection lost')
            self.interrupt()


    def _spawn(self, runner, command, delivery):

        if self.workers is None:
            thread = threading.Thread(target=self._execute, args=(runner, command, delivery), daemon=True)
            thread.start()
        else:
            self.workers.submit(self._execute, runner, command, delivery)


    def _execute(self, runner, command, delivery):
        """ Invoke the handler for a single command. A handler that raises
            before answering gets an error reply on its behalf.
        """

        try:
            runner.run_by_name(command, delivery)
        except Exception as e:
            if delivery.acked:
                logger.exception('Command %s failed after answering', command)
            else:
                self.error_result(delivery, e, 'Command ' + command)


    def run_by_name(self, command, delivery):
        self.run_common_command(command, delivery)


    def run_common_command(self, command, delivery):
        """ Execute one of the generic commands and answer the client. An
            unrecognized *command* is answered with an error.
        """

        if command == fields.PING:
            self.ping(delivery)
        elif command == fields.INFO and self.version is not None:
            self.info(delivery, self.version)
        else:
            error = 'Unknown command: ' + command
            self.error_result(delivery, error, fields.DISPATCHER)


    def ping(self, delivery):
        """ Answer about the service status with an empty message body.
        """

        self.answer(delivery, b'')


    def info(self, delivery, version):
        """ Answer with the *version* record, dated with the modification
            time of the running program.
        """

        executable = self.executable
        if executable is None:
            executable = sys.argv[0]

        try:
            modified = os.stat(executable).st_mtime
        except OSError as e:
            self.error_result(delivery, e, fields.EXECUTABLE)
            return

        version = version.stamp(modified)
        self.answer(delivery, json.dumps(version))


    def error_result(self, delivery, error, context):
        """ Answer the client with the *error* raised while doing *context*.
            This never interrupts the dispatch loop.
        """

        logger.error('%s: %s', context, error)
        self.answer(delivery, protocol.error_body(error, context))


    def answer(self, delivery, result):
        """ Send *result* to the reply queue of *delivery* and acknowledge
            the delivery.

            If publishing fails the failure is reported to the client through
            the error reply path, but only once: when the error reply cannot
            be published either, it is logged and dropped. Either way the
            delivery is acknowledged exactly once.
        """

        try:
            self._publish(delivery, result)
        except transport.TransportError as e:
            context = fields.PUBLISHING
            logger.error('%s: %s', context, e)

            try:
                self._publish(delivery, protocol.error_body(e, context))
            except transport.TransportError as e:
                logger.error('Reply to %s (correlation id %s) dropped: %s',
                             delivery.reply_to, delivery.correlation_id, e)

        self._acknowledge(delivery)


    def _publish(self, delivery, result):

        # A request without a reply-to address gets its answer dropped by
        # the default exchange.

        self.session.publish(
            delivery.reply_to or '',
            result,
            correlation_id=delivery.correlation_id,
            content_type=fields.CONTENT_TYPE,
        )


    def _acknowledge(self, delivery):

        try:
            delivery.ack()
        except transport.TransportError as e:
            logger.error('Failed to acknowledge %r: %s', delivery, e)



def run_mode_name(idle):
    """ Return the name of the run mode for the *idle* flag.
    """

    if idle:
        return 'idle'
    return 'normal'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
