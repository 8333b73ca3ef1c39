"""Broker session interface.

This is the (small) contract that broker session implementations follow.
The dispatcher and the client only ever talk to a :class:`Session`, which
keeps them independent of pika and lets the tests substitute an in-memory
broker.
"""

from __future__ import annotations

import queue
import time
from abc import ABC, abstractmethod
from typing import Callable, Iterator, Optional


# Transport agnostic exceptions

class TransportError(Exception):
    """Base class for all transport-layer errors."""


class TransportTimeout(TransportError):
    """A reply did not arrive in the requested time."""


class TransportConnectionError(TransportError):
    """The session could not establish or maintain a broker connection."""


class Delivery:
    """One message received from a queue.

    The delivery carries the acknowledgment obligation: whichever code path
    finishes handling it calls :func:`ack` exactly once. Deliveries consumed
    with automatic acknowledgment start out acknowledged.
    """

    def __init__(
        self,
        body: bytes,
        correlation_id: Optional[str] = None,
        reply_to: Optional[str] = None,
        content_type: Optional[str] = None,
        acknowledge: Optional[Callable[[], None]] = None,
    ):
        self.body = body
        self.correlation_id = correlation_id
        self.reply_to = reply_to
        self.content_type = content_type
        self.request = None

        self._acknowledge = acknowledge
        self._acked = acknowledge is None

    @property
    def acked(self) -> bool:
        return self._acked

    def ack(self) -> None:
        if self._acked:
            raise RuntimeError("delivery already acknowledged")
        self._acked = True
        self._acknowledge()

    def __repr__(self) -> str:
        return (
            f"Delivery(correlation_id={self.correlation_id!r}, "
            f"reply_to={self.reply_to!r}, body={self.body!r})"
        )


class Consumer:
    """Lazy, unbounded sequence of :class:`Delivery` for one queue.

    The session pushes deliveries in arrival order; a ``None`` marks the end
    of the sequence, after which the consumer stays exhausted.
    """

    def __init__(self, inbox: Optional[queue.Queue] = None):
        self.inbox = inbox if inbox is not None else queue.Queue()
        self.exhausted = False

    def put(self, delivery: Delivery) -> None:
        self.inbox.put(delivery)

    def end(self) -> None:
        self.inbox.put(None)

    def get(self, timeout: Optional[float] = None) -> Optional[Delivery]:
        """Return the next delivery, or None if the sequence has ended.
        Raise :class:`TransportTimeout` if *timeout* seconds elapse first."""

        if self.exhausted:
            return None

        try:
            delivery = self.inbox.get(timeout=timeout)
        except queue.Empty:
            raise TransportTimeout(f"no delivery in {timeout:.2f} sec")

        if delivery is None:
            self.exhausted = True
        return delivery

    def __iter__(self) -> Iterator[Delivery]:
        while True:
            delivery = self.get()
            if delivery is None:
                return
            yield delivery


class Session(ABC):
    """Minimal contract for a broker session: one connection, one channel."""

    @abstractmethod
    def declare_queue(
        self,
        name: str = "",
        exclusive: bool = False,
        auto_delete: bool = False,
        durable: bool = False,
    ) -> str:
        """Declare a queue and return its name; an empty *name* asks the
        broker to pick one."""

    @abstractmethod
    def set_prefetch(self, count: int) -> None:
        """Bound the number of unacknowledged deliveries held at once."""

    @abstractmethod
    def consume(self, queue: str, auto_ack: bool = False) -> Consumer:
        """Start consuming from *queue* immediately."""

    @abstractmethod
    def publish(
        self,
        routing_key: str,
        body: bytes,
        correlation_id: Optional[str] = None,
        reply_to: Optional[str] = None,
        content_type: Optional[str] = None,
        exchange: str = "",
    ) -> None:
        """Publish *body* through *exchange* with the given properties."""

    @abstractmethod
    def close(self) -> None:
        """Tear down the channel and connection; end every consumer."""

    @property
    def is_open(self) -> bool:
        """Whether the session is currently connected."""
        return False


def deadline(timeout: Optional[float]) -> Optional[float]:
    """Convert a relative *timeout* to an absolute monotonic deadline."""

    if timeout is None:
        return None
    return time.monotonic() + timeout


def remaining(deadline: Optional[float]) -> Optional[float]:
    """Seconds left until *deadline*, never negative; None means forever."""

    if deadline is None:
        return None
    return max(0.0, deadline - time.monotonic())
