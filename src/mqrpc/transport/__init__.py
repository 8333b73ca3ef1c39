"""Broker session implementations."""

from .base import (
    Consumer,
    Delivery,
    Session,
    TransportError,
    TransportTimeout,
    TransportConnectionError,
)

from . import rabbitmq
from .rabbitmq import connect
