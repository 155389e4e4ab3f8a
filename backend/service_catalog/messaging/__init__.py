"""Broker-facing adapters: wire codec, topic routing, publisher and consumer."""

from .consumer import EventConsumer
from .publisher import ServiceEventPublisher
from .topics import topic_matches
from .transport import InMemoryTransport

__all__ = [
    "EventConsumer",
    "InMemoryTransport",
    "ServiceEventPublisher",
    "topic_matches",
]
