"""
In-process message transport.

Delivers synchronously to every subscriber whose binding key matches the
routing key on the same exchange, and keeps a record of everything sent.
Used by the tests and by the ``replay`` management command; a broker
client implements the same IMessageTransport port in deployment.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Tuple

from service_catalog.domain.interfaces import IMessageTransport, MessageHandler
from service_catalog.messaging.codec import decode
from service_catalog.messaging.topics import topic_matches

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SentMessage:
    exchange: str
    routing_key: str
    body: bytes

    def json(self):
        return decode(self.body)


class InMemoryTransport(IMessageTransport):
    """Simple in-memory transport with topic routing."""

    def __init__(self) -> None:
        self._subscriptions: Dict[str, List[Tuple[str, MessageHandler]]] = defaultdict(list)
        self.sent: List[SentMessage] = []

    def send(self, exchange: str, routing_key: str, body: bytes) -> None:
        self.sent.append(SentMessage(exchange, routing_key, body))
        for binding_key, handler in list(self._subscriptions.get(exchange, ())):
            if not topic_matches(binding_key, routing_key):
                continue
            try:
                handler(exchange, routing_key, body)
            except Exception:
                # A consumer failure never reaches the sender
                logger.exception(
                    "Subscriber failed on in-memory delivery",
                    extra={
                        "context": {
                            "exchange": exchange,
                            "routing_key": routing_key,
                            "binding_key": binding_key,
                        }
                    },
                )

    def subscribe(self, exchange: str, binding_key: str, handler: MessageHandler) -> None:
        self._subscriptions[exchange].append((binding_key, handler))
        logger.debug(
            "In-memory subscription added",
            extra={"context": {"exchange": exchange, "binding_key": binding_key}},
        )

    def messages(self, exchange: str = None, routing_key: str = None) -> List[SentMessage]:
        """Sent messages, optionally filtered by exchange and exact routing key."""
        return [
            m
            for m in self.sent
            if (exchange is None or m.exchange == exchange)
            and (routing_key is None or m.routing_key == routing_key)
        ]

    def clear(self) -> None:
        self.sent.clear()
