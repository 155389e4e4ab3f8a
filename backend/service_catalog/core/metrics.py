"""
Prometheus counters for the event subsystem.

The administrative API exposes them on /metrics through
prometheus_flask_exporter, which serves the default registry.
"""

from prometheus_client import Counter

INBOUND_EVENTS = Counter(
    "service_catalog_inbound_events_total",
    "Inbound events handled, by source entity and outcome",
    ["source", "outcome"],
)

OUTBOUND_EVENTS = Counter(
    "service_catalog_outbound_events_total",
    "Outbound service events, by routing key and delivery result",
    ["routing_key", "result"],
)

UNIT_OF_WORK_RETRIES = Counter(
    "service_catalog_unit_of_work_retries_total",
    "Units of work retried after a concurrent write conflict",
)
