"""
Typed outcome of handling one inbound event.

Handlers never raise to the broker client. Instead they return a
HandlingResult that separates expected drops (orphans, unknown statuses,
stale or malformed payloads) from unexpected failures, so the latter stay
visible in logs, metrics and Sentry without triggering redelivery.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import sentry_sdk

from service_catalog.core.metrics import INBOUND_EVENTS

logger = logging.getLogger(__name__)


class HandlingOutcome(Enum):
    APPLIED = "applied"
    DROPPED_ORPHAN = "dropped_orphan"
    DROPPED_UNKNOWN_STATUS = "dropped_unknown_status"
    DROPPED_STALE = "dropped_stale"
    DROPPED_MALFORMED = "dropped_malformed"
    FAILED = "failed"


@dataclass(frozen=True)
class HandlingResult:
    outcome: HandlingOutcome
    event_id: Optional[int] = None
    detail: str = ""
    published: int = 0

    @property
    def is_expected(self) -> bool:
        """False only for failures that need operator attention."""
        return self.outcome != HandlingOutcome.FAILED

    @property
    def applied(self) -> bool:
        return self.outcome == HandlingOutcome.APPLIED


def report(source: str, result: HandlingResult, exc: Optional[BaseException] = None) -> HandlingResult:
    """Count the outcome and forward unexpected failures to Sentry."""
    INBOUND_EVENTS.labels(source=source, outcome=result.outcome.value).inc()
    if result.outcome == HandlingOutcome.FAILED and exc is not None:
        sentry_sdk.capture_exception(exc)
    return result


def failed(source: str, event_id: Optional[int], exc: BaseException) -> HandlingResult:
    """Log an unexpected handler failure and consume the event."""
    logger.error(
        f"Unexpected failure handling {source} event, event consumed without retry",
        extra={
            "context": {
                "source": source,
                "event_id": event_id,
                "error": str(exc),
                "error_type": type(exc).__name__,
            }
        },
        exc_info=True,
    )
    return report(
        source,
        HandlingResult(HandlingOutcome.FAILED, event_id, detail=str(exc)),
        exc,
    )


def malformed(source: str, detail: str, event_id: Optional[int] = None) -> HandlingResult:
    logger.error(
        f"Malformed {source} event dropped",
        extra={"context": {"source": source, "event_id": event_id, "detail": detail}},
    )
    return report(
        source, HandlingResult(HandlingOutcome.DROPPED_MALFORMED, event_id, detail=detail)
    )
