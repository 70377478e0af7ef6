import logging
from typing import Optional

from schema_sentinel.core.events import EventSink, SchemaDriftDetected, publish_safely
from schema_sentinel.utils.changes import Severity
from schema_sentinel.utils.drift_detector import SchemaDrift

logger = logging.getLogger("schema_sentinel")


class DriftReporter:
    """
    Logs every drift and forwards it to the event sink.

    Drifts at or above ``log_threshold`` are logged as warnings (BREAKING
    ones as errors); milder drifts are logged at INFO.
    """

    def __init__(self, event_sink: Optional[EventSink] = None, log_threshold: Severity = Severity.BREAKING):
        self.event_sink = event_sink
        self.log_threshold = log_threshold

    def report(self, drift: SchemaDrift) -> None:
        summary = ", ".join(f"{c.change_type}@{c.path}" for c in drift.changes)

        if drift.severity.rank < self.log_threshold.rank:
            logger.info(f"📋 {drift.severity.value} drift on {drift.endpoint}: {summary}")
        elif drift.severity is Severity.BREAKING:
            logger.error(f"🚨 BREAKING drift on {drift.endpoint}: {summary}")
        else:
            logger.warning(f"⚠️ {drift.severity.value} drift on {drift.endpoint}: {summary}")

        publish_safely(self.event_sink, SchemaDriftDetected(drift))
