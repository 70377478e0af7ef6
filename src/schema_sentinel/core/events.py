"""
Events
=======
Notifications published while an endpoint moves through sampling, hardening
and drift. A sink is any callable accepting one event; it is called
synchronously and its failures never reach the sentinel's own logic.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from schema_sentinel.core.schema import StoredSchema

logger = logging.getLogger("schema_sentinel")


@dataclass(frozen=True)
class SampleCollected:
    endpoint_key: str
    payload: Any


@dataclass(frozen=True)
class SchemaHardened:
    endpoint_key: str
    schema: StoredSchema


@dataclass(frozen=True)
class SchemaDriftDetected:
    drift: "SchemaDrift"  # noqa: F821  (defined in utils.drift_detector)


Event = Union[SampleCollected, SchemaHardened, SchemaDriftDetected]
EventSink = Callable[[Event], Any]


def publish_safely(sink: Optional[EventSink], event: Event) -> None:
    """Deliver ``event`` to ``sink``, logging (not raising) any sink failure."""
    if sink is None:
        return
    try:
        sink(event)
    except Exception as e:
        logger.error(f"❌ Event sink failed on {type(event).__name__}: {e}")
