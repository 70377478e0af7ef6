"""
Sampling Service
=================
Collects responses for an endpoint until there are enough of them, then
hardens the collected samples into the endpoint's baseline schema.
"""

import logging
from typing import Any, List, Optional

from schema_sentinel.core.config import SentinelConfig
from schema_sentinel.core.events import EventSink, SampleCollected, SchemaHardened, publish_safely
from schema_sentinel.core.schema import StoredSchema
from schema_sentinel.store.base import SchemaStore
from schema_sentinel.utils.detectors import EnumCandidateDetector
from schema_sentinel.utils.inference import InferenceEngine
from schema_sentinel.utils.schema_hardening import SchemaMerger

logger = logging.getLogger("schema_sentinel")


class SampleAccumulator:

    def __init__(
        self,
        store: SchemaStore,
        engine: Optional[InferenceEngine] = None,
        merger: Optional[SchemaMerger] = None,
        sample_threshold: int = 20,
        event_sink: Optional[EventSink] = None,
    ):
        self.store = store
        self.engine = engine or InferenceEngine()
        self.merger = merger or SchemaMerger()
        self.sample_threshold = sample_threshold
        self.event_sink = event_sink

    @classmethod
    def from_config(
        cls,
        store: SchemaStore,
        config: SentinelConfig,
        engine: Optional[InferenceEngine] = None,
        event_sink: Optional[EventSink] = None,
    ) -> "SampleAccumulator":
        merger = SchemaMerger(
            additive_threshold=config.additive_threshold,
            enum_detector=EnumCandidateDetector(config.min_enum_samples, config.max_enum_values),
        )
        return cls(store, engine, merger, config.sample_threshold, event_sink)

    def accumulate(self, key: str, payload: Any) -> bool:
        """
        Record one sample for ``key``. Returns True when this call hardened
        the endpoint's schema.
        """
        with self.store.lock(key):
            self.store.add_sample(key, payload)
            publish_safely(self.event_sink, SampleCollected(key, payload))

            samples = self.store.get_samples(key)
            logger.debug(f"📋 Sample {len(samples)}/{self.sample_threshold} captured for {key}")

            if len(samples) < self.sample_threshold:
                return False

            self.harden(key, samples)
            return True

    def harden(self, key: str, samples: List[Any]) -> StoredSchema:
        """Merge ``samples`` into a baseline, persist it, and clear the samples."""
        schemas = [self.engine.infer(payload) for payload in samples]
        stored = StoredSchema.create(self.merger.merge(schemas), len(samples))

        self.store.put(key, stored)
        publish_safely(self.event_sink, SchemaHardened(key, stored))
        self.store.clear_samples(key)

        logger.info(f"🔒 Schema hardened for {key} from {len(samples)} samples ({stored.version[:19]})")
        return stored
