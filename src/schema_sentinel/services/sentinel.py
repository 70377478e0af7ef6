"""
Sentinel
=========
The per-endpoint state machine that ties inference, hardening and drift
detection together.

  Sampling  (no schema stored)  → every 2xx JSON response is kept as a sample
                                  until the threshold is reached, then the
                                  samples are hardened into a baseline.
  Hardened  (schema stored)     → every response is inferred and diffed
                                  against the baseline. On drift the change is
                                  reported and, with rehardening enabled, the
                                  baseline is archived and this response opens
                                  a new sampling window.

Both branches run under ``store.lock(key)`` so concurrent responses for the
same endpoint cannot double-harden or double-archive.
"""

import logging
from typing import Any, Dict, Optional

from schema_sentinel.core.config import SentinelConfig
from schema_sentinel.core.events import EventSink
from schema_sentinel.core.schema import StoredSchema
from schema_sentinel.services.reporting import DriftReporter
from schema_sentinel.services.sampling import SampleAccumulator
from schema_sentinel.store.base import SchemaStore
from schema_sentinel.store.file import FileSchemaStore
from schema_sentinel.store.memory import InMemorySchemaStore
from schema_sentinel.store.sql import SqlSchemaStore
from schema_sentinel.utils.drift_detector import DriftDetector, SchemaDrift, check_schema_node
from schema_sentinel.utils.inference import InferenceEngine
from schema_sentinel.utils.normalization import EndpointNormalizer

logger = logging.getLogger("schema_sentinel")

DIFF_ENDPOINT = "diff"


def build_store(config: SentinelConfig) -> SchemaStore:
    """Instantiate the store backend selected by ``config.store_driver``."""
    if config.store_driver == "memory":
        return InMemorySchemaStore(config.max_stored_samples)
    if config.store_driver == "sql":
        return SqlSchemaStore(config.database_url, config.max_stored_samples)
    return FileSchemaStore(config.store_path, config.max_stored_samples)


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class Sentinel:

    def __init__(
        self,
        config: SentinelConfig,
        store: SchemaStore,
        event_sink: Optional[EventSink] = None,
        normalizer: Optional[EndpointNormalizer] = None,
    ):
        self.config = config
        self.store = store
        self.normalizer = normalizer or EndpointNormalizer()
        self.engine = InferenceEngine()
        self.detector = DriftDetector()
        self.accumulator = SampleAccumulator.from_config(store, config, self.engine, event_sink)
        self.reporter = DriftReporter(event_sink, config.drift_log_level)

    @classmethod
    def from_config(cls, config: SentinelConfig, event_sink: Optional[EventSink] = None) -> "Sentinel":
        return cls(config, build_store(config), event_sink)

    # ── Entry point ──────────────────────────────────────────────────────────

    def process(self, method: str, uri: str, status_code: int, payload: Any) -> Optional[SchemaDrift]:
        """
        Feed one response into the state machine. Returns the drift that was
        reported, or None. Non-2xx responses and payloads that are not JSON
        objects/arrays are ignored.
        """
        if not _is_success(status_code) or not isinstance(payload, (dict, list)):
            return None

        key = self.normalizer.normalize(method, uri)

        with self.store.lock(key):
            if not self.store.has(key):
                self.accumulator.accumulate(key, payload)
                return None

            hardened = self.store.get(key)
            if hardened is None:
                logger.warning(f"⚠️ Store lists {key} as hardened but returned no schema, skipping drift check")
                return None

            drift = self.detector.detect(key, hardened, self.engine.infer(payload))
            if drift is None:
                return None

            self.reporter.report(drift)

            if self.config.reharden:
                self.store.archive(key, hardened)
                logger.info(f"🗃️  Archived baseline {hardened.version[:19]} for {key}, resampling")
                self.accumulator.accumulate(key, payload)

            return drift

    # ── Helpers ──────────────────────────────────────────────────────────────

    def profile(self, payload: Any) -> Dict[str, Any]:
        """Single-payload inference, nothing is stored."""
        return self.engine.infer(payload)

    def diff(self, baseline: Dict[str, Any], current: Dict[str, Any], endpoint: str = DIFF_ENDPOINT) -> Optional[SchemaDrift]:
        """
        Diff two schemas outside the state machine. Either argument may be a
        persisted schema document or a bare schema node. Malformed schemas
        raise ValueError.
        """
        if StoredSchema.is_document(baseline):
            hardened = StoredSchema.from_dict(baseline)
        else:
            hardened = StoredSchema.create(baseline, 0)

        inferred = current["jsonSchema"] if StoredSchema.is_document(current) else current
        check_schema_node(hardened.json_schema)
        check_schema_node(inferred)
        return self.detector.detect(endpoint, hardened, inferred)
