"""
Configuration
==============
All tunables for the sentinel in one explicit, validated value.

Values come from keyword arguments (tests, embedding apps) or from the
environment via ``SentinelConfig.from_env()``, which also loads a ``.env``
file if one is present.

  SENTINEL_SAMPLE_THRESHOLD    samples collected before a schema is hardened
  SENTINEL_ADDITIVE_THRESHOLD  presence frequency needed to mark a field required
  SENTINEL_REHARDEN            archive + resample after drift ("true"/"false")
  SENTINEL_MIN_ENUM_SAMPLES    samples needed before enums are declared
  SENTINEL_MAX_ENUM_VALUES     max distinct strings for an enum
  SENTINEL_MAX_STORED_SAMPLES  cap on pending samples per endpoint
  SENTINEL_STORE_DRIVER        memory | file | sql
  SENTINEL_STORE_PATH          directory for the file store
  DATABASE_URL                 SQLAlchemy URL for the sql store
  SENTINEL_DRIFT_SEVERITY      lowest severity logged as a warning
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from schema_sentinel.utils.changes import Severity

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))  # src/
_DATA_DIR = os.path.join(_BASE_DIR, "..", "data")

DEFAULT_STORE_PATH = os.path.join(_DATA_DIR, "sentinel")
DEFAULT_DATABASE_URL = f"sqlite:///{os.path.join(_DATA_DIR, 'sentinel.db')}"

STORE_DRIVERS = ("memory", "file", "sql")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigurationError(ValueError):
    """Raised when a configuration value is missing or out of range."""


def normalize_database_url(url: str) -> str:
    """
    Hosting providers still emit the legacy "postgres://" scheme which
    SQLAlchemy no longer accepts.
    """
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class SentinelConfig:
    sample_threshold: int = 20
    additive_threshold: float = 0.95
    reharden: bool = True
    min_enum_samples: int = 30
    max_enum_values: int = 8
    max_stored_samples: int = 50
    store_driver: str = "file"
    store_path: str = DEFAULT_STORE_PATH
    database_url: str = DEFAULT_DATABASE_URL
    drift_log_level: Severity = Severity.BREAKING

    def __post_init__(self):
        if self.sample_threshold < 1:
            raise ConfigurationError("sample_threshold must be at least 1")
        if not 0.0 < self.additive_threshold <= 1.0:
            raise ConfigurationError("additive_threshold must be in (0, 1]")
        if self.min_enum_samples < 1:
            raise ConfigurationError("min_enum_samples must be at least 1")
        if self.max_enum_values < 1:
            raise ConfigurationError("max_enum_values must be at least 1")
        if self.max_stored_samples < self.sample_threshold:
            # The collection would be trimmed before it could ever reach the threshold.
            raise ConfigurationError(
                f"max_stored_samples ({self.max_stored_samples}) must be >= "
                f"sample_threshold ({self.sample_threshold})"
            )
        if self.store_driver not in STORE_DRIVERS:
            raise ConfigurationError(
                f"store_driver must be one of {', '.join(STORE_DRIVERS)}, got {self.store_driver!r}"
            )
        if not isinstance(self.drift_log_level, Severity):
            try:
                object.__setattr__(self, "drift_log_level", Severity(str(self.drift_log_level).upper()))
            except ValueError:
                raise ConfigurationError(f"unknown severity {self.drift_log_level!r}") from None
        object.__setattr__(self, "database_url", normalize_database_url(self.database_url))

    @classmethod
    def from_env(cls, dotenv_path=None) -> "SentinelConfig":
        """Build a config from environment variables (after loading .env)."""
        load_dotenv(dotenv_path)
        return cls(
            sample_threshold=_env_int("SENTINEL_SAMPLE_THRESHOLD", 20),
            additive_threshold=_env_float("SENTINEL_ADDITIVE_THRESHOLD", 0.95),
            reharden=_env_bool("SENTINEL_REHARDEN", True),
            min_enum_samples=_env_int("SENTINEL_MIN_ENUM_SAMPLES", 30),
            max_enum_values=_env_int("SENTINEL_MAX_ENUM_VALUES", 8),
            max_stored_samples=_env_int("SENTINEL_MAX_STORED_SAMPLES", 50),
            store_driver=os.environ.get("SENTINEL_STORE_DRIVER", "file").strip().lower(),
            store_path=os.environ.get("SENTINEL_STORE_PATH", DEFAULT_STORE_PATH),
            database_url=os.environ.get("DATABASE_URL", "") or DEFAULT_DATABASE_URL,
            drift_log_level=os.environ.get("SENTINEL_DRIFT_SEVERITY", "BREAKING"),
        )
