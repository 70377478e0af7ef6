"""Tests for SentinelConfig validation and environment loading."""
import pytest

from schema_sentinel.core.config import (
    DEFAULT_DATABASE_URL,
    ConfigurationError,
    SentinelConfig,
    normalize_database_url,
)
from schema_sentinel.utils.changes import Severity

ENV_VARS = (
    "SENTINEL_SAMPLE_THRESHOLD",
    "SENTINEL_ADDITIVE_THRESHOLD",
    "SENTINEL_REHARDEN",
    "SENTINEL_MIN_ENUM_SAMPLES",
    "SENTINEL_MAX_ENUM_VALUES",
    "SENTINEL_MAX_STORED_SAMPLES",
    "SENTINEL_STORE_DRIVER",
    "SENTINEL_STORE_PATH",
    "DATABASE_URL",
    "SENTINEL_DRIFT_SEVERITY",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # No stray .env from the working directory
    return tmp_path / "missing.env"


class TestDefaults:

    def test_defaults(self):
        config = SentinelConfig()
        assert config.sample_threshold == 20
        assert config.additive_threshold == 0.95
        assert config.reharden is True
        assert config.min_enum_samples == 30
        assert config.max_enum_values == 8
        assert config.max_stored_samples == 50
        assert config.store_driver == "file"
        assert config.drift_log_level is Severity.BREAKING


class TestValidation:

    @pytest.mark.parametrize("overrides", [
        {"sample_threshold": 0},
        {"additive_threshold": 0.0},
        {"additive_threshold": 1.5},
        {"min_enum_samples": 0},
        {"max_enum_values": 0},
        {"sample_threshold": 60, "max_stored_samples": 50},
        {"store_driver": "redis"},
        {"drift_log_level": "CATASTROPHIC"},
    ])
    def test_rejected(self, overrides):
        with pytest.raises(ConfigurationError):
            SentinelConfig(**overrides)

    def test_threshold_equal_to_cap_is_allowed(self):
        assert SentinelConfig(sample_threshold=50, max_stored_samples=50).sample_threshold == 50

    def test_severity_names_are_coerced(self):
        assert SentinelConfig(drift_log_level="additive").drift_log_level is Severity.ADDITIVE

    def test_postgres_url_is_rewritten(self):
        config = SentinelConfig(database_url="postgres://u:p@db/sentinel")
        assert config.database_url == "postgresql://u:p@db/sentinel"

    def test_configuration_error_is_a_value_error(self):
        assert issubclass(ConfigurationError, ValueError)


class TestNormalizeDatabaseUrl:

    def test_other_urls_unchanged(self):
        assert normalize_database_url("sqlite:///x.db") == "sqlite:///x.db"
        assert normalize_database_url("postgresql://db/x") == "postgresql://db/x"


class TestFromEnv:

    def test_empty_environment_gives_defaults(self, clean_env):
        config = SentinelConfig.from_env(clean_env)
        assert config == SentinelConfig(database_url=DEFAULT_DATABASE_URL)

    def test_values_are_read(self, clean_env, monkeypatch):
        monkeypatch.setenv("SENTINEL_SAMPLE_THRESHOLD", "5")
        monkeypatch.setenv("SENTINEL_ADDITIVE_THRESHOLD", "0.8")
        monkeypatch.setenv("SENTINEL_REHARDEN", "no")
        monkeypatch.setenv("SENTINEL_STORE_DRIVER", " SQL ")
        monkeypatch.setenv("DATABASE_URL", "postgres://db/x")
        monkeypatch.setenv("SENTINEL_DRIFT_SEVERITY", "advisory")

        config = SentinelConfig.from_env(clean_env)

        assert config.sample_threshold == 5
        assert config.additive_threshold == 0.8
        assert config.reharden is False
        assert config.store_driver == "sql"
        assert config.database_url == "postgresql://db/x"
        assert config.drift_log_level is Severity.ADVISORY

    def test_blank_values_fall_back_to_defaults(self, clean_env, monkeypatch):
        monkeypatch.setenv("SENTINEL_SAMPLE_THRESHOLD", "")
        monkeypatch.setenv("SENTINEL_REHARDEN", " ")
        config = SentinelConfig.from_env(clean_env)
        assert config.sample_threshold == 20
        assert config.reharden is True

    @pytest.mark.parametrize("name, value", [
        ("SENTINEL_SAMPLE_THRESHOLD", "many"),
        ("SENTINEL_ADDITIVE_THRESHOLD", "most"),
        ("SENTINEL_REHARDEN", "maybe"),
    ])
    def test_malformed_values(self, clean_env, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ConfigurationError, match=name):
            SentinelConfig.from_env(clean_env)

    def test_dotenv_file_is_loaded(self, clean_env, monkeypatch, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("SENTINEL_SAMPLE_THRESHOLD=7\n", encoding="utf-8")
        # load_dotenv writes into os.environ; let monkeypatch undo it
        monkeypatch.setenv("SENTINEL_SAMPLE_THRESHOLD", "")
        monkeypatch.delenv("SENTINEL_SAMPLE_THRESHOLD")

        assert SentinelConfig.from_env(env_file).sample_threshold == 7
