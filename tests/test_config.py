"""
Tests for RegistryConfig.
"""

import pytest

from record_registry import MAX_IDENTIFIER_BYTES, MAX_NAME_BYTES, MAX_URL_BYTES, RegistryConfig


class TestDefaults:

    def test_default_limits(self):
        config = RegistryConfig()

        assert config.max_identifier_bytes == MAX_IDENTIFIER_BYTES == 64
        assert config.max_name_bytes == MAX_NAME_BYTES == 128
        assert config.max_url_bytes == MAX_URL_BYTES == 256
        assert config.digest_algorithm == "sha3_256"
        assert config.log_rejections is True
        assert config.event_history_limit is None


class TestValidation:

    @pytest.mark.parametrize("field", ["max_identifier_bytes", "max_name_bytes", "max_url_bytes"])
    @pytest.mark.parametrize("value", [0, -1, True, "64"])
    def test_limits_must_be_positive_ints(self, field, value):
        with pytest.raises(ValueError):
            RegistryConfig(**{field: value})

    def test_unknown_digest(self):
        with pytest.raises(ValueError):
            RegistryConfig(digest_algorithm="not-a-hash")

    def test_variable_length_digest_rejected(self):
        with pytest.raises(ValueError):
            RegistryConfig(digest_algorithm="shake_128")

    def test_log_level(self):
        with pytest.raises(ValueError):
            RegistryConfig(log_level="verbose")

    def test_history_limit(self):
        with pytest.raises(ValueError):
            RegistryConfig(event_history_limit=0)


class TestFromDict:

    def test_round_trip(self):
        config = RegistryConfig(max_name_bytes=32, json_logs=False)
        assert RegistryConfig.from_dict(config.to_dict()) == config

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValueError, match="max_title_bytes"):
            RegistryConfig.from_dict({"max_title_bytes": 10})


class TestFromEnv:

    def test_reads_prefixed_variables(self):
        env = {
            "RECORD_REGISTRY_MAX_NAME_BYTES": "64",
            "RECORD_REGISTRY_DIGEST_ALGORITHM": "sha256",
            "RECORD_REGISTRY_LOG_LEVEL": "DEBUG",
            "RECORD_REGISTRY_JSON_LOGS": "off",
            "RECORD_REGISTRY_EVENT_HISTORY_LIMIT": "1000",
            "UNRELATED": "x",
        }

        config = RegistryConfig.from_env(environ=env)

        assert config.max_name_bytes == 64
        assert config.digest_algorithm == "sha256"
        assert config.log_level == "debug"
        assert config.json_logs is False
        assert config.event_history_limit == 1000
        assert config.max_url_bytes == 256

    def test_custom_prefix(self):
        config = RegistryConfig.from_env(prefix="REG_", environ={"REG_LOG_REJECTIONS": "no"})
        assert config.log_rejections is False

    def test_bad_boolean(self):
        with pytest.raises(ValueError):
            RegistryConfig.from_env(environ={"RECORD_REGISTRY_JSON_LOGS": "maybe"})

    def test_empty_environment_gives_defaults(self):
        assert RegistryConfig.from_env(environ={}) == RegistryConfig()

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("RECORD_REGISTRY_MAX_URL_BYTES", "512")
        assert RegistryConfig.from_env().max_url_bytes == 512
