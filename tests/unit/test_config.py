"""Unit tests for configuration management."""

import os
from unittest.mock import patch

import pytest

from gremlink.core.config import GremlinkConfig, get_config, reload_config
from gremlink.graph.connection import NeptuneConfig
from gremlink.graph.driver import GRAPHSON_V2
from gremlink.graph.executor import QueryRetryPolicy


class TestGremlinkConfig:
    """Tests for GremlinkConfig."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            config = GremlinkConfig(_env_file=None)

            assert config.retry_max_attempts == 5
            assert config.retry_interval_ms == 1000
            assert config.label_separator == "::"
            assert config.log_level == "WARNING"

    def test_env_override(self) -> None:
        """Test environment variable override."""
        with patch.dict(
            os.environ,
            {
                "GREMLINK_RETRY_MAX_ATTEMPTS": "3",
                "GREMLINK_RETRY_INTERVAL_MS": "250",
                "GREMLINK_LABEL_SEPARATOR": "|",
            },
        ):
            config = GremlinkConfig(_env_file=None)
            assert config.retry_max_attempts == 3
            assert config.retry_interval_ms == 250
            assert config.label_separator == "|"

    def test_validation_attempts_min(self) -> None:
        with patch.dict(os.environ, {"GREMLINK_RETRY_MAX_ATTEMPTS": "0"}):
            with pytest.raises(ValueError):
                GremlinkConfig(_env_file=None)

    def test_validation_interval_negative(self) -> None:
        with patch.dict(os.environ, {"GREMLINK_RETRY_INTERVAL_MS": "-1"}):
            with pytest.raises(ValueError):
                GremlinkConfig(_env_file=None)

    def test_get_config_cached(self) -> None:
        assert get_config() is get_config()

    def test_reload_config(self) -> None:
        first = get_config()
        with patch.dict(os.environ, {"GREMLINK_RETRY_MAX_ATTEMPTS": "7"}):
            reloaded = reload_config()
            assert reloaded is not first
            assert reloaded.retry_max_attempts == 7
        reload_config()

    def test_retry_policy_from_config(self) -> None:
        config = GremlinkConfig(_env_file=None, retry_max_attempts=2, retry_interval_ms=10)
        policy = QueryRetryPolicy.from_config(config)
        assert policy.max_attempts == 2
        assert policy.interval_ms == 10


class TestNeptuneConfig:
    """Tests for NeptuneConfig.from_env."""

    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = NeptuneConfig.from_env()
            assert config.host is None
            assert config.port == 8182
            assert config.use_iam is False
            assert config.path == "/gremlin"
            assert config.mime_type == GRAPHSON_V2
            assert config.traversal_source == "g"

    def test_unprefixed_variables(self) -> None:
        with patch.dict(
            os.environ,
            {"NEPTUNE_ENDPOINT": "db.example.com", "NEPTUNE_PORT": "8183", "USE_IAM": "true"},
            clear=True,
        ):
            config = NeptuneConfig.from_env()
            assert config.host == "db.example.com"
            assert config.port == 8183
            assert config.use_iam is True

    def test_prefixed_variables_win(self) -> None:
        with patch.dict(
            os.environ,
            {"NEPTUNE_ENDPOINT": "plain.example.com", "GREMLINK_NEPTUNE_ENDPOINT": "prefixed.example.com"},
            clear=True,
        ):
            assert NeptuneConfig.from_env().host == "prefixed.example.com"

    def test_url(self) -> None:
        config = NeptuneConfig(host="db.example.com", port=8182)
        assert config.url == "wss://db.example.com:8182/gremlin"
