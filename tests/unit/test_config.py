"""Tests for operator configuration."""

from __future__ import annotations

import pytest

from nutanix_cluster_operator.config import OperatorConfig, load_config


class TestLoadConfig:
    """Test cases for load_config."""

    def test_defaults(self, monkeypatch):
        for name in (
            "MAX_CONCURRENT_RECONCILES",
            "METRICS_PORT",
            "TASK_POLL_INTERVAL_SECONDS",
            "K8S_REQUEST_TIMEOUT_SECONDS",
            "K8S_RATE_LIMIT_PER_SECOND",
            "PRISM_REQUEST_TIMEOUT_SECONDS",
        ):
            monkeypatch.delenv(name, raising=False)

        assert load_config() == OperatorConfig()

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("MAX_CONCURRENT_RECONCILES", "4")
        monkeypatch.setenv("METRICS_PORT", "9090")
        monkeypatch.setenv("TASK_POLL_INTERVAL_SECONDS", "0.5")

        config = load_config()

        assert config.max_concurrent_reconciles == 4
        assert config.metrics_port == 9090
        assert config.task_poll_interval == 0.5

    def test_empty_value_uses_default(self, monkeypatch):
        monkeypatch.setenv("METRICS_PORT", "")
        assert load_config().metrics_port == 8080

    def test_non_numeric(self, monkeypatch):
        monkeypatch.setenv("MAX_CONCURRENT_RECONCILES", "many")
        with pytest.raises(ValueError, match="MAX_CONCURRENT_RECONCILES"):
            load_config()

    def test_non_positive(self, monkeypatch):
        monkeypatch.setenv("PRISM_REQUEST_TIMEOUT_SECONDS", "0")
        with pytest.raises(ValueError, match="PRISM_REQUEST_TIMEOUT_SECONDS"):
            load_config()
